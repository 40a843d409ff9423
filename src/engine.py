import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from models import Transaction, TransactionType, ClientAccount, MalformedTransactionError, Outcome, ProcessingStats, validate_amount
from state import StateManager
from processor import TransactionProcessor

logger = logging.getLogger(__name__)

# Client ids are 16-bit and transaction ids 32-bit unsigned.
MAX_IDS = {"client": 0xFFFF, "tx": 0xFFFFFFFF}


class PaymentsEngine:
    """
    Folds a transaction stream through the processor, strictly in input order.
    Business-rule rejections are counted and skipped; schema errors abort the run.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def state(self) -> StateManager:
        return self._state

    def apply(self, transaction: Transaction) -> Outcome:
        """Apply one transaction and record its outcome."""
        outcome = self._processor.process_transaction(transaction)
        self._stats.record(outcome)
        return outcome

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return final account states."""
        for transaction in transactions:
            self.apply(transaction)

        logger.info(f"Processed: {self._stats.processed}, Applied: {self._stats.applied}, Rejected: {self._stats.rejected}")
        for reason, count in self._stats.rejections_by_reason.items():
            logger.info(f"  {reason.value}: {count}")

        return self._state.get_all_accounts()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        return self.process(read_transactions(filepath))


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """
    Lazily read transactions from a CSV file with a `type, client, tx, amount` header.

    Raises:
        MalformedTransactionError: on the first row that cannot be parsed.
        OSError: if the file cannot be read.
    """
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                transaction = parse_csv_row(row)
            except MalformedTransactionError as e:
                raise MalformedTransactionError(f"{filepath}, line {reader.line_num}: {e}") from e
            if transaction is not None:
                yield transaction


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """
    Parse CSV row into Transaction. Returns None for a blank row.

    Raises:
        MalformedTransactionError: unknown type, bad ids, bad or missing amount.
    """
    normalized = {
        k.strip(): (v or "").strip()
        for k, v in row.items()
        if isinstance(k, str)
    }
    if not any(normalized.values()):
        return None

    try:
        transaction_type = TransactionType(normalized.get("type", "").lower())
    except ValueError:
        raise MalformedTransactionError(f"unknown transaction type {normalized.get('type')!r}") from None

    client_id = _parse_id(normalized, "client")
    transaction_id = _parse_id(normalized, "tx")

    # Disputes, resolves and chargebacks take their amount from the referenced transaction.
    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str and transaction_type.carries_amount:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise MalformedTransactionError(f"invalid amount {amount_str!r}") from None

    validate_amount(transaction_type, transaction_id, amount)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(normalized: Dict[str, str], column: str) -> int:
    value = normalized.get(column, "")
    try:
        parsed = int(value)
    except ValueError:
        raise MalformedTransactionError(f"invalid {column} id {value!r}") from None
    if not 0 <= parsed <= MAX_IDS[column]:
        raise MalformedTransactionError(f"{column} id {value!r} out of range")
    return parsed
