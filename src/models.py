from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


class RejectionReason(Enum):
    INSUFFICIENT_FUNDS = "insufficient funds"
    DUPLICATE_TRANSACTION = "duplicate transaction id"
    UNKNOWN_TRANSACTION = "unknown transaction"
    NOT_A_DEPOSIT = "only deposits can be disputed"
    ALREADY_DISPUTED = "transaction already disputed"
    ALREADY_CHARGED_BACK = "transaction already charged back"
    NOT_DISPUTED = "transaction is not disputed"


class DisputeStatus(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class MalformedTransactionError(ValueError):
    """Raised when a record violates the input schema. Aborts the run."""


def validate_amount(transaction_type: TransactionType, transaction_id: int, amount: Optional[Decimal]) -> None:
    """Deposits and withdrawals need a finite, non-negative amount."""
    if not transaction_type.carries_amount:
        return
    if amount is None:
        raise MalformedTransactionError(f"{transaction_type.value} tx {transaction_id}: missing amount")
    if not amount.is_finite() or amount < 0:
        raise MalformedTransactionError(f"{transaction_type.value} tx {transaction_id}: invalid amount {amount}")


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        """Remove held funds for good and freeze the account."""
        self.held -= amount
        self.locked = True


@dataclass(frozen=True)
class Outcome:
    """Result of applying one transaction, with the acting client's account after it."""

    result: ProcessingResult
    account: ClientAccount
    reason: Optional[RejectionReason] = None

    @property
    def succeeded(self) -> bool:
        return self.result == ProcessingResult.SUCCESS


class ProcessingStats:
    """Counters for a single run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.rejections_by_reason = {}

    def record(self, outcome: Outcome) -> None:
        if outcome.succeeded:
            self.applied += 1
            return
        self.rejected += 1
        count = self.rejections_by_reason.get(outcome.reason, 0)
        self.rejections_by_reason[outcome.reason] = count + 1

    @property
    def processed(self) -> int:
        return self.applied + self.rejected
