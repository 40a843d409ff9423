"""Random transaction streams, for load runs and randomized tests."""
import csv
import random
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional

from models import Transaction, TransactionType

HEADER = ["type", "client", "tx", "amount"]


def random_amount(rng: random.Random, max_units: int = 1000, decimals: int = 4) -> Decimal:
    """Amount with up to `decimals` fractional digits."""
    return Decimal(rng.randint(0, max_units * 10**decimals)).scaleb(-decimals)


def generate_transactions(rows: int, clients: int = 10, seed: Optional[int] = None, decimals: int = 4) -> Iterator[Transaction]:
    """
    Yield `rows` transactions across `clients` clients.

    Roughly half the stream is deposits and withdrawals; the rest reference
    earlier deposit ids so disputes, resolves and chargebacks mostly land on
    real transactions. A few references point at unknown ids or at other
    clients' transactions.
    """
    rng = random.Random(seed)
    next_tx_id = 1
    deposits: List[Transaction] = []

    for _ in range(rows):
        client_id = rng.randint(1, clients)
        roll = rng.random()

        if roll < 0.35 or not deposits:
            transaction = Transaction(TransactionType.DEPOSIT, client_id, next_tx_id, random_amount(rng, decimals=decimals))
            deposits.append(transaction)
            next_tx_id += 1
        elif roll < 0.55:
            transaction = Transaction(TransactionType.WITHDRAWAL, client_id, next_tx_id, random_amount(rng, 500, decimals))
            next_tx_id += 1
        else:
            if rng.random() < 0.05:
                referenced_tx_id = next_tx_id + rng.randint(1, 100)
            else:
                original = rng.choice(deposits)
                referenced_tx_id = original.transaction_id
                if rng.random() < 0.9:
                    client_id = original.client_id

            if roll < 0.75:
                transaction_type = TransactionType.DISPUTE
            elif roll < 0.9:
                transaction_type = TransactionType.RESOLVE
            else:
                transaction_type = TransactionType.CHARGEBACK
            transaction = Transaction(transaction_type, client_id, referenced_tx_id)

        yield transaction


def write_transactions(filepath: str, transactions: Iterable[Transaction]) -> int:
    """Write transactions as CSV in the input format. Returns the number of rows written."""
    count = 0
    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(HEADER)
        for transaction in transactions:
            amount = "" if transaction.amount is None else f"{transaction.amount:f}"
            writer.writerow([
                transaction.transaction_type.value,
                transaction.client_id,
                transaction.transaction_id,
                amount,
            ])
            count += 1
    return count
