import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from engine import parse_csv_row, read_transactions
from models import MalformedTransactionError, Transaction, TransactionType


def row(type_, client, tx, amount=None):
    return {"type": type_, "client": client, "tx": tx, "amount": amount}


class TestParseCsvRow:
    def test_deposit(self):
        transaction = parse_csv_row(row("deposit", "1", "2", "3.1415"))
        assert transaction == Transaction(TransactionType.DEPOSIT, 1, 2, Decimal("3.1415"))

    def test_trims_keys_and_values(self):
        transaction = parse_csv_row({" type": " withdrawal ", " client": " 4", " tx ": "5 ", " amount": " 1.0 "})
        assert transaction == Transaction(TransactionType.WITHDRAWAL, 4, 5, Decimal("1.0"))

    def test_dispute_without_amount(self):
        transaction = parse_csv_row(row("dispute", "1", "2", ""))
        assert transaction.transaction_type == TransactionType.DISPUTE
        assert transaction.amount is None

    def test_dispute_ignores_stray_amount(self):
        transaction = parse_csv_row(row("chargeback", "1", "2", "10"))
        assert transaction.amount is None

    def test_missing_amount_column(self):
        transaction = parse_csv_row({"type": "resolve", "client": "1", "tx": "2"})
        assert transaction.transaction_type == TransactionType.RESOLVE

    def test_blank_row_skipped(self):
        assert parse_csv_row(row("", "", "", "")) is None

    def test_largest_ids_accepted(self):
        transaction = parse_csv_row(row("deposit", "65535", "4294967295", "1"))
        assert transaction.client_id == 65535
        assert transaction.transaction_id == 4294967295

    def test_extra_columns_ignored(self):
        transaction = parse_csv_row({**row("deposit", "1", "2", "1"), None: ["extra"]})
        assert transaction.amount == Decimal("1")

    @pytest.mark.parametrize("bad_row", [
        row("transfer", "1", "1", "1.0"),
        row("deposit", "one", "1", "1.0"),
        row("deposit", "1", "", "1.0"),
        row("deposit", "-1", "1", "1.0"),
        row("deposit", "1", "1", "abc"),
        row("deposit", "1", "1", "-5"),
        row("deposit", "1", "1", "NaN"),
        row("deposit", "1", "1", ""),
        row("withdrawal", "1", "1", None),
        row("deposit", "65536", "1", "1.0"),
        row("deposit", "1", "4294967296", "1.0"),
    ])
    def test_schema_errors(self, bad_row):
        with pytest.raises(MalformedTransactionError):
            parse_csv_row(bad_row)


class TestReadTransactions:
    def test_reads_lazily_in_order(self, tmp_path):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1\n\ndispute,1,1,\n")

        transactions = read_transactions(str(csv_file))
        assert next(transactions).transaction_type == TransactionType.DEPOSIT
        assert next(transactions).transaction_type == TransactionType.DISPUTE
        assert list(transactions) == []

    def test_error_reports_line(self, tmp_path):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1\nrefund,1,2,1\n")

        transactions = read_transactions(str(csv_file))
        next(transactions)
        with pytest.raises(MalformedTransactionError, match="line 3"):
            next(transactions)
