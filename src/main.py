import argparse
import logging
import sys
from decimal import Decimal
from typing import Dict, List, Optional, TextIO

from engine import PaymentsEngine
from generator import generate_transactions, write_transactions
from models import ClientAccount, MalformedTransactionError

logger = logging.getLogger(__name__)

OUTPUT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal in plain fixed-point notation, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    stream.write(OUTPUT_HEADER + "\n")
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        stream.write(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}\n"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Apply a CSV stream of client transactions and print final account balances.",
    )
    parser.add_argument("input", help="transactions CSV (type, client, tx, amount)")
    parser.add_argument("-o", "--output", help="write accounts CSV here instead of stdout")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log applied transactions (-vv for every record)")

    generate = parser.add_argument_group("data generation")
    generate.add_argument("--generate-data", action="store_true", help="write random transactions to INPUT and exit")
    generate.add_argument("--rows", type=int, default=1000, help="number of transactions to generate (default: %(default)s)")
    generate.add_argument("--clients", type=int, default=10, help="number of clients to generate for (default: %(default)s)")
    generate.add_argument("--seed", type=int, help="random seed for reproducible data")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.generate_data:
        transactions = generate_transactions(args.rows, clients=args.clients, seed=args.seed)
        count = write_transactions(args.input, transactions)
        logger.info(f"Wrote {count} transactions to {args.input}")
        return 0

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(args.input)
    except MalformedTransactionError as e:
        logger.error(f"Malformed input: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1

    try:
        if args.output:
            with open(args.output, "w", newline="") as f:
                write_accounts(accounts, f)
        else:
            write_accounts(accounts, sys.stdout)
    except OSError as e:
        logger.error(f"Cannot write output: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
