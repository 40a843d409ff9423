from typing import Dict, Optional, Set

from models import Transaction, ClientAccount, DisputeStatus


class StateManager:
    """
    Owns client accounts and the transaction history used for dispute lookups.

    Transaction ids are global: history and dispute lookups are not scoped
    to the client that issued the original deposit or withdrawal.
    Single writer, so nothing here is locked.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}
        self._disputed: Dict[int, Transaction] = {}
        self._charged_back: Set[int] = set()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_disputed_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction only while it is under an open dispute."""
        return self._disputed.get(transaction_id)

    def mark_transaction_disputed(self, transaction: Transaction) -> None:
        self._disputed[transaction.transaction_id] = transaction

    def clear_transaction_dispute(self, transaction_id: int) -> None:
        """Close the dispute, leaving the transaction open to a new one."""
        del self._disputed[transaction_id]

    def retire_transaction(self, transaction_id: int) -> None:
        """Close the dispute for good after a chargeback."""
        del self._disputed[transaction_id]
        self._charged_back.add(transaction_id)

    def dispute_status(self, transaction_id: int) -> DisputeStatus:
        if transaction_id in self._disputed:
            return DisputeStatus.DISPUTED
        if transaction_id in self._charged_back:
            return DisputeStatus.CHARGED_BACK
        return DisputeStatus.UNDISPUTED

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def get_all_transactions(self) -> Dict[int, Transaction]:
        return dict(self._transactions)
