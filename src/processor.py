import dataclasses
import logging
from typing import Optional

from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    DisputeStatus,
    Outcome,
    ProcessingResult,
    RejectionReason,
    validate_amount,
)
from state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state, one at a time, in arrival order.

    Every transaction acts on the account of its own client_id, even when the
    transaction it references was issued by another client.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> Outcome:
        """
        Apply a single transaction.

        Returns an Outcome holding SUCCESS, or REJECTED with a reason when a
        business rule is not met (state is then left untouched).

        Raises:
            MalformedTransactionError: deposit or withdrawal without a finite, non-negative amount.
        """
        validate_amount(transaction.transaction_type, transaction.transaction_id, transaction.amount)

        account = self._state.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                reason = self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                reason = self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                reason = self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                reason = self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                reason = self._handle_chargeback(account, transaction)

        snapshot = dataclasses.replace(account)
        if reason is not None:
            logger.warning(f"Rejected {transaction}: {reason.value}")
            return Outcome(ProcessingResult.REJECTED, snapshot, reason)

        logger.debug(f"Applied {transaction}: {snapshot}")
        return Outcome(ProcessingResult.SUCCESS, snapshot)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> Optional[RejectionReason]:
        if self._state.get_transaction(transaction.transaction_id) is not None:
            return RejectionReason.DUPLICATE_TRANSACTION

        account.credit(transaction.amount)
        self._state.store_transaction(transaction)
        return None

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> Optional[RejectionReason]:
        if self._state.get_transaction(transaction.transaction_id) is not None:
            return RejectionReason.DUPLICATE_TRANSACTION

        if account.available < transaction.amount:
            return RejectionReason.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        self._state.store_transaction(transaction)
        return None

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> Optional[RejectionReason]:
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            return RejectionReason.UNKNOWN_TRANSACTION

        # TODO: Withdrawal disputes could be supported by tracking payment state and attempting to recall funds
        if original.transaction_type != TransactionType.DEPOSIT:
            return RejectionReason.NOT_A_DEPOSIT

        status = self._state.dispute_status(transaction.transaction_id)
        if status == DisputeStatus.DISPUTED:
            return RejectionReason.ALREADY_DISPUTED
        if status == DisputeStatus.CHARGED_BACK:
            return RejectionReason.ALREADY_CHARGED_BACK

        # Funds may have left the account since the deposit; never hold more than is available.
        if account.available < original.amount:
            return RejectionReason.INSUFFICIENT_FUNDS

        account.hold(original.amount)
        self._state.mark_transaction_disputed(original)
        return None

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> Optional[RejectionReason]:
        disputed = self._state.get_disputed_transaction(transaction.transaction_id)

        if disputed is None:
            return RejectionReason.NOT_DISPUTED

        account.release_hold(disputed.amount)
        self._state.clear_transaction_dispute(transaction.transaction_id)
        return None

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> Optional[RejectionReason]:
        disputed = self._state.get_disputed_transaction(transaction.transaction_id)

        if disputed is None:
            return RejectionReason.NOT_DISPUTED

        account.charge_back(disputed.amount)
        self._state.retire_transaction(transaction.transaction_id)
        return None
