import logging
from decimal import Decimal, Inexact, localcontext
from typing import Callable, Optional, assert_never

from client_pool import ClientPool
from models import (
    ClientAccount,
    DisputeState,
    LedgerEntry,
    ProcessingResult,
    ProcessingStats,
    RejectionReason,
    Transaction,
    TransactionRejected,
    TransactionType,
)
from transaction_ledger import TransactionLedger

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the client pool and transaction ledger.

    Every mutation is snapshot-protected: the account is copied before the
    change, the balance invariants are re-checked afterwards, and the copy is
    restored if they fail. A rejected record leaves no trace in the pool or
    the ledger.
    """

    def __init__(
        self,
        clients: ClientPool,
        ledger: TransactionLedger,
        stats: Optional[ProcessingStats] = None,
    ):
        self._clients = clients
        self._ledger = ledger
        self._stats = stats if stats is not None else ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied and committed
            REJECTED: Skipped; the reason has been logged and counted
        """
        account = self._clients.get_or_create(transaction.client_id)

        try:
            if account.locked:
                raise TransactionRejected(RejectionReason.ACCOUNT_LOCKED, transaction)

            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    self._handle_deposit(account, transaction)
                case TransactionType.WITHDRAWAL:
                    self._handle_withdrawal(account, transaction)
                case TransactionType.DISPUTE:
                    self._handle_dispute(account, transaction)
                case TransactionType.RESOLVE:
                    self._handle_resolve(account, transaction)
                case TransactionType.CHARGEBACK:
                    self._handle_chargeback(account, transaction)
                case _:
                    assert_never(transaction.transaction_type)
        except TransactionRejected as e:
            logger.warning(str(e))
            self._stats.record_rejection(e.reason)
            return ProcessingResult.REJECTED

        self._stats.record_success()
        return ProcessingResult.SUCCESS

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> None:
        amount = self._require_amount(transaction)
        self._apply(
            account,
            transaction,
            mutate=lambda: account.credit(amount),
            commit=lambda: self._ledger.record(
                LedgerEntry(transaction.transaction_id, transaction.client_id, amount)
            ),
        )

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> None:
        amount = self._require_amount(transaction)
        if account.available < amount:
            raise TransactionRejected(
                RejectionReason.INSUFFICIENT_FUNDS,
                transaction,
                f"available {account.available}, requested {amount}",
            )
        self._apply(account, transaction, mutate=lambda: account.debit(amount))

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._find_entry(transaction, DisputeState.NORMAL)
        self._apply(
            account,
            transaction,
            mutate=lambda: account.hold(entry.amount),
            commit=lambda: self._ledger.transition(entry.transaction_id, DisputeState.DISPUTED),
        )

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._find_entry(transaction, DisputeState.DISPUTED)
        self._apply(
            account,
            transaction,
            mutate=lambda: account.release_hold(entry.amount),
            commit=lambda: self._ledger.transition(entry.transaction_id, DisputeState.RESOLVED),
        )

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._find_entry(transaction, DisputeState.DISPUTED)

        def charge_back() -> None:
            account.remove_held(entry.amount)
            account.locked = True

        self._apply(
            account,
            transaction,
            mutate=charge_back,
            commit=lambda: self._ledger.transition(entry.transaction_id, DisputeState.CHARGED_BACK),
        )

    def _require_amount(self, transaction: Transaction) -> Decimal:
        if transaction.amount is None:
            raise TransactionRejected(RejectionReason.INVALID_AMOUNT, transaction, "amount missing")
        if transaction.amount < 0:
            raise TransactionRejected(
                RejectionReason.INVALID_AMOUNT, transaction, f"negative amount {transaction.amount}"
            )
        return transaction.amount

    def _find_entry(self, transaction: Transaction, expected_state: DisputeState) -> LedgerEntry:
        """Look up the deposit a dispute-family record refers to and check it may move on."""
        entry = self._ledger.lookup(transaction.transaction_id)

        if entry is None:
            raise TransactionRejected(RejectionReason.UNKNOWN_TRANSACTION, transaction)

        if entry.client_id != transaction.client_id:
            raise TransactionRejected(
                RejectionReason.CLIENT_MISMATCH,
                transaction,
                f"deposit belongs to client {entry.client_id}",
            )

        if entry.dispute_state != expected_state:
            raise TransactionRejected(
                RejectionReason.INVALID_STATE,
                transaction,
                f"deposit is {entry.dispute_state.value}, expected {expected_state.value}",
            )

        return entry

    def _apply(
        self,
        account: ClientAccount,
        transaction: Transaction,
        mutate: Callable[[], None],
        commit: Optional[Callable[[], None]] = None,
    ) -> None:
        snapshot = account.snapshot()

        # Balances must stay exact; any rounding aborts the mutation.
        with localcontext() as ctx:
            ctx.traps[Inexact] = True
            try:
                mutate()
                valid = account.is_valid()
            except Inexact:
                account.restore(snapshot)
                raise TransactionRejected(
                    RejectionReason.BALANCE_INVARIANT_VIOLATED,
                    transaction,
                    "balance exceeds exact decimal precision",
                ) from None

        if not valid:
            detail = f"would leave available={account.available} held={account.held} total={account.total}"
            account.restore(snapshot)
            raise TransactionRejected(RejectionReason.BALANCE_INVARIANT_VIOLATED, transaction, detail)

        if commit is None:
            return

        try:
            commit()
        except TransactionRejected:
            account.restore(snapshot)
            raise
