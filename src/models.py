from collections import Counter
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional

AMOUNT_SCALE = 4
ZERO = Decimal("0.0000")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class RejectionReason(Enum):
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    INVALID_STATE = "invalid_state"
    BALANCE_INVARIANT_VIOLATED = "balance_invariant_violated"
    INVALID_AMOUNT = "invalid_amount"


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


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
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False

    def is_valid(self) -> bool:
        """Check the balance invariants: total == available + held, nothing negative."""
        if self.available < 0 or self.held < 0:
            return False
        return self.total == self.available + self.held

    def snapshot(self) -> "ClientAccount":
        return replace(self)

    def restore(self, snapshot: "ClientAccount") -> None:
        """Put every field back to the values captured in ``snapshot``."""
        self.available = snapshot.available
        self.held = snapshot.held
        self.total = snapshot.total
        self.locked = snapshot.locked

    def credit(self, amount: Decimal) -> None:
        self.available += amount
        self.total += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount
        self.total -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount
        self.total -= amount


@dataclass
class LedgerEntry:
    """A deposit that later records may dispute, resolve or charge back."""

    transaction_id: int
    client_id: int
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL


class PaymentsError(Exception):
    """Base class for all errors raised by the payments engine."""


class InputError(PaymentsError):
    """The input source is missing or unreadable. Aborts the run."""


class TransactionRejected(PaymentsError):
    """
    A single record could not be applied.
    The record is skipped; processing continues with the next one.
    """

    def __init__(self, reason: RejectionReason, transaction: Transaction, detail: str = ""):
        self.reason = reason
        self.transaction = transaction
        self.detail = detail
        message = f"{transaction.transaction_type.value} tx {transaction.transaction_id} for client {transaction.client_id} rejected: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DuplicateTransaction(TransactionRejected):
    def __init__(self, transaction: Transaction):
        super().__init__(
            RejectionReason.DUPLICATE_TRANSACTION,
            transaction,
            f"transaction id {transaction.transaction_id} already recorded",
        )


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.skipped_rows = 0
        self.rejections_by_reason: Counter = Counter()

    def record_success(self):
        self.processed += 1

    def record_rejection(self, reason: RejectionReason):
        self.rejected += 1
        self.rejections_by_reason[reason] += 1

    def record_skipped_row(self):
        self.skipped_rows += 1

    def summary(self) -> str:
        return f"Processed: {self.processed}, Rejected: {self.rejected}, Skipped rows: {self.skipped_rows}"
