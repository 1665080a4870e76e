from typing import Dict, Optional

from models import DisputeState, DuplicateTransaction, LedgerEntry, Transaction, TransactionType


class TransactionLedger:
    """
    Applied deposits keyed by transaction id, for dispute lookups.
    Entries are never deleted, only moved through the dispute lifecycle.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def record(self, entry: LedgerEntry) -> None:
        """Store a new entry. Raises DuplicateTransaction if the id is taken."""
        if entry.transaction_id in self._entries:
            raise DuplicateTransaction(
                Transaction(TransactionType.DEPOSIT, entry.client_id, entry.transaction_id, entry.amount)
            )
        self._entries[entry.transaction_id] = entry

    def lookup(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self._entries.get(transaction_id)

    def transition(self, transaction_id: int, new_state: DisputeState) -> None:
        # Legality of the transition is checked by the processor.
        self._entries[transaction_id].dispute_state = new_state

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
