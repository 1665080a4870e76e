import logging
from typing import Iterable

from client_pool import ClientPool
from models import ProcessingStats, Transaction
from record_source import CsvRecordSource
from transaction_ledger import TransactionLedger
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Runs transactions through the processor one at a time, in input order.
    Owns the client pool and transaction ledger for the duration of a run.
    """

    def __init__(self):
        self._clients = ClientPool()
        self._ledger = TransactionLedger()
        self._stats = ProcessingStats()
        self._processor = TransactionProcessor(self._clients, self._ledger, self._stats)

    @property
    def clients(self) -> ClientPool:
        return self._clients

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transactions: Iterable[Transaction]) -> ClientPool:
        """Apply every transaction and return the resulting client pool."""
        logger.info("Starting processing")

        for transaction in transactions:
            self._processor.process_transaction(transaction)

        logger.info(f"Processing complete. {self._stats.summary()}")
        for reason, count in sorted(self._stats.rejections_by_reason.items(), key=lambda item: item[0].value):
            logger.info(f"  {reason.value}: {count}")

        return self._clients

    def process_file(self, filepath: str) -> ClientPool:
        """Process CSV file and return final account states."""
        source = CsvRecordSource(filepath, stats=self._stats)
        return self.process(source.read())
