import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, Protocol, runtime_checkable

from models import AMOUNT_SCALE, InputError, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)

AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_SCALE)
TRANSACTION_ID_COLUMNS = ("tx", "transaction_id")
AMOUNT_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@runtime_checkable
class RecordSource(Protocol):
    def read(self) -> Iterator[Transaction]:
        """Yield transactions in input order. Single pass, not restartable."""
        ...


def parse_amount(value: str) -> Decimal:
    """Parse an amount literal with at most AMOUNT_SCALE fraction digits."""
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None

    if not amount.is_finite():
        raise ValueError(f"invalid amount {value!r}")

    try:
        quantized = amount.quantize(AMOUNT_QUANTUM)
    except InvalidOperation:
        raise ValueError(f"amount {value!r} is too large") from None

    if quantized != amount:
        raise ValueError(f"amount {value!r} has more than {AMOUNT_SCALE} decimal places")
    return quantized


def parse_id(value: str, field: str) -> int:
    """Ids are plain unsigned decimal digit strings."""
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{field} must be an unsigned integer, got {value!r}")
    return int(value)


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """
    Parse a CSV row into a Transaction.
    Raises KeyError or ValueError if the row is malformed.
    """
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

    transaction_type = TransactionType(normalized["type"].lower())
    client_id = parse_id(normalized["client"], "client")

    for column in TRANSACTION_ID_COLUMNS:
        if column in normalized:
            transaction_id = parse_id(normalized[column], column)
            break
    else:
        raise KeyError("tx")

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str and transaction_type in AMOUNT_TYPES:
        amount = parse_amount(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


class CsvRecordSource:
    """
    Reads transactions lazily from a CSV file with a header row.
    Malformed rows are logged and skipped; the file stays open only while iterating.
    """

    def __init__(self, filepath: str, stats: Optional[ProcessingStats] = None):
        self._filepath = filepath
        self._stats = stats

    def read(self) -> Iterator[Transaction]:
        try:
            with open(self._filepath, "r", encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f)
                for row in reader:
                    try:
                        yield parse_csv_row(row)
                    except (KeyError, ValueError) as e:
                        logger.warning(f"Skipping malformed row {reader.line_num} {row}: {e}")
                        if self._stats is not None:
                            self._stats.record_skipped_row()
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise InputError(f"could not read transactions from {self._filepath}: {e}") from e
