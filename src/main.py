import sys
import logging

from config import get_settings
from models import InputError
from payments_engine import PaymentsEngine
from report import write_report

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format,
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = PaymentsEngine()
    try:
        clients = engine.process_file(filepath)
    except InputError as e:
        logger.error(str(e))
        return 1

    write_report(clients, sys.stdout)

    if settings.report_summary:
        print(engine.stats.summary(), file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
