from decimal import Decimal
from typing import TextIO

from client_pool import ClientPool
from models import AMOUNT_SCALE

HEADER = ("client", "available", "held", "total", "locked")
SEPARATOR = ", "


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value:.{AMOUNT_SCALE}f}"


def format_report(clients: ClientPool) -> str:
    lines = [SEPARATOR.join(HEADER)]
    for client_id, account in clients.iterate_ordered():
        lines.append(
            SEPARATOR.join(
                (
                    str(client_id),
                    format_amount(account.available),
                    format_amount(account.held),
                    format_amount(account.total),
                    str(account.locked).lower(),
                )
            )
        )
    return "\n".join(lines) + "\n"


def write_report(clients: ClientPool, stream: TextIO) -> None:
    stream.write(format_report(clients))
