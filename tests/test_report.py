import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from client_pool import ClientPool
from report import format_amount, format_report, write_report


class TestFormatAmount:
    def test_pads_to_four_places(self):
        assert format_amount(Decimal("1.5")) == "1.5000"
        assert format_amount(Decimal("0")) == "0.0000"

    def test_keeps_four_places(self):
        assert format_amount(Decimal("1.2345")) == "1.2345"

    def test_large_value_not_in_exponent_form(self):
        assert format_amount(Decimal("1E+6")) == "1000000.0000"


class TestFormatReport:
    def test_empty_pool(self):
        assert format_report(ClientPool()) == "client, available, held, total, locked\n"

    def test_rows_sorted_by_client(self):
        pool = ClientPool()
        second = pool.get_or_create(2)
        second.credit(Decimal("2"))
        second.hold(Decimal("0.5"))
        first = pool.get_or_create(1)
        first.credit(Decimal("1.5"))
        first.locked = True

        assert format_report(pool) == (
            "client, available, held, total, locked\n"
            "1, 1.5000, 0.0000, 1.5000, true\n"
            "2, 1.5000, 0.5000, 2.0000, false\n"
        )

    def test_write_report(self):
        pool = ClientPool()
        pool.get_or_create(7)
        stream = io.StringIO()

        write_report(pool, stream)

        assert stream.getvalue().splitlines() == [
            "client, available, held, total, locked",
            "7, 0.0000, 0.0000, 0.0000, false",
        ]
