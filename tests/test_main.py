import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import config
from main import main


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.delenv("PAYMENTS_REPORT_SUMMARY", raising=False)
    config.reload_settings()
    yield
    monkeypatch.undo()
    config.reload_settings()


class TestMain:
    def test_scenarios(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 1, 5.0000",
            "withdrawal, 2, 2, 1.5000",
            "deposit, 1, 3, 5.0000",
            "dispute, 1, 3,",
            "chargeback, 1, 3,",
            "deposit, 1, 4, 10.0000",
            "deposit, 3, 5, 5",
            "dispute, 3, 5,",
        ]))

        assert main([str(csv_file)]) == 0

        out = capsys.readouterr().out
        assert out.splitlines() == [
            "client, available, held, total, locked",
            "1, 0.0000, 0.0000, 0.0000, true",
            "2, 3.5000, 0.0000, 3.5000, false",
            "3, 0.0000, 5.0000, 5.0000, false",
        ]

    def test_summary_on_stderr(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1\nwithdrawal,1,2,5\n")

        assert main([str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert "Processed: 1, Rejected: 1, Skipped rows: 0" in captured.err
        assert "Processed" not in captured.out

    def test_summary_disabled(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("PAYMENTS_REPORT_SUMMARY", "false")
        config.reload_settings()
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1\n")

        assert main([str(csv_file)]) == 0
        assert "Processed" not in capsys.readouterr().err

    def test_missing_argument(self, capsys):
        assert main([]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Usage" in captured.err

    def test_too_many_arguments(self, capsys):
        assert main(["a.csv", "b.csv"]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys, caplog):
        assert main([str(tmp_path / "missing.csv")]) == 1

        assert capsys.readouterr().out == ""
        assert "could not read transactions" in caplog.text

    def test_rejections_do_not_change_exit_status(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\nresolve,1,1,\nwithdrawal,1,2,1\n")

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out.splitlines()[1] == "1, 0.0000, 0.0000, 0.0000, false"
