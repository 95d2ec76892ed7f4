"""Tests for the python -m journal_analytics entry point"""

import json
import logging
from pathlib import Path

import pytest

from journal_analytics.__main__ import main


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers added by setup_logging()"""
    yield
    logger = logging.getLogger("journal_analytics")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def trades_file(tmp_path: Path) -> Path:
    rows = [
        {"trade_id": "1", "symbol": "EURUSD", "entry_time": "2024-03-04T09:00:00Z",
         "exit_time": "2024-03-04T10:00:00Z", "pnl": -100, "risk": 100, "session": "London"},
        {"trade_id": "2", "symbol": "EURUSD", "entry_time": "2024-03-11T09:00:00Z",
         "exit_time": "2024-03-11T10:00:00Z", "pnl": 200, "risk": 100, "session": "London"},
        {"trade_id": "3", "symbol": "GBPUSD", "entry_time": "2024-03-12T14:00:00Z",
         "exit_time": "2024-03-12T14:20:00Z", "pnl": -50, "risk": 100, "session": "NY"},
    ]
    path = tmp_path / "trades.jsonl"
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n")
    return path


@pytest.fixture
def backtests_file(tmp_path: Path) -> Path:
    path = tmp_path / "backtests.csv"
    path.write_text(
        "backtest_id,planned_sl_pips,planned_tp_pips,planned_rr\n"
        "b-1,10,20,2\n"
        "b-2,12,24,2\n"
        "b-3,15,30,2\n"
    )
    return path


class TestCli:
    """End-to-end CLI runs"""

    def test_text_report(self, trades_file, capsys):
        assert main(["--trades", str(trades_file)]) == 0

        out = capsys.readouterr().out
        assert "=== Analytics Report (2024-03-04 to 2024-03-12) ===" in out
        assert "Trades:" in out

    def test_json_output(self, trades_file, backtests_file, tmp_path):
        output = tmp_path / "out" / "report.json"
        code = main([
            "--trades", str(trades_file),
            "--backtests", str(backtests_file),
            "--balance", "2500",
            "--output", str(output),
        ])

        assert code == 0
        data = json.loads(output.read_text())
        assert data["kpis"]["current"]["n"] == 3
        assert data["starting_balance"] == 2500
        assert data["recommendation"]["sl_pips"] == 12
        assert data["recommendation"]["sample_size"] == 3

    def test_date_range_compares_prior_period(self, trades_file, tmp_path):
        output = tmp_path / "report.json"
        code = main([
            "--trades", str(trades_file),
            "--start", "2024-03-11",
            "--end", "2024-03-17",
            "--output", str(output),
        ])

        assert code == 0
        data = json.loads(output.read_text())
        assert data["kpis"]["current"]["n"] == 2
        assert data["kpis"]["prior"]["n"] == 1
        assert data["kpis"]["deltas"]["net_r"] == pytest.approx(2.5)

    def test_symbol_filter_and_trim(self, trades_file, tmp_path):
        output = tmp_path / "report.json"
        main(["--trades", str(trades_file), "--symbols", "EURUSD", "--trim", "--output", str(output)])

        data = json.loads(output.read_text())
        assert data["trim"]["total_count"] == 2
        assert [s["symbol"] for s in data["breakdowns"]["by_symbol"]] == ["EURUSD"]

    def test_config_file(self, trades_file, tmp_path, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"report": {"currency": "EUR"}}))

        assert main(["--trades", str(trades_file), "--config", str(config)]) == 0
        assert "EUR" in capsys.readouterr().out

    def test_missing_trades_file(self, tmp_path, capsys):
        assert main(["--trades", str(tmp_path / "missing.jsonl")]) == 1
        assert "Trades file not found" in capsys.readouterr().err

    def test_invalid_config(self, trades_file, tmp_path, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"engine": {"timezone": "Nowhere/Special"}}))

        assert main(["--trades", str(trades_file), "--config", str(config)]) == 1
        assert "Config load failed" in capsys.readouterr().err

    def test_end_before_start(self, trades_file, capsys):
        code = main(["--trades", str(trades_file), "--start", "2024-03-17", "--end", "2024-03-11"])
        assert code == 1

    def test_bad_date_argument(self, trades_file):
        with pytest.raises(SystemExit):
            main(["--trades", str(trades_file), "--start", "March"])
