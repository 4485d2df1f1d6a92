"""
Integration tests for the trade statistics pipeline.

Covers backup loading, config fallbacks and the CLI run from
journal backup JSON to the CSV exports.
"""
import csv
import json
import logging
import pytest
from unittest.mock import patch
from decimal import Decimal

from py_trade_stats.backup_loader import BackupLoader
from py_trade_stats.config_loader import load_config
from py_trade_stats.risk import RiskSettings
from py_trade_stats.types import BackupFormatError
from py_trade_stats.domain import TradeSide
from py_trade_stats.trade_stats import main


# =============================================================================
# Fixtures
# =============================================================================

BACKUP = {
    "version": 1,
    "exportedAt": "2024-02-01T09:00:00Z",
    "trades": [
        {"id": "2", "date": "2024-01-03", "symbol": "AAA", "side": "SELL",
         "price": 1200, "quantity": 5, "tags": ["breakout"], "symbol_name": "Alpha"},
        {"id": "1", "date": "2024-01-02", "symbol": "AAA", "side": "BUY",
         "price": 1000, "quantity": 10, "memo": "entry"},
        {"id": "3", "date": "2024-01-04", "symbol": "BBB", "side": "buy",
         "price": "20.5", "quantity": "4", "tags": "swing, gap"},
    ],
    "currentPrices": {"AAA": 1100, "BBB": None},
}


@pytest.fixture
def backup_file(tmp_path):
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(BACKUP), encoding="utf-8")
    return path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


def _read_csv(path):
    with open(path, encoding="utf-8-sig", newline="") as f:
        return list(csv.DictReader(f))


# =============================================================================
# Backup loading
# =============================================================================

class TestBackupLoader:

    def test_load_backup(self, backup_file):
        trades, prices = BackupLoader().load(str(backup_file))

        assert [t.id for t in trades] == ["2", "1", "3"]
        bbb = trades[2]
        assert bbb.side is TradeSide.BUY
        assert bbb.price == Decimal("20.5")
        assert bbb.tags == ("swing", "gap")
        assert trades[0].symbol_name == "Alpha"
        assert trades[1].memo == "entry"
        assert prices == {"AAA": Decimal("1100")}

    def test_bad_rows_are_skipped(self, caplog):
        data = {"trades": [
            {"id": "1", "date": "2024-01-02", "symbol": "AAA", "side": "BUY", "price": 10, "quantity": 1},
            {"id": "2", "date": "2024-01-02", "symbol": "AAA", "side": "HOLD", "price": 10, "quantity": 1},
            {"id": "3", "date": "2024-01-02", "symbol": "AAA", "side": "SELL", "price": "abc", "quantity": 1},
            {"id": "4", "date": "2024-01-02", "side": "SELL", "price": 10, "quantity": 1},
            "not a trade",
        ]}
        with caplog.at_level(logging.WARNING):
            trades, prices = BackupLoader().parse_document(data)

        assert [t.id for t in trades] == ["1"]
        assert prices == {}
        assert "4 trade(s) skipped" in caplog.text

    def test_non_finite_numbers_are_skipped(self, tmp_path, caplog):
        # json.load accepts the NaN / Infinity literals
        path = tmp_path / "backup.json"
        path.write_text(
            '{"trades": ['
            '{"id": "1", "date": "2024-01-02", "symbol": "AAA", "side": "BUY", "price": 10, "quantity": 1},'
            '{"id": "2", "date": "2024-01-03", "symbol": "AAA", "side": "SELL", "price": "NaN", "quantity": 1},'
            '{"id": "3", "date": "2024-01-04", "symbol": "AAA", "side": "SELL", "price": 12, "quantity": Infinity},'
            '{"id": "4", "date": "2024-01-05", "symbol": "AAA", "side": "SELL", "price": NaN, "quantity": 1}'
            '], "currentPrices": {"AAA": "inf", "BBB": 5}}',
            encoding="utf-8"
        )
        with caplog.at_level(logging.WARNING):
            trades, prices = BackupLoader().load(str(path))

        assert [t.id for t in trades] == ["1"]
        assert prices == {"BBB": Decimal("5")}
        assert "3 trade(s) skipped" in caplog.text

    def test_non_finite_rows_do_not_break_the_cli(self, tmp_path, output_dir):
        path = tmp_path / "backup.json"
        path.write_text(json.dumps({"trades": [
            {"id": "1", "date": "2024-01-02", "symbol": "AAA", "side": "BUY", "price": 10, "quantity": 2},
            {"id": "2", "date": "2024-01-03", "symbol": "AAA", "side": "SELL", "price": "nan", "quantity": 1},
            {"id": "3", "date": "2024-01-04", "symbol": "AAA", "side": "SELL", "price": 15, "quantity": 1},
        ]}), encoding="utf-8")

        rc = main(["--input", str(path), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json")])
        assert rc == 0
        daily = _read_csv(output_dir / "daily_pnl.csv")
        assert [(row["key"], row["value"]) for row in daily] == [("2024-01-04", "5.00")]

    def test_missing_trades_list(self):
        with pytest.raises(BackupFormatError):
            BackupLoader().parse_document({"version": 1})
        with pytest.raises(BackupFormatError):
            BackupLoader().parse_document([])

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(BackupFormatError):
            BackupLoader().load(str(path))

    def test_price_file(self, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text(json.dumps({"AAA": "1250.5", "BBB": ""}), encoding="utf-8")
        assert BackupLoader().load_prices(str(path)) == {"AAA": Decimal("1250.5")}


# =============================================================================
# Config
# =============================================================================

class TestConfigLoader:

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.json"))
        assert config.locale == "ko"
        assert config.account_balance == Decimal("0")
        assert config.risk == RiskSettings()

    def test_overrides(self, tmp_path):
        path = tmp_path / "trade_stats.json"
        path.write_text(json.dumps({
            "locale": "en",
            "output_dir": "/tmp/stats",
            "account_balance": 50000,
            "risk": {"max_position_percent": 25, "alert_enabled": False},
        }), encoding="utf-8")

        config = load_config(str(path))
        assert config.locale == "en"
        assert config.output_dir == "/tmp/stats"
        assert config.account_balance == Decimal("50000")
        assert config.risk.max_position_percent == 25.0
        assert config.risk.max_daily_loss_percent == 3.0
        assert config.risk.alert_enabled is False

    def test_unknown_locale_and_bad_values(self, tmp_path, caplog):
        path = tmp_path / "trade_stats.json"
        path.write_text(json.dumps({
            "locale": "fr",
            "account_balance": "lots",
            "risk": {"max_position_percent": "high"},
        }), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            config = load_config(str(path))
        assert config.locale == "ko"
        assert config.account_balance == Decimal("0")
        assert config.risk == RiskSettings()
        assert "Unknown locale" in caplog.text

    def test_non_finite_balance(self, tmp_path):
        path = tmp_path / "trade_stats.json"
        path.write_text('{"account_balance": Infinity}', encoding="utf-8")
        assert load_config(str(path)).account_balance == Decimal("0")

    def test_broken_json(self, tmp_path):
        path = tmp_path / "trade_stats.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert load_config(str(path)).locale == "ko"


# =============================================================================
# CLI
# =============================================================================

class TestCli:

    def test_writes_all_exports(self, backup_file, output_dir, tmp_path):
        rc = main([
            "--input", str(backup_file),
            "--output-dir", str(output_dir),
            "--config", str(tmp_path / "none.json"),
        ])
        assert rc == 0

        symbols = _read_csv(output_dir / "symbol_summary.csv")
        assert [row["symbol"] for row in symbols] == ["AAA", "BBB"]
        aaa, bbb = symbols
        assert aaa["symbol_name"] == "Alpha"
        assert aaa["realized_pnl"] == "1000.00"
        assert aaa["unrealized_pnl"] == "500.00"
        assert aaa["return_rate"] == "10.00%"
        assert aaa["win_rate"] == "100%"
        # BBB has no price in the backup
        assert bbb["symbol_name"] == "BBB"
        assert bbb["current_price"] == ""
        assert bbb["unrealized_pnl"] == ""

        tags = _read_csv(output_dir / "tag_performance.csv")
        assert [(row["tag"], row["realized_pnl"]) for row in tags] == [("breakout", "1000.00")]

        daily = _read_csv(output_dir / "daily_pnl.csv")
        assert [(row["key"], row["value"]) for row in daily] == [("2024-01-03", "1000.00")]

        monthly = _read_csv(output_dir / "monthly_pnl.csv")
        assert monthly[0]["label"] == "2024년 1월"

    def test_price_file_and_locale(self, backup_file, output_dir, tmp_path):
        prices = tmp_path / "prices.json"
        prices.write_text(json.dumps({"BBB": 25}), encoding="utf-8")
        config = tmp_path / "trade_stats.json"
        config.write_text(json.dumps({"locale": "en", "output_dir": str(output_dir)}), encoding="utf-8")

        rc = main(["--input", str(backup_file), "--prices", str(prices), "--config", str(config)])
        assert rc == 0

        bbb = _read_csv(output_dir / "symbol_summary.csv")[1]
        assert bbb["current_price"] == "25.00"
        # 4 @ 20.5 = 82 -> avg 20.5, (25 - 20.5) * 4 = 18
        assert bbb["unrealized_pnl"] == "18.00"
        assert _read_csv(output_dir / "monthly_pnl.csv")[0]["label"] == "Jan 2024"

    def test_missing_input(self, output_dir, tmp_path):
        rc = main(["--input", str(tmp_path / "nope.json"), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json")])
        assert rc == 1
        assert not output_dir.exists()

    def test_invalid_backup(self, output_dir, tmp_path):
        path = tmp_path / "backup.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")
        rc = main(["--input", str(path), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json")])
        assert rc == 1

    def test_risk_warnings(self, backup_file, output_dir, tmp_path, caplog):
        config = tmp_path / "trade_stats.json"
        config.write_text(json.dumps({"account_balance": 10000}), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            rc = main(["--input", str(backup_file), "--output-dir", str(output_dir),
                       "--config", str(config)])
        assert rc == 0
        # AAA: 5 @ 1100 = 5500 of 10000
        assert "Position AAA is 55.0% of account (critical)" in caplog.text

    @patch('py_trade_stats.trade_stats.BackupLoader.load')
    def test_unreadable_input(self, mock_load, output_dir, tmp_path):
        mock_load.side_effect = PermissionError("denied")

        rc = main(["--input", "backup.json", "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json")])
        assert rc == 1
        mock_load.assert_called_once_with("backup.json")

    def test_filter_options(self, backup_file, output_dir, tmp_path):
        rc = main(["--input", str(backup_file), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json"), "--symbol", "bbb"])
        assert rc == 0

        symbols = _read_csv(output_dir / "symbol_summary.csv")
        assert [row["symbol"] for row in symbols] == ["BBB"]
        assert _read_csv(output_dir / "daily_pnl.csv") == []

    def test_filtered_trades_feed_the_stats(self, backup_file, output_dir, tmp_path):
        # Only the AAA sell survives; without its buy the sell is priced at avg cost 0
        rc = main(["--input", str(backup_file), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json"),
                   "--tag", "break, gap", "--tag-mode", "AND", "--date-to", "2024-01-03"])
        assert rc == 0
        assert _read_csv(output_dir / "symbol_summary.csv") == []

        rc = main(["--input", str(backup_file), "--output-dir", str(output_dir),
                   "--config", str(tmp_path / "none.json"),
                   "--tag", "break", "--date-from", "2024-01-03"])
        assert rc == 0
        daily = _read_csv(output_dir / "daily_pnl.csv")
        assert [(row["key"], row["value"]) for row in daily] == [("2024-01-03", "6000.00")]

    def test_invalid_tag_mode(self, backup_file, tmp_path):
        with pytest.raises(SystemExit):
            main(["--input", str(backup_file), "--tag-mode", "XOR"])

    def test_equity_curve_and_summary_logs(self, backup_file, output_dir, tmp_path, caplog):
        with caplog.at_level(logging.INFO):
            rc = main(["--input", str(backup_file), "--output-dir", str(output_dir),
                       "--config", str(tmp_path / "none.json")])
        assert rc == 0

        equity = _read_csv(output_dir / "equity_curve.csv")
        assert [row["key"] for row in equity] == ["2024-01-03"]
        assert float(equity[0]["cumulative_pnl"]) == 1000.0
        assert float(equity[0]["drawdown"]) == 0.0

        assert "Top profits: AAA 1,000" in caplog.text
        assert "Top losses" not in caplog.text
        assert "Max drawdown: 0.00 (0.0%)" in caplog.text
        assert "Tags in journal: breakout, gap, swing" in caplog.text
