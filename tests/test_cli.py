"""End-to-end tests for the terminal menu."""

import json
import logging
from decimal import Decimal

import pytest
from click.testing import CliRunner

from app.main import cli, format_money


def run_menu(path, *lines: str):
    return CliRunner().invoke(cli, ["--data-path", str(path)], input="\n".join(lines) + "\n")


class TestFormatMoney:

    @pytest.mark.parametrize("value, expected", [
        (Decimal("1234.5"), "$1,234.50"),
        (Decimal("0"), "$0.00"),
        (Decimal("-5"), "-$5.00"),
        (Decimal("NaN"), "$NaN"),
    ])
    def test_format(self, value, expected):
        assert format_money(value) == expected


class TestMenu:
    """Drive the menu with scripted input."""

    def test_create_and_list(self, tmp_path):
        path = tmp_path / "bank-data.json"
        result = run_menu(path, "1", "Alice", "100.5", "", "3", "", "9")

        assert result.exit_code == 0, result.output
        assert "Account created successfully. ID: ACC-" in result.output
        assert "Total balance: $100.50" in result.output
        assert "Saving and exiting..." in result.output

        accounts = json.loads(path.read_text())["accounts"]
        assert accounts[0]["holderName"] == "Alice"
        assert accounts[0]["balance"] == 100.5

    def test_rejection_message_shown(self, tmp_path):
        result = run_menu(tmp_path / "bank-data.json", "1", "Alice", "1,000", "", "9")

        assert "Comma-separated numbers are not allowed." in result.output

    def test_unknown_account_stops_before_amount(self, tmp_path):
        result = run_menu(tmp_path / "bank-data.json", "4", "ACC-0000", "", "9")

        assert "Account not found." in result.output
        assert "Deposit amount:" not in result.output

    def test_delete_with_balance_is_cancelled(self, tmp_path):
        path = tmp_path / "bank-data.json"
        run_menu(path, "1", "Alice", "5", "", "9")
        account_id = json.loads(path.read_text())["accounts"][0]["id"]

        result = run_menu(path, "8", account_id, "", "9")

        assert "Warning: This account has a balance of $5.00." in result.output
        assert "Deletion cancelled." in result.output
        assert len(json.loads(path.read_text())["accounts"]) == 1

    def test_invalid_option(self, tmp_path):
        result = run_menu(tmp_path / "bank-data.json", "42", "", "9")
        assert "Invalid option. Please select 1-9." in result.output

    def test_end_of_input_still_saves(self, tmp_path):
        path = tmp_path / "bank-data.json"
        result = CliRunner().invoke(
            cli, ["--data-path", str(path)], input="1\nAlice\n7\n"
        )

        assert result.exit_code == 0, result.output
        assert "Exiting..." in result.output
        assert json.loads(path.read_text())["accounts"][0]["balance"] == 7

    def test_corrupted_file_warning(self, tmp_path):
        path = tmp_path / "bank-data.json"
        path.write_text("{broken")

        result = run_menu(path, "", "9")
        output = result.output

        assert result.exit_code == 0, output
        warning_at = output.index("Warning: Data file corrupted. Starting with empty data.")
        assert warning_at < output.index("Press Enter to continue") < output.index("Select option")
        assert "Saving and exiting..." in output

    def test_clean_start_does_not_pause(self, tmp_path):
        result = run_menu(tmp_path / "bank-data.json", "9")

        assert "Press Enter to continue" not in result.output
        assert "Saving and exiting..." in result.output

    def test_audit_log_option(self, tmp_path):
        path = tmp_path / "bank-data.json"
        audit_path = tmp_path / "audit.jsonl"
        result = CliRunner().invoke(
            cli,
            ["--data-path", str(path), "--audit-log", str(audit_path)],
            input="1\nAlice\n10\n\n1\nalice\n5\n\n9\n",
        )
        assert result.exit_code == 0, result.output

        events = [json.loads(line) for line in audit_path.read_text().splitlines()]
        types = [event["event_type"] for event in events]
        assert types[0] == "ledger_loaded"
        assert "account_opened" in types
        assert "operation_rejected" in types

        opened = next(e for e in events if e["event_type"] == "account_opened")
        rejected = next(e for e in events if e["event_type"] == "operation_rejected")
        assert opened["correlation_id"]
        assert rejected["correlation_id"]
        assert opened["correlation_id"] != rejected["correlation_id"]

    def test_invalid_configuration_stops_startup(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BANKCLI_STORAGE_INDENT", "99")
        path = tmp_path / "bank-data.json"

        result = run_menu(path, "9")

        assert result.exit_code != 0
        assert "Invalid configuration" in result.output
        assert not path.exists()

    def test_debug_mode_logs_everything(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "true")

        result = run_menu(tmp_path / "bank-data.json", "9")

        assert result.exit_code == 0, result.output
        assert logging.getLogger().level == logging.DEBUG
