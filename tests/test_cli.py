import json

import pytest
from typer.testing import CliRunner

from budget_facade import budget as budget_mod
from budget_facade import cli as cli_mod
from budget_facade.errors import BudgetDownloadError
from tests.helpers.fake_client import FakeBudgetClient, make_month

runner = CliRunner()


@pytest.fixture
def fake(monkeypatch) -> FakeBudgetClient:
    client = FakeBudgetClient(
        months={
            "2024-03": make_month(
                "2024-03",
                [("g", [{"id": "food", "name": "Food", "budgeted": 200}, {"id": "fun", "name": "Fun", "budgeted": 0}])],
            )
        },
        accounts=[{"id": "a1", "name": "Checking"}],
        add_transactions_result=["t-9"],
    )

    async def _get_client():
        return client

    monkeypatch.setattr(budget_mod, "get_client", _get_client)
    # Leave the process-wide logging configuration alone.
    monkeypatch.setattr(cli_mod, "configure_logging", lambda level=None: None)
    return client


def test_months_prints_json_and_shuts_down(fake):
    result = runner.invoke(cli_mod.app, ["months", "--budget-sync-id", "s1"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == ["2024-03"]
    assert fake.downloaded == "s1"
    assert fake.is_closed


def test_sync_id_from_environment(fake, monkeypatch):
    monkeypatch.setenv("ACTUAL_BUDGET_SYNC_ID", "env-sync")
    result = runner.invoke(cli_mod.app, ["accounts"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"id": "a1", "name": "Checking"}]
    assert fake.downloaded == "env-sync"


def test_month_categories_table(fake):
    result = runner.invoke(cli_mod.app, ["month-categories", "2024-03", "--budget-sync-id", "s1"])
    assert result.exit_code == 0, result.output
    assert "Food" in result.stdout
    assert "200" in result.stdout


def test_transfer_command(fake):
    result = runner.invoke(
        cli_mod.app,
        ["transfer", "2024-03", "--amount", "75", "--from", "food", "--to", "fun", "--budget-sync-id", "s1"],
    )
    assert result.exit_code == 0, result.output
    assert fake.calls_to("set_budget_amount") == [("2024-03", "food", 125), ("2024-03", "fun", 75)]


def test_transfer_command_accepts_negative_amount(fake):
    result = runner.invoke(
        cli_mod.app,
        ["transfer", "2024-03", "--amount", "-10", "--from", "food", "--to", "fun", "--budget-sync-id", "s1"],
    )
    assert result.exit_code == 0, result.output
    assert fake.calls_to("set_budget_amount") == [("2024-03", "food", 210), ("2024-03", "fun", -10)]


def test_transfer_command_requires_amount(fake):
    result = runner.invoke(cli_mod.app, ["transfer", "2024-03", "--from", "food", "--budget-sync-id", "s1"])
    assert result.exit_code != 0
    assert fake.calls == []


def test_set_budget_without_fields_fails(fake):
    result = runner.invoke(cli_mod.app, ["set-budget", "2024-03", "food", "--budget-sync-id", "s1"])
    assert result.exit_code == 1
    assert "At least one field is required" in result.output
    assert fake.is_closed


def test_add_transaction_prints_new_id(fake):
    result = runner.invoke(
        cli_mod.app,
        ["add-transaction", "a1", '{"date": "2024-03-01", "amount": -500}', "--budget-sync-id", "s1"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == "t-9"


def test_add_transaction_rejects_bad_json(fake):
    result = runner.invoke(cli_mod.app, ["add-transaction", "a1", "{nope", "--budget-sync-id", "s1"])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output
    assert fake.calls == []


def test_download_failure_is_reported(fake):
    fake.errors["download_budget"] = BudgetDownloadError("Budget download/sync failed for s1: 404")
    result = runner.invoke(cli_mod.app, ["payees", "--budget-sync-id", "s1"])
    assert result.exit_code == 1
    assert "download/sync failed" in result.output
    assert fake.is_closed
