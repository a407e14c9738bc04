"""
Tests for the command-line interface.
"""

import csv
from unittest.mock import Mock, patch

import pytest
import typer
from typer.testing import CliRunner

from defender_plan_auditor.cli.main import app
from defender_plan_auditor.core.exceptions import AuthenticationError
from defender_plan_auditor.core.models import PricingRecord
from defender_plan_auditor.core.profiles import PROFILES
from tests.fakes import FakeEnumerator, FakePricingClient, make_resources

runner = CliRunner()


@pytest.fixture
def auth_manager():
    manager = Mock()
    manager.get_access_token.return_value = "token"
    manager.get_credential.return_value = object()
    manager.bind_subscription.side_effect = lambda subscription_id: f"Subscription {subscription_id}"
    return manager


@pytest.fixture
def inventory():
    return {sub: make_resources(sub, 3) for sub in ("sub-1", "sub-2")}


@pytest.fixture
def patched_cli(clean_environment, auth_manager, inventory):
    enumerator = FakeEnumerator(inventory)
    pricing = FakePricingClient(defaults={"sub-2": PricingRecord(pricing_tier="Free")})
    with patch("defender_plan_auditor.cli.main.AuthenticationManager", return_value=auth_manager), \
            patch("defender_plan_auditor.cli.main.AzureResourceEnumerator", return_value=enumerator) as enum_cls, \
            patch("defender_plan_auditor.cli.main.DefenderPricingClient", return_value=pricing):
        yield enumerator, enum_cls


def test_scan_with_limit_and_csv_export(patched_cli, clean_environment):
    enumerator, _ = patched_cli
    output = clean_environment / "plans.csv"

    result = runner.invoke(app, [
        "scan", "-s", "sub-1,sub-2", "--limit", "4", "--export-csv", "--csv-path", str(output)
    ])

    assert result.exit_code == 0, result.output
    assert "Results exported" in result.output
    with open(output, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 5
    assert [row[0] for row in rows[1:]] == ["sub-1", "sub-1", "sub-1", "sub-2"]
    assert enumerator.calls == ["sub-1", "sub-2"]


def test_scan_without_export_writes_no_file(patched_cli, clean_environment):
    result = runner.invoke(app, ["scan", "-s", "sub-1"])

    assert result.exit_code == 0, result.output
    assert not (clean_environment / "defender_server_plans.csv").exists()
    assert "Total: 3" in result.output


def test_subscriptions_are_prompted_for_when_missing(patched_cli):
    enumerator, _ = patched_cli

    result = runner.invoke(app, ["scan"], input="sub-2; sub-1\n")

    assert result.exit_code == 0, result.output
    assert enumerator.calls == ["sub-2", "sub-1"]


def test_empty_prompt_answer_aborts(patched_cli):
    enumerator, _ = patched_cli

    result = runner.invoke(app, ["scan"], input="\n")

    assert result.exit_code == 1
    assert "No subscription IDs provided" in result.output
    assert enumerator.calls == []


def test_missing_session_aborts_before_scanning(patched_cli, auth_manager):
    _, enum_cls = patched_cli
    auth_manager.get_access_token.side_effect = AuthenticationError("no session")

    result = runner.invoke(app, ["scan", "-s", "sub-1"])

    assert result.exit_code == 1
    assert "Not signed in to Azure" in result.output
    enum_cls.assert_not_called()
    auth_manager.bind_subscription.assert_not_called()


def test_csv_write_failure_is_fatal(patched_cli, clean_environment):
    result = runner.invoke(app, [
        "scan", "-s", "sub-1", "--export-csv", "--csv-path", str(clean_environment)
    ])

    assert result.exit_code == 1
    assert "Failed to write CSV" in result.output


def test_vm_profile_is_passed_to_enumerator(patched_cli, auth_manager):
    _, enum_cls = patched_cli

    result = runner.invoke(app, ["scan", "-s", "sub-1", "--profile", "vm"])

    assert result.exit_code == 0, result.output
    resource_types = enum_cls.call_args[0][1]
    assert [t.value for t in resource_types] == ["Microsoft.Compute/virtualMachines"]


def test_unknown_profile_is_a_usage_error(patched_cli):
    result = runner.invoke(app, ["scan", "-s", "sub-1", "--profile", "storage"])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "Defender Plan Auditor" in result.output


def test_init_config_writes_loadable_file(clean_environment):
    target = clean_environment / "auditor.yml"

    result = runner.invoke(app, ["init-config", str(target)])

    assert result.exit_code == 0, result.output
    assert "scan_settings:" in target.read_text()


def test_profile_help_lists_profile_descriptions():
    command = typer.main.get_command(app).commands["scan"]
    profile_option = next(param for param in command.params if param.name == "profile")

    for profile in PROFILES.values():
        assert f"{profile.name}: {profile.description}" in profile_option.help


def test_verbose_scan_prints_label_breakdown(patched_cli):
    result = runner.invoke(app, ["scan", "-s", "sub-1", "--verbose"])

    assert result.exit_code == 0, result.output
    assert "Plan labels per scope" in result.output
