import json
import sys
import types

import pytest
from click.testing import CliRunner

from backoffice_ui.cli import cli
from backoffice_ui.utils.config import get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_cli_list_by_feature():
    runner = CliRunner()
    result = runner.invoke(cli, ["list", "--feature", "Login"])
    assert result.exit_code == 0
    assert "Found 5 scenario(s)" in result.output
    assert "Login: Successful login with valid credentials" in result.output
    assert "Profile:" not in result.output


def test_cli_list_by_tag():
    runner = CliRunner()
    result = runner.invoke(cli, ["list", "--tag", "negative"])
    assert result.exit_code == 0
    assert "Devices: Adding a device without a type is rejected" in result.output
    assert "Successful login" not in result.output


def test_cli_config_masks_password(monkeypatch, fresh_settings):
    monkeypatch.setenv("E2E_PASSWORD", "hunter2")
    runner = CliRunner()
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["E2E_PASSWORD"] == "********"
    assert "hunter2" not in result.output
    assert data["MAX_ATTEMPTS"] == 3


def test_cli_run_monkeypatch_runner(monkeypatch):
    seen = {}

    def fake_run_scenarios(scenarios, settings=None, parallel=None, max_workers=None):
        seen.update(names=[sc.name for sc in scenarios], headless=settings.HEADLESS, parallel=parallel)
        results = []
        for i, sc in enumerate(scenarios):
            if i == 0:
                results.append({"ok": True, "run_dir": "/tmp/run", "fallbacks": [
                    {"widget": "tenant ledger report slider", "target": True, "strategy": "forced-click"}
                ]})
            else:
                results.append({
                    "ok": False,
                    "error": "no validation message shown",
                    "error_type": "AssertionError",
                    "failed_step": {"keyword": "Then", "text": "I should see an error message"},
                })
        return results

    fake_runner = types.ModuleType("backoffice_ui.core.runner")
    fake_runner.run_scenarios = fake_run_scenarios
    # Inject into sys.modules so the lazy import in `run` finds our fake
    monkeypatch.setitem(sys.modules, "backoffice_ui.core.runner", fake_runner)

    runner = CliRunner()
    result = runner.invoke(cli, ["run", "valid credentials", "invalid credentials", "--no-parallel", "--headed"])
    assert result.exit_code == 1
    assert seen["names"] == ["Successful login with valid credentials", "Login with invalid credentials"]
    assert seen["headless"] is False
    assert seen["parallel"] is False
    assert "OK  Login: Successful login with valid credentials" in result.output
    assert "fallback: tenant ledger report slider -> True via forced-click" in result.output
    assert "ERR Login: Login with invalid credentials [Then I should see an error message]" in result.output
    assert "Done. OK=1  FAIL=1" in result.output


def test_cli_run_nothing_matched():
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "no such scenario anywhere"])
    assert result.exit_code == 1
    assert "No scenarios matched." in result.output


def test_cli_color_flag_is_accepted():
    runner = CliRunner()
    result = runner.invoke(cli, ["--no-color", "list", "--feature", "Profile"])
    assert result.exit_code == 0
    assert "Profile: Select a report frequency" in result.output
