"""Tests for the check CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from cdpbind.cli import cli
from tests.conftest import browser_schema, js_schema, write_protocol


@pytest.mark.usefixtures("project_root")
class TestCheckCommand:
    def test_check_no_flags(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "OK  check" in result.stdout
        assert "domains: 4" in result.stdout

    def test_check_json_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "check"
        assert data["data"]["commands"] == 8

    def test_check_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "check"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: check"

    def test_check_verbose_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "check"])
        assert result.exit_code == 0
        assert "SchemaService.check" in result.stdout

    def test_explicit_paths(self, cli_runner: CliRunner, project_root: Path) -> None:
        browser = project_root / "json" / "browser_protocol.json"
        js = project_root / "json" / "js_protocol.json"
        result = cli_runner.invoke(cli, ["--json", "check", str(browser), str(js)])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["domains"] == 4

    def test_missing_path_rejected(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "nope.json"])
        assert result.exit_code == 2
        assert "does not exist" in result.stderr

    def test_empty_domain_warning_on_stderr(
        self, cli_runner: CliRunner, project_root: Path
    ) -> None:
        browser = browser_schema()
        browser["domains"].append({"domain": "Inspector"})
        write_protocol(project_root, browser, js_schema())
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "WARNING: domain 'Inspector'" in result.stderr
        assert "WARNING" not in result.stdout

    def test_schema_error_exits_1(self, cli_runner: CliRunner, project_root: Path) -> None:
        js = js_schema()
        js["version"]["minor"] = "2"
        write_protocol(project_root, browser_schema(), js)
        result = cli_runner.invoke(cli, ["--json", "check"])
        assert result.exit_code == 1
        payload = json.loads(result.stderr)
        assert payload["ok"] is False
        assert payload["error"]["code"] == "VERSION_MISMATCH"
        assert result.stdout == ""
