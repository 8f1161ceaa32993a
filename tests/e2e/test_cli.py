"""End-to-end CLI coverage for the ``lib_config_data`` commands."""

from __future__ import annotations

import json
from pathlib import Path

import lib_cli_exit_tools
from click.testing import CliRunner

from lib_config_data import cli


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def test_cli_read_merges_sources_in_order(tmp_path: Path) -> None:
    base = tmp_path / "base.yaml"
    base.write_text("server:\n  port: 8080\n  threads: 4\n", encoding="utf-8")
    override = tmp_path / "override.properties"
    override.write_text("server.threads=16\n", encoding="utf-8")

    result = _runner().invoke(
        cli.cli,
        ["read", "--source", f"yaml:{base}", "--source", f"props:{override}", "--source", "env:CLI_TEST_"],
        env={"CLI_TEST_DB__JDBC_URL": "jdbc:h2:mem:"},
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "server": {"port": 8080, "threads": "16"},
        "db": {"jdbcUrl": "jdbc:h2:mem:"},
    }


def test_cli_read_pointer_and_provenance(tmp_path: Path) -> None:
    config = tmp_path / "app.json"
    config.write_text('{"server": {"port": 8080}}', encoding="utf-8")

    result = _runner().invoke(
        cli.cli, ["read", "--source", f"json:{config}", "--pointer", "/server", "--provenance", "--indent", "2"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["config"] == {"port": 8080}
    assert payload["provenance"]["server.port"]["source"] == f"json:{config}"


def test_cli_read_rejects_unknown_kind() -> None:
    result = _runner().invoke(cli.cli, ["read", "--source", "ini:/etc/app.ini"])
    assert result.exit_code == 2


def test_cli_read_requires_location_for_files() -> None:
    result = _runner().invoke(cli.cli, ["read", "--source", "json"])
    assert result.exit_code != 0


def test_cli_env_prefix() -> None:
    result = _runner().invoke(cli.cli, ["env-prefix", "config-kit"])
    assert result.exit_code == 0
    assert result.output.strip() == "CONFIG_KIT_"


def test_cli_info() -> None:
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "lib_config_data" in result.output or "lib-config-data" in result.output


def test_cli_main_restores_traceback_flag(tmp_path: Path) -> None:
    config = tmp_path / "app.json"
    config.write_text("{}", encoding="utf-8")
    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)

    exit_code = cli.main(["--traceback", "read", "--source", f"json:{config}"], restore_traceback=True)

    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_reports_parse_errors(tmp_path: Path) -> None:
    config = tmp_path / "broken.json"
    config.write_text("{broken", encoding="utf-8")

    exit_code = cli.main(["read", "--source", f"json:{config}"])

    assert exit_code != 0


def test_cli_read_provenance_keeps_non_ascii_text(tmp_path: Path) -> None:
    config = tmp_path / "app.json"
    config.write_text('{"site": {"city": "Zürich"}}', encoding="utf-8")

    result = _runner().invoke(cli.cli, ["read", "--source", f"json:{config}", "--provenance"])

    assert result.exit_code == 0, result.output
    assert "Zürich" in result.output
    assert "\\u00fc" not in result.output


def test_cli_read_yaml_with_timestamps(tmp_path: Path) -> None:
    config = tmp_path / "release.yaml"
    config.write_text("release: 2024-01-01\nports:\n  80: web\n", encoding="utf-8")

    exit_code = cli.main(["read", "--source", f"yaml:{config}"])

    assert exit_code == 0


def test_cli_read_relative_pointer_fails(tmp_path: Path) -> None:
    config = tmp_path / "app.json"
    config.write_text('{"server": {"port": 8080}}', encoding="utf-8")

    exit_code = cli.main(["read", "--source", f"json:{config}", "--pointer", "server"])

    assert exit_code != 0
