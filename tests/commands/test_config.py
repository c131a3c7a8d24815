"""Tests for config command."""

import json

from click.testing import CliRunner
import pytest

from code_halflife.commands.config import config


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


class TestConfigInit:
    def test_init_writes_defaults(self, runner, tmp_path):
        output = tmp_path / "code-halflife.json"

        result = runner.invoke(config, ["init", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["analysis"]["time_points"] == 100
        assert data["analysis"]["modification_policy"] == "replace"
        assert "Default configuration saved to:" in result.output

    def test_init_refuses_overwrite(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        output = tmp_path / "code-halflife.json"
        output.write_text("{}")

        result = runner.invoke(config, ["init", "code-halflife.json"])

        assert result.exit_code != 0
        assert "already exists" in result.output
        assert output.read_text() == "{}"

    def test_init_force(self, runner, tmp_path):
        output = tmp_path / "code-halflife.json"
        output.write_text("{}")

        result = runner.invoke(config, ["init", str(output), "--force"])

        assert result.exit_code == 0
        assert "analysis" in json.loads(output.read_text())


class TestConfigShow:
    def test_show_file(self, runner, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"analysis": {"file_pattern": "*.go"}}))

        result = runner.invoke(config, ["show", "--config", str(path)])

        assert result.exit_code == 0, result.output
        assert "analysis.file_pattern" in result.output
        assert "*.go" in result.output
        assert "visualization.dpi" in result.output

    def test_show_invalid_file(self, runner, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"analysis": {"time_points": 0}}))

        result = runner.invoke(config, ["show", "--config", str(path)])

        assert result.exit_code != 0
        assert "Error:" in result.output
