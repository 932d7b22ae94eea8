"""
Tests for CLI commands.
"""

import logging

import pytest
from typer.testing import CliRunner

from hostfacts.cli import app

# Disable Rich formatting in tests using NO_COLOR environment variable
runner = CliRunner(env={"NO_COLOR": "1", "TERM": "dumb", "COLUMNS": "200"})

LEGACY_PLUGIN = '@hostfacts.plugin("Uptime", schema=1)\nclass Uptime:\n    pass\n'


@pytest.fixture(autouse=True)
def isolated_plugin_path(tmp_path, monkeypatch):
    """Point the configured plugin_path at an empty directory."""
    configured = tmp_path / "configured"
    configured.mkdir()
    monkeypatch.setattr("hostfacts.config.settings.plugin_path", [str(configured)])

    logger = logging.getLogger("hostfacts")
    handlers, level = list(logger.handlers), logger.level
    yield configured
    logger.handlers = handlers
    logger.setLevel(level)


class TestDiscoverCommand:
    """Tests for discover command."""

    def test_no_plugin_files(self):
        result = runner.invoke(app, ["discover"])

        assert result.exit_code == 0
        assert "No plugin files found" in result.stdout

    def test_lists_files_under_path(self, plugin_root, write_plugin, cpu_source):
        path = write_plugin(plugin_root, "cpu.py", cpu_source)

        result = runner.invoke(app, ["discover", "--path", str(plugin_root)])

        assert result.exit_code == 0
        assert "Found 1 plugin file(s)" in result.stdout
        assert str(path) in result.stdout


class TestPluginsCommand:
    """Tests for plugins command."""

    def test_no_plugins(self):
        result = runner.invoke(app, ["plugins"])

        assert result.exit_code == 0
        assert "No plugins loaded" in result.stdout

    def test_configured_plugins(self, isolated_plugin_path, write_plugin, cpu_source):
        write_plugin(isolated_plugin_path, "cpu.py", cpu_source)

        result = runner.invoke(app, ["plugins"])

        assert result.exit_code == 0
        assert "Cpu" in result.stdout
        assert "Instances registered: 1" in result.stdout

    def test_extra_path_adds_instances(
        self, isolated_plugin_path, plugin_root, write_plugin, cpu_source
    ):
        write_plugin(isolated_plugin_path, "cpu.py", cpu_source)
        write_plugin(plugin_root, "cpu_extra.py", cpu_source)

        result = runner.invoke(app, ["plugins", "--path", str(plugin_root)])

        assert result.exit_code == 0
        # One from load_all, then one per file from load_additional
        assert "Instances registered: 3" in result.stdout


class TestLoadPluginCommand:
    """Tests for load-plugin command."""

    def test_requires_path_argument(self):
        result = runner.invoke(app, ["load-plugin"])

        assert result.exit_code != 0

    def test_loads_plugin(self, plugin_root, write_plugin, cpu_source):
        path = write_plugin(plugin_root, "cpu.py", cpu_source)

        result = runner.invoke(app, ["load-plugin", str(path)])

        assert result.exit_code == 0
        assert "Loaded Cpu" in result.stdout
        assert "Provides: cpu" in result.stdout

    def test_legacy_plugin_fails(self, plugin_root, write_plugin):
        path = write_plugin(plugin_root, "uptime.py", LEGACY_PLUGIN)

        result = runner.invoke(app, ["load-plugin", str(path)])

        assert result.exit_code == 1
        assert "cannot create plugin of type Uptime" in result.stdout

    def test_not_a_plugin_fails(self, plugin_root, write_plugin):
        path = write_plugin(plugin_root, "notes.py", "NOTES = []\n")

        result = runner.invoke(app, ["load-plugin", str(path)])

        assert result.exit_code == 1
        assert "No plugin loaded" in result.stdout
