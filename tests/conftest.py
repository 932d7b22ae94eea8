"""
Pytest configuration and fixtures for hostfacts tests.

This module provides fixtures for writing plugin files into temporary plugin
roots and for building a System whose plugin_path points at them.
"""

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from hostfacts.config import Settings
from hostfacts.system import System


CPU_PLUGIN = '''
"""CPU facts."""

import os


@hostfacts.plugin("Cpu", provides=["cpu"])
class Cpu:
    @hostfacts.collect_data()
    def collect_default(self):
        self.data["cpu"] = {"total": os.cpu_count()}
'''


@pytest.fixture
def cpu_source() -> str:
    """Source of a valid, current-schema plugin providing 'cpu'."""
    return CPU_PLUGIN


@pytest.fixture
def plugin_root(tmp_path) -> Path:
    """Create an empty plugin root directory."""
    root = tmp_path / "plugins"
    root.mkdir()
    return root


@pytest.fixture
def write_plugin() -> Callable[..., Path]:
    """Return a helper that writes dedented plugin source to a file."""

    def _write(directory: Path, name: str, source: str) -> Path:
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_system() -> Callable[..., System]:
    """Return a helper that builds a System with the given plugin_path."""

    def _make(*roots) -> System:
        paths = [str(root) for root in roots]
        return System(settings=Settings(plugin_path=paths))

    return _make
