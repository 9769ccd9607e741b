"""Unit tests configuration file."""

import pytest

from packedstruct.codec import StructCodec, create_registry


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def registry():
    """A fresh registry with primitives and bitfield containers."""
    return create_registry()


@pytest.fixture
def codec(registry):
    return StructCodec(registry)
