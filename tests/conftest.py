import os
import sys

# Add src to python path for testing
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest

from table_quantities import settings
from table_quantities.core import hooks


@pytest.fixture(autouse=True)
def isolated_world(monkeypatch, tmp_path):
    """Points the world directory at a temp folder and resets global hooks/settings around each test."""
    monkeypatch.setenv("TABLE_QUANTITIES_WORLD_DIR", str(tmp_path))
    monkeypatch.delenv("TABLE_QUANTITIES_QUANTITY_PATH", raising=False)
    monkeypatch.delenv("TABLE_QUANTITIES_MODIFY_CHAT", raising=False)
    settings.reset_settings()
    hooks.clear()
    yield tmp_path
    hooks.clear()
    settings.reset_settings()
