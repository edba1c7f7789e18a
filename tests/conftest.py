# tests/conftest.py
from __future__ import annotations

import pytest

from divgrid.dataio import load_builtin_sequences
from divgrid.runtime import reset_runtime


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    """Every test gets an empty workspace and a defaults-only runtime."""
    ws = tmp_path / "ws"
    monkeypatch.setenv("DIVGRID_HOME", str(ws))
    load_builtin_sequences.cache_clear()
    reset_runtime()
    yield ws
    reset_runtime()
    load_builtin_sequences.cache_clear()
