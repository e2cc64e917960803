# -*- coding: utf-8 -*-

"""Pytest configuration.

The engine uses a flat app-folder layout. For local testing we add the
repository root to sys.path so that imports like `from core...` work without
installing the project.
"""

from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _isolated_user_space(tmp_path, monkeypatch):
    """Keep every test away from the real per-user config folder."""
    monkeypatch.setenv("STUDIO_CONFIG_DIR", str(tmp_path / "userdata"))
    for var in ("STUDIO_PLUGINS_PATH", "STUDIO_PLUGINS_DATA_PATH"):
        monkeypatch.delenv(var, raising=False)
