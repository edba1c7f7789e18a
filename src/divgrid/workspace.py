# src/divgrid/workspace.py
"""
The user workspace: editable copies of the packaged profiles and data.

Layout under $DIVGRID_HOME (default ~/Documents/Divgrid):

    profiles/<name>.toml    settings profiles, plus .current (last used)
    data/oeis_builtin.toml  offline OEIS catalog
"""

from __future__ import annotations

import logging
import os
from importlib.resources import files as pkg_files
from pathlib import Path

PACKAGED_DIRS = ("profiles", "data")

logger = logging.getLogger(__name__)


def workspace_dir() -> Path:
    env = os.environ.get("DIVGRID_HOME")
    root = Path(env).expanduser() if env else Path.home() / "Documents" / "Divgrid"
    return root.resolve()


def seed_workspace(*, overwrite: bool = False, only: set[str] | None = None) -> dict[str, int]:
    """
    Copy the packaged *.toml files into the workspace.

    Existing files are left alone unless overwrite is set. Returns the number
    of files written per directory.
    """
    root = workspace_dir()
    written: dict[str, int] = {}
    for sub in PACKAGED_DIRS:
        target = root / sub
        target.mkdir(parents=True, exist_ok=True)
        written[sub] = 0
        if only is not None and sub not in only:
            continue
        for entry in (pkg_files("divgrid") / sub).iterdir():
            if not entry.is_file() or not entry.name.endswith(".toml"):
                continue
            dest = target / entry.name
            if dest.exists() and not overwrite:
                continue
            dest.write_bytes(entry.read_bytes())
            written[sub] += 1

    if any(written.values()):
        logger.debug("seeded workspace %s: %s", root, written)
    return written
