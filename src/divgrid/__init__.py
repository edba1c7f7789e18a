from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("divgrid")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import Profile, load_profile, profile_names
from .grid import Viewport, generate_blocks, mark_block
from .registry import SequenceKind, discover
from .runtime import APPLY, CFG
from .sequencer import Sequencer
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "Profile",
    "SequenceKind",
    "Sequencer",
    "Viewport",
    "__version__",
    "discover",
    "generate_blocks",
    "load_profile",
    "mark_block",
    "profile_names",
    "workspace_dir",
]
