# src/divgrid/dataio.py
from __future__ import annotations

import logging
import re
from functools import lru_cache
from importlib.resources import files as pkg_files

from divgrid.workspace import workspace_dir

try:
    import tomllib as _toml  # py311+
except ImportError:  # pragma: no cover
    import tomli as _toml  # type: ignore

CATALOG_FILE = "oeis_builtin.toml"
_OEIS_ID_RE = re.compile(r"^[A-Za-z]\d{6}$")

logger = logging.getLogger(__name__)


def is_oeis_id(text: str) -> bool:
    """True for one letter followed by exactly six digits (e.g. A000045)."""
    return bool(_OEIS_ID_RE.match((text or "").strip()))


def normalize_oeis_id(text: str) -> str:
    s = (text or "").strip().upper()
    if not _OEIS_ID_RE.match(s):
        raise ValueError(f"Bad OEIS id: {text!r}")
    return s


def _read_catalog() -> dict:
    """The workspace copy wins over the packaged one."""
    local = workspace_dir() / "data" / CATALOG_FILE
    if local.is_file():
        return _toml.loads(local.read_text(encoding="utf-8"))
    return _toml.loads((pkg_files("divgrid") / "data" / CATALOG_FILE).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def load_builtin_sequences() -> dict[str, dict]:
    """
    Offline catalog, one table per sequence:

      [[sequences]]
      id     = "A000045"
      name   = "Fibonacci numbers"
      values = [0, 1, 1, 2, ...]

    Returns {ID: {"name": str, "values": tuple[int, ...]}}. Entries without a
    valid id or with non-integer values are skipped.
    """
    try:
        doc = _read_catalog()
    except (OSError, _toml.TOMLDecodeError) as e:
        logger.warning("offline OEIS catalog unreadable: %s", e)
        return {}

    catalog: dict[str, dict] = {}
    for entry in doc.get("sequences", []):
        ident = entry.get("id") if isinstance(entry, dict) else None
        values = entry.get("values") if ident else None
        if not (isinstance(ident, str) and is_oeis_id(ident)):
            continue
        if not (isinstance(values, list) and values and all(type(v) is int for v in values)):
            logger.debug("catalog entry %s skipped: no integer values", ident)
            continue
        catalog[ident.upper()] = {"name": str(entry.get("name") or ident.upper()), "values": tuple(values)}
    return catalog
