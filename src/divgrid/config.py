# src/divgrid/config.py
"""
Settings profiles: <workspace>/profiles/<name>.toml

A profile is a set of UPPERCASE sections. [PROFILE] carries the display
name and a one-line description; every other section is checked against
SCHEMA. Unknown sections and keys are logged and dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except ImportError:  # pragma: no cover
    import tomli as toml  # type: ignore

from divgrid.utility import UserInputError
from divgrid.workspace import seed_workspace, workspace_dir

logger = logging.getLogger(__name__)

_NUMBER = (int, float)

# section -> key -> (accepted types, must be > 0)
SCHEMA: dict[str, dict[str, tuple[tuple[type, ...], bool]]] = {
    "BEHAVIOUR": {"DEBUG": ((bool,), False), "MAX_DIGITS": ((int,), True)},
    "GRID": {"BLOCK_SIZE": ((int,), True), "COLUMNS": ((int,), True), "ROWS": ((int,), True)},
    "SEQUENCES": {"DEFAULT": ((str,), False), "MAX_STEPS": ((int,), True)},
    "OEIS": {
        "BASE_URL": ((str,), False),
        "TIMEOUT_S": (_NUMBER, True),
        "ALLOW_NETWORK": ((bool,), False),
        "POLL_INTERVAL_S": (_NUMBER, True),
    },
    "FORMATTING": {
        "NUM_ABBR_HEAD": ((int,), True),
        "NUM_ABBR_TAIL": ((int,), True),
        "NUM_ABBR_THRESHOLD": ((int,), True),
        "ELLIPSIS": ((str,), False),
    },
}

NO_DESCRIPTION = "(no description)"
_REMEMBERED = ".current"


@dataclass
class Profile:
    name: str
    description: str = NO_DESCRIPTION
    sections: dict[str, dict[str, Any]] = field(default_factory=dict)
    path: Path | None = None


def profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _read(path: Path) -> dict[str, Any]:
    try:
        return toml.loads(path.read_text(encoding="utf-8"))
    except (OSError, toml.TOMLDecodeError) as e:
        raise UserInputError(f"reading profile {path.name}: {e}") from None


def _check_value(section: str, key: str, value: Any) -> None:
    types, positive = SCHEMA[section][key]
    # bool is an int subclass; only DEBUG/ALLOW_NETWORK take booleans
    ok = isinstance(value, types) and (bool in types or not isinstance(value, bool))
    if ok and positive:
        ok = value > 0
    if not ok:
        wanted = "/".join(t.__name__ for t in types)
        qualifier = "positive " if positive else ""
        raise UserInputError(f"{section}.{key} must be a {qualifier}{wanted}, got {value!r}.")


def _validated(raw: dict[str, Any], source: str) -> dict[str, dict[str, Any]]:
    sections: dict[str, dict[str, Any]] = {}
    for section, values in raw.items():
        if section not in SCHEMA or not isinstance(values, dict):
            logger.warning("%s: ignoring unknown section [%s]", source, section)
            continue
        kept = {}
        for key, value in values.items():
            if key not in SCHEMA[section]:
                logger.warning("%s: ignoring unknown key %s.%s", source, section, key)
                continue
            _check_value(section, key, value)
            kept[key] = value
        sections[section] = kept
    return sections


def _profile_from(path: Path) -> Profile:
    raw = _read(path)
    meta = raw.pop("PROFILE", {})
    if not isinstance(meta, dict):
        meta = {}
    description = " ".join(str(meta.get("description") or "").split())
    return Profile(
        name=str(meta.get("name") or path.stem),
        description=description or NO_DESCRIPTION,
        sections=_validated(raw, path.name),
        path=path,
    )


def profile_names() -> list[str]:
    seed_workspace()
    return sorted(p.stem for p in profiles_dir().glob("*.toml"))


def has_profile(name: str) -> bool:
    return (profiles_dir() / f"{name}.toml").is_file()


def load_profile(name: str | None = None) -> Profile:
    """Load <name>.toml (default 'default') from the workspace, seeding it first."""
    seed_workspace()
    name = name or "default"
    path = profiles_dir() / f"{name}.toml"
    if not path.is_file():
        raise UserInputError(f"Profile '{name}' not found at {path}")
    return _profile_from(path)


def describe_profiles() -> list[tuple[str, str]]:
    """(name, description) per profile file; unreadable files keep their stem."""
    pairs = []
    for stem in profile_names():
        try:
            prof = _profile_from(profiles_dir() / f"{stem}.toml")
        except UserInputError:
            pairs.append((stem, NO_DESCRIPTION))
            continue
        pairs.append((prof.name, prof.description))
    return sorted(pairs, key=lambda pair: pair[0].lower())


def remembered_profile() -> str | None:
    try:
        name = (profiles_dir() / _REMEMBERED).read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return name.removesuffix(".toml") or None


def remember_profile(name: str) -> None:
    pdir = profiles_dir()
    pdir.mkdir(parents=True, exist_ok=True)
    (pdir / _REMEMBERED).write_text(name.strip().removesuffix(".toml"), encoding="utf-8")
