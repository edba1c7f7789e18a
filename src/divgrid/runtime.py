# src/divgrid/runtime.py
"""
Settings of the active profile, held per context.

Readers go through CFG("SECTION.KEY", default) and always pass a default,
so every module works with no profile applied at all.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Runtime:
    profile_name: str = "default"
    sections: dict[str, dict[str, Any]] = field(default_factory=dict)
    debug: bool = False

    def apply(self, source: Any) -> None:
        """Take the sections of a Profile (or a plain {SECTION: {KEY: value}} mapping)."""
        if isinstance(source, Mapping):
            name, sections = self.profile_name, source
        else:
            name, sections = source.name, source.sections
        self.profile_name = name
        self.sections = {sec: dict(values) for sec, values in sections.items() if isinstance(values, Mapping)}
        debug = self.get("BEHAVIOUR.DEBUG")
        if isinstance(debug, bool):
            self.debug = debug

    def get(self, key: str, default: Any = None) -> Any:
        section, _, name = key.partition(".")
        if not name:
            return self.sections.get(section, default)
        return self.sections.get(section, {}).get(name, default)


_active: ContextVar[Runtime | None] = ContextVar("divgrid_runtime", default=None)


def current() -> Runtime:
    rt = _active.get()
    if rt is None:
        rt = reset_runtime()
    return rt


def reset_runtime() -> Runtime:
    """Install a fresh Runtime (defaults only) in the current context."""
    rt = Runtime()
    _active.set(rt)
    return rt


def APPLY(source: Any) -> None:
    current().apply(source)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)
