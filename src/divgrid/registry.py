# src/divgrid/registry.py
from __future__ import annotations

import inspect
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from importlib import import_module
from types import ModuleType


class SequenceKind(str, Enum):
    """Closed set of sequence variants, in menu order."""
    COLLATZ = "collatz"
    COLLATZ_ROOT = "collatz-sqrt"
    PELL = "pell"
    FIBONACCI = "fibonacci"
    A193651 = "A193651"
    A037992 = "A037992"
    WALL_CLOCK = "time"
    EXTERNAL_LIST = "oeis"
    CUSTOM_LIST = "custom"

    @classmethod
    def parse(cls, text: str) -> SequenceKind:
        s = (text or "").strip()
        for kind in cls:
            if s.lower() in (kind.value.lower(), kind.name.lower()):
                return kind
        raise ValueError(f"unknown sequence variant {text!r}")


# --------------------- Discovery → Index (immutable) ----------------------


@dataclass
class Index:
    variants: dict[SequenceKind, type]          # kind -> implementation class
    labels: dict[SequenceKind, str]             # kind -> menu label
    descriptions: dict[SequenceKind, str]       # kind -> short description
    oeis: dict[SequenceKind, str | None]        # kind -> A-code or None
    missing: list[SequenceKind] = field(default_factory=list)

    def link(self, kind: SequenceKind) -> str | None:
        code = self.oeis.get(kind)
        return f"https://oeis.org/{code}" if code else None


def _is_sequence(obj) -> bool:
    return inspect.isclass(obj) and getattr(obj, "__is_sequence__", False)


# ---------- Decorator (only tags the class; no side effects) ----------


def sequence_variant(*, kind: SequenceKind, label: str, description: str = "",
                     oeis: str | None = None):
    def deco(cls: type):
        cls.__is_sequence__ = True
        cls.kind = kind
        cls.label = label
        cls.description = description
        cls.oeis = oeis
        return cls
    return deco


def discover(module: ModuleType | str = "divgrid.sequences") -> Index:
    """Collect decorated variant classes from a module, ordered like SequenceKind."""
    mod = import_module(module) if isinstance(module, str) else module

    found: dict[SequenceKind, type] = {}
    for _, cls in inspect.getmembers(mod, _is_sequence):
        # only classes defined (or re-exported) with their own tag
        if "__is_sequence__" not in cls.__dict__:
            continue
        if cls.kind in found and found[cls.kind] is not cls:
            raise TypeError(
                f"duplicate sequence variant {cls.kind.value!r}: "
                f"{found[cls.kind].__name__} and {cls.__name__}"
            )
        found[cls.kind] = cls

    variants: OrderedDict[SequenceKind, type] = OrderedDict()
    for kind in SequenceKind:
        if kind in found:
            variants[kind] = found[kind]

    return Index(
        variants=variants,
        labels={k: c.label for k, c in variants.items()},
        descriptions={k: c.description for k, c in variants.items()},
        oeis={k: c.oeis for k, c in variants.items()},
        missing=[k for k in SequenceKind if k not in found],
    )
