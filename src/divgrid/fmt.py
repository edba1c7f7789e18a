# src/divgrid/fmt.py
from __future__ import annotations

from collections.abc import Iterable, Mapping

from divgrid.runtime import CFG
from divgrid.utility import decimal_digits


def abbr_int(n: int) -> str:
    """
    Decimal text of n, shortened to head…tail once it is longer than
    FORMATTING.NUM_ABBR_THRESHOLD digits. Never builds str() of a long n.
    """
    head = int(CFG("FORMATTING.NUM_ABBR_HEAD", 10))
    tail = int(CFG("FORMATTING.NUM_ABBR_TAIL", 10))
    threshold = int(CFG("FORMATTING.NUM_ABBR_THRESHOLD", 35))
    digits = decimal_digits(n)
    if digits <= max(threshold, head + tail):
        return str(n)

    a = abs(n)
    sign = "-" if n < 0 else ""
    lead = a // 10 ** (digits - head)
    return f"{sign}{lead}{CFG('FORMATTING.ELLIPSIS', '…')}{a % 10 ** tail:0{tail}d}"


def format_factorization(fac: Mapping[int, int]) -> str:
    """{2: 3, 3: 2, 5: 1} -> '2^3 × 3^2 × 5'"""
    return " × ".join(f"{p}^{e}" if e > 1 else str(p) for p, e in sorted(fac.items())) or "1"


def format_int_list(values: Iterable[int], limit: int = 20) -> str:
    """Comma-separated, cut after `limit` items with a count of the rest."""
    items = list(values)
    text = ", ".join(abbr_int(v) for v in items[:limit])
    if len(items) > limit:
        text += f", … (+{len(items) - limit} more)"
    return text
