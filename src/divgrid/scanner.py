from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScanResult:
    level: int
    exhausted: bool     # reached |key|; the next scan starts again at 1


def scan_level(key: int, level: int) -> ScanResult:
    """
    Advance the divisor level to the next value that divides |key|.

    A scan restarts from 1 when level <= 1 or level >= |key|. It stops on the
    first level dividing |key|, or at |key| itself (exhausted).
    """
    n = abs(key)
    if level <= 1 or level >= n:
        level = 1

    while True:
        level += 1
        if level >= n:
            return ScanResult(level, True)
        if n % level == 0:
            return ScanResult(level, False)
