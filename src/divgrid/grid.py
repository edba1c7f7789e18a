# -----------------------------------------------------------------------------
#  grid.py
#  Divisor grid: rows of multiples of d around the key
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from divgrid.blocks import Block
from divgrid.ntheory import is_likely_prime, is_power_of_two, nearest_multiple
from divgrid.utility import InvalidInputError


@dataclass(frozen=True)
class Viewport:
    """
    Pixel extents of the drawing surface.

    The key's column sits at (center_x, center_y); each divisor row is one
    block_size lower than the previous one. center_x defaults to the middle
    of the surface.
    """
    width: float
    height: float
    block_size: float
    center_x: float | None = None
    center_y: float = 0.0

    def __post_init__(self):
        if not (self.width > 0 and self.height > 0):
            raise InvalidInputError(f"viewport must have a positive size, got {self.width}x{self.height}")
        if not self.block_size > 0:
            raise InvalidInputError(f"block size must be positive, got {self.block_size}")
        # floats keep pixel arithmetic on huge divisors from staying in int land
        object.__setattr__(self, "block_size", float(self.block_size))
        if self.center_x is None:
            object.__setattr__(self, "center_x", self.width * 0.5)

    @property
    def max_divisor_rows(self) -> int:
        """Whole rows between the key row and the bottom edge."""
        return max(0, int((self.height - self.center_y) // self.block_size))


def clamp_level(level: int) -> int:
    """Levels below 1 are raised to 1 (divisor 0 never reaches the arithmetic)."""
    return level if level >= 1 else 1


def _pixels(count: int, size: float) -> float:
    try:
        return count * size
    except OverflowError:
        # int too large for a float: far beyond any screen edge
        return math.inf


def generate_blocks(key: int, level: int, viewport: Viewport, max_rows: int | None = None) -> Iterator[Block]:
    """
    Lazily enumerate the blocks for divisor rows level .. level+max_rows-1.

    For each row d the anchor is the largest multiple of d at or below key.
    The row is walked leftwards from the anchor (each column followed by two
    midpoint ticks when d > 1) until x <= 0, then rightwards from anchor + d
    (one tick per column) until x >= width. ``divisor_of_key`` is fixed per
    row from key % d == 0.

    Arguments are validated eagerly; a level below 1 or a negative row count
    raises InvalidInputError. Use clamp_level() to sanitize interactive input.
    """
    if level < 1:
        raise InvalidInputError(f"level must be >= 1, got {level}")
    if max_rows is None:
        max_rows = viewport.max_divisor_rows
    if max_rows < 0:
        raise InvalidInputError(f"row count must be >= 0, got {max_rows}")
    return _walk_rows(key, level, max_rows, viewport)


def _walk_rows(key: int, level: int, max_rows: int, vp: Viewport) -> Iterator[Block]:
    size = vp.block_size
    y = vp.center_y

    for d in range(level, level + max_rows):
        anchor = nearest_multiple(key, d)
        remainder = key - anchor
        divisor_of_key = remainder == 0
        step_size = _pixels(d, size)
        half = step_size / 2

        # leftwards, anchor included
        n, step = anchor, 0
        x = vp.center_x - _pixels(remainder, size)
        while x > 0:
            block = Block(n, d, x, y, divisor_of_key, step)
            yield block
            if d > 1:
                yield block.tick(-half)
                yield block.tick(half)
            n -= d
            x -= step_size
            step -= 1

        # rightwards, one tick per column
        n, step = anchor + d, 1
        x = vp.center_x + _pixels(d - remainder, size)
        while x < vp.width:
            block = Block(n, d, x, y, divisor_of_key, step)
            yield block
            if d > 1:
                yield block.tick(half)
            n += d
            x += step_size
            step += 1

        y += size


# ----------------------------- cell marking -----------------------------


class Highlight(Enum):
    PLAIN = "plain"
    KEY = "key"
    LIKELY_PRIME = "likely-prime"
    POWER_OF_TWO = "power-of-two"


@dataclass(frozen=True)
class Marking:
    highlight: Highlight
    # LIKELY_PRIME or POWER_OF_TWO when the value is listed above the grid,
    # whatever colour the cell ends up with
    label: Highlight | None = None


def mark_block(block: Block, key: int, leg: int = 0) -> Marking:
    """
    Colour class for a block; later rules override earlier ones:

      1. the key's own cell                          -> KEY
      2. row d == 1: likely prime / power of two     -> LIKELY_PRIME / POWER_OF_TWO (also the label)
      3. columns 0 and +-leg on a row dividing key   -> KEY
    """
    leg = max(0, leg)
    highlight = Highlight.PLAIN
    label = None

    if block.n == key and not block.midpoint:
        highlight = Highlight.KEY

    if block.d == 1:
        if is_likely_prime(block.n):
            highlight = label = Highlight.LIKELY_PRIME
        elif is_power_of_two(block.n):
            highlight = label = Highlight.POWER_OF_TWO

    if block.step in (0, leg, -leg) and block.divisor_of_key and not block.midpoint:
        highlight = Highlight.KEY

    return Marking(highlight, label)
