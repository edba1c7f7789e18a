# tests/test_grid.py
from __future__ import annotations

import itertools

import pytest
from colorama import Fore, Style

from divgrid.blocks import Block
from divgrid.display import render_grid
from divgrid.grid import Highlight, Viewport, clamp_level, generate_blocks, mark_block
from divgrid.utility import InvalidInputError


def _vp(width=20, height=10, block_size=1, center_x=10):
    return Viewport(width=width, height=height, block_size=block_size, center_x=center_x)


def _columns(blocks):
    return [(b.n, b.x) for b in blocks if not b.midpoint]


# ---------- generation --------------------------------------------------------


def test_level_one_row_walks_every_integer():
    blocks = list(generate_blocks(12, 1, _vp(), max_rows=1))
    assert all(b.d == 1 and b.divisor_of_key for b in blocks)
    assert not any(b.midpoint for b in blocks)

    left = [(n, x) for n, x in _columns(blocks) if x <= 10]
    right = [(n, x) for n, x in _columns(blocks) if x > 10]
    assert left == [(n, float(x)) for n, x in zip(range(12, 2, -1), range(10, 0, -1))]
    assert right == [(n, float(x)) for n, x in zip(range(13, 22), range(11, 20))]


def test_anchor_is_largest_multiple_below_key():
    blocks = list(generate_blocks(12, 5, _vp(), max_rows=1))
    assert _columns(blocks) == [(10, 8.0), (5, 3.0), (15, 13.0), (20, 18.0)]
    assert [b.step for b in blocks if not b.midpoint] == [0, -1, 1, 2]
    assert not any(b.divisor_of_key for b in blocks)


def test_midpoint_ticks_two_left_one_right():
    blocks = list(generate_blocks(12, 5, _vp(), max_rows=1))
    ticks = [(b.n, b.x) for b in blocks if b.midpoint]
    assert ticks == [
        (10, 5.5), (10, 10.5),
        (5, 0.5), (5, 5.5),
        (15, 15.5),
        (20, 20.5),
    ]


def test_divisor_of_key_is_a_row_property():
    row = [b for b in generate_blocks(12, 3, _vp(), max_rows=1) if not b.midpoint]
    assert {b.n for b in row} >= {9, 12, 15}
    assert all(b.divisor_of_key for b in row)


def test_rows_descend_one_block_each():
    blocks = list(generate_blocks(30, 2, _vp(block_size=2), max_rows=3))
    ys = {b.d: b.y for b in blocks}
    assert ys == {2: 0.0, 3: 2.0, 4: 4.0}


def test_negative_key_uses_floor_remainder():
    blocks = [b for b in generate_blocks(-7, 3, _vp(), max_rows=1) if not b.midpoint]
    # -7 = 3 * -3 + 2, so the anchor -9 sits two columns left of the key
    assert blocks[0].n == -9
    assert blocks[0].x == 8.0


def test_max_rows_defaults_to_viewport_height():
    vp = _vp(height=4)
    assert vp.max_divisor_rows == 4
    assert {b.d for b in generate_blocks(12, 1, vp)} == {1, 2, 3, 4}


def test_zero_rows_yields_nothing():
    assert list(generate_blocks(12, 1, _vp(), max_rows=0)) == []


def test_huge_divisor_rows_terminate():
    key = 10**400 + 7
    blocks = list(itertools.islice(generate_blocks(key, 10**399, _vp(), max_rows=2), 50))
    cells = [b for b in blocks if not b.midpoint]
    # one visible column per row; the next multiple is off-screen (x overflows to inf)
    assert [b.d for b in cells] == [10**399, 10**399 + 1]
    assert [b.x for b in cells] == [3.0, 13.0]


@pytest.mark.parametrize("level,rows", [(0, 3), (-4, 3), (1, -1)])
def test_generate_blocks_validates_eagerly(level, rows):
    with pytest.raises(InvalidInputError):
        generate_blocks(12, level, _vp(), max_rows=rows)


@pytest.mark.parametrize("level,expected", [(-3, 1), (0, 1), (1, 1), (7, 7)])
def test_clamp_level(level, expected):
    assert clamp_level(level) == expected


@pytest.mark.parametrize("kwargs", [
    {"width": 0, "height": 10, "block_size": 1},
    {"width": 10, "height": -1, "block_size": 1},
    {"width": 10, "height": 10, "block_size": 0},
])
def test_viewport_rejects_empty_extents(kwargs):
    with pytest.raises(InvalidInputError):
        Viewport(**kwargs)


def test_viewport_geometry():
    vp = Viewport(width=100, height=50, block_size=4)
    assert vp.center_x == 50
    assert vp.max_divisor_rows == 12


# ---------- marking -----------------------------------------------------------


def _block(n, d=1, step=0, divisor_of_key=True, midpoint=False):
    return Block(n=n, d=d, x=0.0, y=0.0, divisor_of_key=divisor_of_key, step=step, midpoint=midpoint)


MARK_CASES = [
    # block, key, leg, highlight, label
    (_block(12), 12, 0, Highlight.KEY, None),
    (_block(13, step=1), 12, 0, Highlight.LIKELY_PRIME, Highlight.LIKELY_PRIME),
    (_block(13, step=1), 12, 1, Highlight.KEY, Highlight.LIKELY_PRIME),
    (_block(32), 32, 0, Highlight.KEY, Highlight.POWER_OF_TWO),
    (_block(7), 7, 0, Highlight.KEY, Highlight.LIKELY_PRIME),
    (_block(16, step=4), 12, 0, Highlight.POWER_OF_TWO, Highlight.POWER_OF_TWO),
    (_block(2, step=-10), 12, 0, Highlight.LIKELY_PRIME, Highlight.LIKELY_PRIME),
    (_block(14, step=2), 12, 0, Highlight.PLAIN, None),
    (_block(9, d=3, step=-1), 12, 1, Highlight.KEY, None),
    (_block(9, d=3, step=-1), 12, -1, Highlight.PLAIN, None),
    (_block(12, d=3, midpoint=True), 12, 0, Highlight.PLAIN, None),
    (_block(10, d=5, divisor_of_key=False), 12, 0, Highlight.PLAIN, None),
    (_block(12, d=5, step=0, divisor_of_key=False), 12, 0, Highlight.KEY, None),
]


@pytest.mark.parametrize("block,key,leg,highlight,label", MARK_CASES)
def test_mark_block(block, key, leg, highlight, label):
    mark = mark_block(block, key, leg)
    assert mark.highlight is highlight
    assert mark.label is label


# ---------- text rendering ----------------------------------------------------


def test_render_grid_text():
    lines = render_grid(12, 1, rows=3, columns=20, colour=False)
    assert lines == [
        "key 12, level 1",
        "likely primes: 3, 5, 7, 11, 13, 17, 19",
        "powers of two: 4, 8, 16",
        "1 | p^pop^oop#poo^popoo",
        "2 |  o o o o # o o o o",
        "3 | o  o  o  #  o  o  o",
    ]


def test_render_grid_leg_highlights_columns():
    lines = render_grid(12, 2, rows=1, columns=20, leg=1, colour=False)
    assert lines[-1] == "2 |  o o o # # # o o o"


def test_render_grid_prime_key_keeps_its_label():
    lines = render_grid(7, 1, rows=2, columns=20, colour=False)
    assert lines == [
        "key 7, level 1",
        "likely primes: -2, 2, 3, 5, 7, 11, 13",
        "powers of two: -1, 1, 4, 8, 16",
        "1 | p^o^pp^po#^oopopoo^",
        "2 | o o o o o o o o o o",
    ]


def test_render_grid_power_of_two_key_keeps_its_label():
    lines = render_grid(32, 1, rows=2, columns=20, colour=False)
    assert lines == [
        "key 32, level 1",
        "likely primes: 23, 29, 31, 37, 41",
        "powers of two: 32",
        "1 | pooooopop#oooopooop",
        "2 |  o o o o # o o o o",
    ]


def test_render_grid_colours():
    row = render_grid(7, 1, rows=1, columns=20)[-1]
    assert f"{Fore.YELLOW}p{Style.RESET_ALL}" in row
    assert f"{Fore.RED}^{Style.RESET_ALL}" in row
    assert f"{Fore.BLUE}{Style.BRIGHT}#{Style.RESET_ALL}" in row
