# tests/test_fmt.py
from __future__ import annotations

import pytest

from divgrid.fmt import abbr_int, format_factorization, format_int_list
from divgrid.runtime import APPLY
from divgrid.utility import UserInputError, decimal_digits, guard_digits


@pytest.mark.parametrize("n", [0, 1, 9, 10, 99, 100, 999, 1000, 10**15 - 1, 10**15, 2**64, 10**300, 10**300 - 1])
def test_decimal_digits(n):
    assert decimal_digits(n) == len(str(n))
    assert decimal_digits(-n) == len(str(n))


def test_guard_digits_follows_profile():
    APPLY({"BEHAVIOUR": {"MAX_DIGITS": 3}})
    assert guard_digits(-999) == -999
    with pytest.raises(UserInputError, match="key has more than 3 decimal digits"):
        guard_digits(1000, "key")


ABBR_CASES = [
    (12345, "12345"),
    (-(10**40), "-1000000000…0000000000"),
    (2**200, "1606938044…2835301376"),
]


@pytest.mark.parametrize("n,expected", ABBR_CASES, ids=[str(n)[:12] for n, _ in ABBR_CASES])
def test_abbr_int(n, expected):
    assert abbr_int(n) == expected


def test_abbr_int_settings():
    APPLY({"FORMATTING": {"NUM_ABBR_HEAD": 2, "NUM_ABBR_TAIL": 3, "NUM_ABBR_THRESHOLD": 6, "ELLIPSIS": "..."}})
    assert abbr_int(123456) == "123456"
    assert abbr_int(1234567) == "12...567"
    assert abbr_int(10**6 + 7) == "10...007"


def test_format_factorization():
    assert format_factorization({5: 1, 2: 3, 3: 2}) == "2^3 × 3^2 × 5"
    assert format_factorization({}) == "1"


def test_format_int_list():
    assert format_int_list([1, 2, 3]) == "1, 2, 3"
    assert format_int_list(range(25), limit=3) == "0, 1, 2, … (+22 more)"
