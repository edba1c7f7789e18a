# tests/test_expreval.py
from __future__ import annotations

import pytest

from divgrid.expreval import parse_int
from divgrid.runtime import APPLY
from divgrid.utility import UserInputError

PARSE_CASES = [
    ("42", 42),
    ("-7", -7),
    ("+8", 8),
    ("1_000_000", 1_000_000),
    ("0xFF", 255),
    ("-0x10", -16),
    ("0b1010", 10),
    ("0o17", 15),
    ("123 456 789", 123456789),
    ("1,000", 1000),
    ("123.456.789", 123456789),
    ("2**10", 1024),
    ("2**61 - 1", 2**61 - 1),
    ("5!", 120),
    ("(3+2)!", 120),
    ("(3!)!", 720),
    ("5 !", 120),
    ("20! // 18!", 380),
    ("1e6", 10**6),
    ("3*1e3", 3000),
    ("-1e3", -1000),
    ("7 // 2", 3),
    ("-7 % 3", 2),
    ("1 << 10", 1024),
    ("0xF0 | 0x0F", 255),
    ("6 & 3", 2),
    ("6 ^ 3", 5),
    ("~0", -1),
    ("(1<<40)+15", (1 << 40) + 15),
]


@pytest.mark.parametrize("text,expected", PARSE_CASES, ids=[t for t, _ in PARSE_CASES])
def test_parse_int(text, expected):
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", [
    "",
    "   ",
    "abc",
    "True",
    "3.14",
    "1,23",
    "1/2",
    "2**-1",
    "1e-3",
    "abs(3)",
    "__import__('os')",
    "5 // 0",
    "5 % 0",
    "3!!",
    "!5",
    "1 << -1",
    "[1, 2]",
    "__factorial__(1, 2)",
    "1 000,000",
])
def test_parse_int_rejects(text):
    with pytest.raises(UserInputError):
        parse_int(text)


def test_digit_limit_applies_to_literals_and_results():
    APPLY({"BEHAVIOUR": {"MAX_DIGITS": 10}})
    assert parse_int("9999999999") == 9999999999
    with pytest.raises(UserInputError, match="decimal digits"):
        parse_int("12345678901")
    with pytest.raises(UserInputError, match="decimal digits"):
        parse_int("10**20")
    with pytest.raises(UserInputError):
        parse_int("2**100000")
    with pytest.raises(UserInputError):
        parse_int("100!")
