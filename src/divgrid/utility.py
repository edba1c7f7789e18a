# -----------------------------------------------------------------------------
#  Shared exceptions and integer-size guards
# -----------------------------------------------------------------------------

from __future__ import annotations

from divgrid.runtime import CFG

_LOG10_2 = 0.30102999566398120


class UserInputError(Exception):
    pass


class InvalidInputError(UserInputError, ValueError):
    """Invalid argument handed to a core primitive (bad level, exponent, modulus...)."""


class MalformedListError(InvalidInputError):
    """A custom integer list could not be parsed; the whole list is rejected."""


def decimal_digits(n: int) -> int:
    """Number of decimal digits of |n|, without building str(n)."""
    n = abs(n)
    # the bit-length estimate is exact or one short
    guess = max(1, int(n.bit_length() * _LOG10_2))
    return guess + 1 if n >= 10 ** guess else guess


def max_digits() -> int:
    return int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000))


def guard_digits(n: int, what: str = "number") -> int:
    """Return n, or raise UserInputError when it is longer than BEHAVIOUR.MAX_DIGITS."""
    limit = max_digits()
    if decimal_digits(n) > limit:
        raise UserInputError(
            f"{what} has more than {limit} decimal digits "
            "(raise BEHAVIOUR.MAX_DIGITS in the profile to allow it)"
        )
    return n
