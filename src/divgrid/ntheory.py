# -----------------------------------------------------------------------------
#  ntheory.py
#  Arbitrary-precision number theory primitives
# -----------------------------------------------------------------------------
"""
Exact integer primitives used to classify grid cells and to drive sequences.

Negative inputs are handled on the absolute value. Predicates
(``is_prime``, ``is_likely_prime``, ``is_power_of_two``) return a plain
``bool`` for ``|n|``; ``integer_sqrt`` negates the root of ``|n|``;
``divisors`` lists the positive divisors of ``|n|``.
"""

from __future__ import annotations

from divgrid.utility import InvalidInputError

SMALL_PRIMES = (2, 3, 5, 7)
FIRST_TRIAL_CANDIDATE = 11

# Euler test verdicts for 0..5
_SMALL_LIKELY_PRIME = (False, False, True, True, False, True)

ROOT_MAX_ITER = 100


# ----------------------------- primality -----------------------------


def is_prime(n: int) -> bool:
    """
    Deterministic primality by trial division.

    The small primes 2, 3, 5, 7 are tested first, then odd candidates from 11
    up to floor(sqrt(n)).
    """
    if n < 0:
        return is_prime(-n)
    if n <= 10:
        return n in SMALL_PRIMES

    for p in SMALL_PRIMES:
        if n % p == 0:
            return False

    boundary = integer_sqrt(n)
    for i in range(FIRST_TRIAL_CANDIDATE, boundary + 1, 2):
        if n % i == 0:
            return False
    return True


def is_likely_prime(n: int) -> bool:
    """
    One round of the Euler probable-prime test to base 3.

    Composite Euler pseudoprimes to base 3 (121, 1729, ...) pass; this is a
    display heuristic, not a certificate.
    """
    n = abs(n)
    if n > 2 and n % 2 == 0:
        return False
    if n <= 5:
        return _SMALL_LIKELY_PRIME[n]

    x = mod_pow(3, (n - 1) >> 1, n)
    return x == n - 1 or x == 1


def is_power_of_two(n: int) -> bool:
    n = abs(n)
    return n != 0 and (n & (n - 1)) == 0


# ----------------------------- roots & powers -----------------------------


def integer_sqrt(n: int, k: int = 2, *, max_iter: int = ROOT_MAX_ITER) -> int:
    """
    Integer k-th root by Newton iteration: floor(n ** (1/k)) for n >= 0.

    x_{i+1} = ((k-1)*x_i + n // x_i**(k-1)) // k, started from a power of two
    that bounds the root from above. The iterates decrease strictly until they
    reach the floor root, so iteration stops on an exact root, when the iterate
    stops decreasing, or after ``max_iter`` rounds (returning the last iterate).

    Negative n gives -integer_sqrt(-n, k).
    """
    if k < 1:
        raise InvalidInputError(f"root degree must be >= 1, got {k}")
    if n < 0:
        return -integer_sqrt(-n, k, max_iter=max_iter)
    if n < 2 or k == 1:
        return n

    x = 1 << -(-n.bit_length() // k)
    for _ in range(max_iter):
        if x ** k == n:
            return x
        y = ((k - 1) * x + n // x ** (k - 1)) // k
        if y >= x:
            return x
        x = y
    return x


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """
    base ** exponent mod modulus, result in [0, modulus).

    Negative exponents are rejected (no modular inverses), as are moduli < 1.
    """
    if exponent < 0:
        raise InvalidInputError(f"exponent must be >= 0, got {exponent}")
    if modulus < 1:
        raise InvalidInputError(f"modulus must be >= 1, got {modulus}")
    if modulus == 1:
        return 0
    return pow(base, exponent, modulus)


# ----------------------------- divisors -----------------------------


def divisors(n: int, *, proper: bool = False) -> list[int]:
    """
    Ascending positive divisors of |n| by trial division up to floor(sqrt(|n|)).

    proper=True leaves |n| itself out (and gives [1] for |n| <= 3).
    """
    n = abs(n)
    if n <= 1:
        return [1]
    if proper and n <= 3:
        return [1]

    low = [1]
    high = [] if proper else [n]
    boundary = integer_sqrt(n)
    for d in range(2, boundary + 1):
        if n % d == 0:
            low.append(d)
            q = n // d
            if q > boundary:
                high.append(q)

    # high was collected in descending order
    high.reverse()
    return low + high


def nearest_multiple(n: int, d: int) -> int:
    """Largest multiple of d that is <= n (d > 0)."""
    if d <= 0:
        raise InvalidInputError(f"divisor must be >= 1, got {d}")
    return n - n % d
