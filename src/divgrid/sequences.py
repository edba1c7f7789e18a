"""
Sequence variants

Each variant is a stateful generator stepped one term at a time. Variants
that depend on the current key (Collatz and its square-root twin) take it
as the argument to next(); the others ignore it. A step never raises for a
user problem: the outcome is reported through StepResult.status.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from enum import Enum

from divgrid.dataio import is_oeis_id, normalize_oeis_id
from divgrid.ntheory import integer_sqrt
from divgrid.oeis import ResolvedSequence, SequenceSource, SequenceUnavailable
from divgrid.registry import SequenceKind, sequence_variant
from divgrid.utility import MalformedListError

logger = logging.getLogger(__name__)


class StepStatus(str, Enum):
    VALUE = "value"
    FINISHED = "finished"
    LOADING = "loading"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"
    NO_SEQUENCE = "no-sequence"
    RESET = "reset"

    @property
    def requires_reset(self) -> bool:
        """Statuses after which the driver starts every variant over."""
        return self in _RESETTING


_RESETTING = frozenset({StepStatus.RESET, StepStatus.NO_SEQUENCE, StepStatus.INVALID, StepStatus.UNAVAILABLE})


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    value: int | None = None
    iteration: int | None = None
    message: str | None = None


class Sequence:
    """
    Base for all variants.

    Subclasses implement _advance(key), returning the next integer (the base
    records it and bumps iteration_index) or a StepResult for any other
    outcome. Setting self.finished inside _advance marks the emitted value
    as the last one; further calls return FINISHED until reset().
    """

    kind: SequenceKind
    label: str
    description: str
    oeis: str | None
    requires_key = False

    def __init__(self) -> None:
        self.iteration_index = 0
        self.finished = False
        self.reset()

    def reset(self) -> None:
        self.iteration_index = 0
        self.finished = False
        self._on_reset()

    def _on_reset(self) -> None:
        pass

    def is_finished(self) -> bool:
        return self.finished

    @property
    def link(self) -> str | None:
        return f"https://oeis.org/{self.oeis}" if self.oeis else None

    def next(self, key: int | None = None) -> StepResult:
        if self.finished:
            return StepResult(StepStatus.FINISHED, iteration=self.iteration_index)
        if self.requires_key and key is None:
            raise TypeError(f"{type(self).__name__}.next() needs the current key")

        outcome = self._advance(key)
        if isinstance(outcome, StepResult):
            return outcome

        index = self.iteration_index
        self.iteration_index += 1
        return StepResult(StepStatus.VALUE, outcome, index)

    def _advance(self, key: int | None) -> int | StepResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} i={self.iteration_index} finished={self.finished}>"


# ------------------------ key-driven ------------------------


@sequence_variant(kind=SequenceKind.COLLATZ, label="Collatz",
                  description="n/2 when even, 3n+1 (3n-1 below zero) when odd; stops at ±1")
class Collatz(Sequence):
    requires_key = True

    def _halve(self, n: int) -> int:
        return n // 2

    def _advance(self, key: int | None) -> int | StepResult:
        n = int(key)
        if n == 0:
            return StepResult(StepStatus.RESET, message=f"{self.label} is undefined at 0")
        if n % 2 == 0:
            value = self._halve(n)
        elif n > 0:
            value = 3 * n + 1
        else:
            value = 3 * n - 1
        if value in (1, -1):
            self.finished = True
        return value


@sequence_variant(kind=SequenceKind.COLLATZ_ROOT, label="Collatz (sqrt)",
                  description="floor square root when even, 3n±1 when odd; stops at ±1")
class CollatzRoot(Collatz):
    def _halve(self, n: int) -> int:
        return integer_sqrt(n)


# ------------------------ recurrences ------------------------


@sequence_variant(kind=SequenceKind.PELL, label="Pell", description="a(n) = 2a(n-1) + a(n-2)",
                  oeis="A000129")
class Pell(Sequence):
    def _on_reset(self) -> None:
        self.prev = 0
        self.last = 0

    def _advance(self, key: int | None) -> int:
        i = self.iteration_index
        value = i if i < 2 else 2 * self.last + self.prev
        self.prev, self.last = self.last, value
        return value


@sequence_variant(kind=SequenceKind.FIBONACCI, label="Fibonacci", description="a(n) = a(n-1) + a(n-2)",
                  oeis="A000045")
class Fibonacci(Sequence):
    def _on_reset(self) -> None:
        self.low = 0
        self.high = 1

    def _advance(self, key: int | None) -> int:
        value = self.low
        self.low, self.high = self.high, self.low + self.high
        return value


@sequence_variant(kind=SequenceKind.A193651, label="A193651",
                  description="ceil((2n-1)!! / 2)", oeis="A193651")
class A193651(Sequence):
    def _on_reset(self) -> None:
        self.k = 1
        self.product = 1

    def _advance(self, key: int | None) -> int:
        self.product *= self.k
        self.k += 2
        return self.product - self.product // 2


@sequence_variant(kind=SequenceKind.A037992, label="A037992",
                  description="smallest number with 2^n divisors", oeis="A037992")
class A037992(Sequence):
    def _on_reset(self) -> None:
        self.k = 1
        self.product = 1

    def _advance(self, key: int | None) -> int:
        self.product *= self.k
        while self.product % self.k == 0:
            self.k += 1
        return self.product


@sequence_variant(kind=SequenceKind.WALL_CLOCK, label="Time", description="Unix time in whole seconds")
class WallClockSeconds(Sequence):
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        super().__init__()

    def _advance(self, key: int | None) -> int:
        return int(self.clock())


# ------------------------ lists ------------------------


def parse_integer_list(text: str) -> tuple[int, ...]:
    """
    Comma-separated integers; blank entries are skipped.

    Any entry that is not an integer rejects the whole list.
    """
    values: list[int] = []
    for pos, entry in enumerate((text or "").split(","), start=1):
        entry = entry.strip()
        if not entry:
            continue
        try:
            values.append(int(entry))
        except ValueError as e:
            raise MalformedListError(f"entry {pos} ({entry!r}) is not an integer") from e
    return tuple(values)


class _ListSequence(Sequence):
    _values: tuple[int, ...] | None

    def _emit(self) -> int:
        assert self._values is not None
        value = self._values[self.iteration_index]
        if self.iteration_index + 1 >= len(self._values):
            self.finished = True
        return value


@sequence_variant(kind=SequenceKind.CUSTOM_LIST, label="Custom list",
                  description="comma-separated integers you type in")
class CustomList(_ListSequence):
    def __init__(self, text: str = "") -> None:
        self.text = text
        super().__init__()

    def set_text(self, text: str) -> None:
        self.text = text
        self.reset()

    def _on_reset(self) -> None:
        self._values = None

    def _advance(self, key: int | None) -> int | StepResult:
        if self._values is None:
            try:
                values = parse_integer_list(self.text)
            except MalformedListError as e:
                return StepResult(StepStatus.INVALID, message=f"custom list: {e}")
            if not values:
                return StepResult(StepStatus.NO_SEQUENCE, message="custom list is empty")
            self._values = values
        return self._emit()


class FetchState(Enum):
    NOT_STARTED = "not-started"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@sequence_variant(kind=SequenceKind.EXTERNAL_LIST, label="OEIS",
                  description="terms of an OEIS sequence, by A-number")
class ExternalList(_ListSequence):
    """
    Terms come from a SequenceSource. The first next() starts the fetch;
    while it is outstanding next() answers LOADING without blocking.
    reset() and select() abandon any outstanding fetch.
    """

    def __init__(self, identifier: str = "", source: SequenceSource | None = None) -> None:
        self.identifier = identifier
        self.source = source
        self._future: Future[ResolvedSequence] | None = None
        super().__init__()

    def select(self, identifier: str) -> None:
        self.identifier = identifier
        self.reset()

    def _on_reset(self) -> None:
        if self._future is not None:
            self._future.cancel()
        self._future = None
        self._values = None
        self.state = FetchState.NOT_STARTED
        self.name: str | None = None
        self.error: str | None = None

    def poll(self) -> FetchState:
        """Pick up a completed fetch, if any; never blocks."""
        fut = self._future
        if self.state is not FetchState.PENDING or fut is None or not fut.done():
            return self.state
        self._future = None
        try:
            resolved = fut.result()
        except (SequenceUnavailable, CancelledError, TimeoutError, OSError) as e:
            self._fail(str(e) or type(e).__name__)
            return self.state

        if not resolved.values:
            self._fail(f"{resolved.identifier}: no terms")
        else:
            self._values = tuple(resolved.values)
            self.name = resolved.name
            self.state = FetchState.READY
            logger.debug("%s ready with %d terms", resolved.identifier, len(resolved.values))
        return self.state

    def _fail(self, message: str) -> None:
        self.state = FetchState.FAILED
        self.error = message
        logger.info("sequence %s unavailable: %s", self.identifier, message)

    def _start(self) -> StepResult | None:
        if not is_oeis_id(self.identifier):
            return StepResult(StepStatus.INVALID, message=f"not an OEIS id: {self.identifier!r}")
        if self.source is None:
            return StepResult(StepStatus.UNAVAILABLE, message="no sequence source configured")
        self.identifier = normalize_oeis_id(self.identifier)
        self._future = self.source.fetch(self.identifier)
        self.state = FetchState.PENDING
        return None

    def _advance(self, key: int | None) -> int | StepResult:
        if self.state is FetchState.NOT_STARTED:
            problem = self._start()
            if problem is not None:
                return problem
        self.poll()

        if self.state is FetchState.PENDING:
            return StepResult(StepStatus.LOADING, message=f"loading {self.identifier}")
        if self.state is FetchState.FAILED:
            return StepResult(StepStatus.UNAVAILABLE, message=self.error)
        return self._emit()
