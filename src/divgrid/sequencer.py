# src/divgrid/sequencer.py
from __future__ import annotations

import logging
from collections.abc import Callable

from divgrid.oeis import SequenceSource
from divgrid.registry import Index, SequenceKind, discover
from divgrid.sequences import CustomList, ExternalList, Sequence, StepResult, StepStatus, WallClockSeconds
from divgrid.utility import InvalidInputError

logger = logging.getLogger(__name__)


class Sequencer:
    """
    Owns one instance of every discovered variant and the current selection.

    Changing the selection starts every variant over. A step that reports
    RESET, NO_SEQUENCE, INVALID or UNAVAILABLE does the same; a FINISHED
    step re-arms only the current variant so the next step starts it again.
    """

    def __init__(self, index: Index | None = None, *, source: SequenceSource | None = None,
                 clock: Callable[[], float] | None = None,
                 default: SequenceKind | str = SequenceKind.COLLATZ):
        self.index = index or discover()
        self.variants: dict[SequenceKind, Sequence] = {}
        for kind, cls in self.index.variants.items():
            if issubclass(cls, ExternalList):
                self.variants[kind] = cls(source=source)
            elif issubclass(cls, WallClockSeconds) and clock is not None:
                self.variants[kind] = cls(clock=clock)
            else:
                self.variants[kind] = cls()
        if not self.variants:
            raise InvalidInputError("no sequence variants available")
        self.current = self._resolve(default)

    def _resolve(self, kind: SequenceKind | str) -> SequenceKind:
        if not isinstance(kind, SequenceKind):
            try:
                kind = SequenceKind.parse(kind)
            except ValueError as e:
                raise InvalidInputError(str(e)) from e
        if kind not in self.variants:
            raise InvalidInputError(f"sequence variant {kind.value!r} is not available")
        return kind

    @property
    def variant(self) -> Sequence:
        return self.variants[self.current]

    def select(self, kind: SequenceKind | str) -> Sequence:
        self.current = self._resolve(kind)
        self.reset()
        return self.variant

    def reset(self) -> None:
        for seq in self.variants.values():
            seq.reset()

    def _variant_of(self, cls: type) -> Sequence:
        for seq in self.variants.values():
            if isinstance(seq, cls):
                return seq
        raise InvalidInputError(f"{cls.__name__} is not available")

    def set_custom_list(self, text: str) -> None:
        seq = self._variant_of(CustomList)
        assert isinstance(seq, CustomList)
        seq.set_text(text)

    def set_external_id(self, identifier: str) -> None:
        seq = self._variant_of(ExternalList)
        assert isinstance(seq, ExternalList)
        seq.select(identifier)

    def step(self, key: int) -> StepResult:
        result = self.variant.next(key)
        if result.status.requires_reset:
            logger.info("%s: %s (%s); resetting all sequences",
                        self.current.value, result.status.value, result.message or "-")
            self.reset()
        elif result.status is StepStatus.FINISHED:
            logger.debug("%s finished after %d values", self.current.value, self.variant.iteration_index)
            self.variant.reset()
        return result
