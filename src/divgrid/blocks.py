from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Block:
    # --- non-default fields (no "= ...") FIRST ---
    n: int                      # value of this cell
    d: int                      # divisor row (step size between columns), always >= 1
    x: float                    # screen coordinates, owned by the grid generator
    y: float
    divisor_of_key: bool        # whole row divides the key (remainder 0), not this cell
    step: int                   # column offset from the row anchor: 0, <0 left, >0 right

    # --- fields WITH defaults AFTER all non-defaults ---
    midpoint: bool = False      # cosmetic half-step tick; n/d carry no meaning here

    def tick(self, dx: float) -> Block:
        """Midpoint marker copied from this block, shifted horizontally by dx."""
        return replace(self, x=self.x + dx, midpoint=True)
