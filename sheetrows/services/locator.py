from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from ..excel.cells import cell_text
from ..excel.grid import Grid
from ..models.point import Point

"""Bounded anti-diagonal cell search.

Cells are visited one anti-diagonal (``row + column``) at a time, alternating
direction, starting from the top-left corner. As ``(column, row)`` the order
begins::

    (0,0), (1,0), (0,1), (0,2), (1,1), (2,0), (3,0), (2,1), (1,2), (0,3), ...

Odd diagonals run from the top-right end to the bottom-left end, even diagonals
the other way. The start state is ``TRANSITION_ACROSS`` on purpose: starting
with ``TRANSITION_DOWN`` runs the same four transitions over the transposed
order, (0,0), (0,1), (1,0), ..., so keep it to hold the order above.

The search gives up after ``max_steps`` probes so a huge or pathological sheet
cannot make it run forever; a match beyond the budget is reported as not found.
"""

__all__ = [
    "DEFAULT_MAX_STEPS",
    "INITIAL_STATE",
    "CellNotFoundError",
    "Direction",
    "SweepState",
    "advance",
    "locate_cell",
    "sweep",
]

DEFAULT_MAX_STEPS = 1000

logger = logging.getLogger(__name__)


class CellNotFoundError(LookupError):
    """The target was not found within the step budget."""

    def __init__(self, target: str, max_steps: int) -> None:
        super().__init__(f"Could not find '{target}' in less than {max_steps} steps.")
        self.target = target
        self.max_steps = max_steps


class Direction(Enum):
    GOING_UP = "going_up"  # row - 1, column + 1
    GOING_DOWN = "going_down"  # row + 1, column - 1
    TRANSITION_DOWN = "transition_down"  # row + 1, starts an even diagonal
    TRANSITION_ACROSS = "transition_across"  # column + 1, starts an odd diagonal


@dataclass(frozen=True)
class SweepState:
    row: int
    column: int
    direction: Direction

    @property
    def point(self) -> Point:
        return Point(column=self.column, row=self.row)

    @property
    def diagonal(self) -> int:
        return self.row + self.column


INITIAL_STATE = SweepState(row=0, column=0, direction=Direction.TRANSITION_ACROSS)


def advance(state: SweepState) -> SweepState:
    """Move one cell along the sweep. Pure; never touches a grid."""
    row, column, direction = state.row, state.column, state.direction
    if direction is Direction.GOING_DOWN:
        row += 1
        column -= 1
        if column == 0:
            direction = Direction.TRANSITION_DOWN
    elif direction is Direction.GOING_UP:
        row -= 1
        column += 1
        if row == 0:
            direction = Direction.TRANSITION_ACROSS
    elif direction is Direction.TRANSITION_DOWN:
        row += 1
        direction = Direction.GOING_UP
    else:
        column += 1
        direction = Direction.GOING_DOWN
    return SweepState(row=row, column=column, direction=direction)


def sweep(state: SweepState | None = None) -> Iterator[SweepState]:
    """Yield sweep states forever, starting with ``state`` (default: top-left)."""
    current = INITIAL_STATE if state is None else state
    while True:
        yield current
        current = advance(current)


def locate_cell(grid: Grid, target: str, max_steps: int = DEFAULT_MAX_STEPS) -> Point:
    """Return the ``Point(column, row)`` of the first cell whose text equals ``target``.

    Cells with no value (blank, short rows, past the grid edge) never match.

    Raises:
        CellNotFoundError: no match within ``max_steps`` probes
    """
    for steps, state in enumerate(sweep()):
        if steps >= max_steps:
            break
        if cell_text(grid.cell_value(state.row, state.column)) == target:
            logger.debug(f"found '{target}' at {state.point} on diagonal {state.diagonal} after {steps + 1} probes")
            return state.point
    raise CellNotFoundError(target, max_steps)
