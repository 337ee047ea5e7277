"""Search primitives — label lookup, adjacency, structural patterns."""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Any, NamedTuple

from quotation_intake.sheet import Region, Sheet, cell_address, cell_text


class CellMatch(NamedTuple):
    row: int
    col: int
    value: Any

    @property
    def address(self) -> str:
        return cell_address(self.row, self.col)


class Direction(str, Enum):
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"
    UP = "up"


_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.RIGHT: (0, 1),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.UP: (-1, 0),
}


def find_label(
    sheet: Sheet, labels: Iterable[str], region: Region | None = None
) -> CellMatch | None:
    """Return the first cell (row-major) whose upper-cased text contains any label."""
    candidates = [label.upper() for label in labels]
    for row, col, value in sheet.scan(region):
        text = cell_text(value).upper()
        if any(label in text for label in candidates):
            return CellMatch(row, col, value)
    return None


def adjacent_value(
    sheet: Sheet, row: int, col: int, direction: Direction | str = Direction.RIGHT
) -> Any:
    """Raw value one step from ``(row, col)`` in *direction*."""
    d_row, d_col = _OFFSETS[Direction(direction)]
    return sheet.cell(row + d_row, col + d_col)


def find_by_pattern(
    sheet: Sheet, pattern: str | re.Pattern[str], region: Region | None = None
) -> CellMatch | None:
    """Return the first cell (row-major) whose trimmed text fully matches *pattern*."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    for row, col, value in sheet.scan(region):
        if regex.fullmatch(cell_text(value)):
            return CellMatch(row, col, value)
    return None
