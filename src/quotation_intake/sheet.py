"""Cell accessor — raw values by (row, col), occupied range, A1 addresses.

All coordinates are 0-based. Reads never raise for out-of-range or empty
cells; they return ``None``. The only failure a read can produce is
:class:`ScanBudgetExceededError` once the per-sheet cell budget runs out.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, NamedTuple

from openpyxl.utils import get_column_letter

from quotation_intake.errors import ScanBudgetExceededError


def is_blank(value: Any) -> bool:
    """True for ``None``, NaN, and empty / whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def cell_text(value: Any) -> str:
    """Stringify a raw cell value for matching (``27788.0`` -> ``"27788"``)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def cell_address(row: int, col: int) -> str:
    """``(3, 4)`` -> ``"E4"``."""
    return f"{get_column_letter(col + 1)}{row + 1}"


class Bounds(NamedTuple):
    min_row: int
    max_row: int
    min_col: int
    max_col: int


@dataclass(frozen=True)
class Region:
    """Inclusive rectangular scan window."""

    row_start: int = 0
    row_end: int | None = None
    col_start: int = 0
    col_end: int | None = None

    def clamp(self, bounds: Bounds) -> Region:
        """Intersect with *bounds*; open ends (``None``) take the bound."""
        row_end = bounds.max_row if self.row_end is None else min(self.row_end, bounds.max_row)
        col_end = bounds.max_col if self.col_end is None else min(self.col_end, bounds.max_col)
        return Region(max(self.row_start, 0), row_end, max(self.col_start, 0), col_end)


class CellBudget:
    """Counts cell reads for one extraction and raises past ``limit``."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.used = 0

    def charge(self) -> None:
        self.used += 1
        if self.used > self.limit:
            raise ScanBudgetExceededError(
                f"Cell visit budget of {self.limit} exhausted; sheet is too large to scan"
            )


class Sheet:
    """In-memory grid for the first tab of a workbook."""

    def __init__(
        self,
        rows: Iterable[Sequence[Any]],
        *,
        name: str = "Sheet1",
        max_cell_visits: int | None = None,
    ) -> None:
        self.name = name
        self._rows: list[list[Any]] = [
            [None if is_blank(value) else value for value in row] for row in rows
        ]
        while self._rows and all(value is None for value in self._rows[-1]):
            self._rows.pop()
        self.budget = CellBudget(max_cell_visits) if max_cell_visits else None
        max_col = -1
        for values in self._rows:
            populated = [idx for idx, value in enumerate(values) if value is not None]
            if populated:
                max_col = max(max_col, populated[-1])
        self._bounds = Bounds(0, len(self._rows) - 1, 0, max_col)

    @property
    def bounds(self) -> Bounds:
        """Occupied range; ``max_row``/``max_col`` are -1 for an empty sheet."""
        return self._bounds

    @property
    def cells_visited(self) -> int:
        return self.budget.used if self.budget else 0

    def cell(self, row: int, col: int) -> Any:
        if self.budget is not None:
            self.budget.charge()
        if row < 0 or col < 0 or row >= len(self._rows):
            return None
        values = self._rows[row]
        if col >= len(values):
            return None
        return values[col]

    def scan(self, region: Region | None = None) -> Iterator[tuple[int, int, Any]]:
        """Yield ``(row, col, value)`` row-major for populated cells in *region*."""
        area = (region or Region()).clamp(self.bounds)
        for row in range(area.row_start, area.row_end + 1):
            for col in range(area.col_start, area.col_end + 1):
                value = self.cell(row, col)
                if value is not None:
                    yield row, col, value

    def __repr__(self) -> str:
        b = self.bounds
        return f"Sheet({self.name!r}, rows={b.max_row + 1}, cols={b.max_col + 1})"
