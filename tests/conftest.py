"""Shared fixtures: build sheets from A1-addressed cell maps."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string

from quotation_intake.sheet import Sheet

CellMap = Mapping[str, Any]


def _grid(cells: CellMap) -> list[list[Any]]:
    placed: dict[tuple[int, int], Any] = {}
    for address, value in cells.items():
        letters, row = coordinate_from_string(address)
        placed[(row - 1, column_index_from_string(letters) - 1)] = value
    if not placed:
        return []
    max_row = max(r for r, _ in placed)
    max_col = max(c for _, c in placed)
    return [[placed.get((r, c)) for c in range(max_col + 1)] for r in range(max_row + 1)]


@pytest.fixture
def make_sheet() -> Callable[..., Sheet]:
    def _make(cells: CellMap, **kwargs: Any) -> Sheet:
        return Sheet(_grid(cells), **kwargs)

    return _make


@pytest.fixture
def write_xlsx(tmp_path: Path) -> Callable[..., Path]:
    def _write(cells: CellMap, name: str = "quotation.xlsx") -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = "Quotation"
        for address, value in cells.items():
            ws[address] = value
        extra = wb.create_sheet("Notes")
        extra["A1"] = "REF NO"
        extra["B1"] = "99999"
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


@pytest.fixture
def quotation_cells() -> dict[str, Any]:
    """A typical quotation: labelled header block, shuffled item columns, TOTAL row."""
    return {
        "A1": "MEGA ENTERPRISES",
        "A2": "QUOTATION",
        "A3": "REF NO",
        "B3": "27788",
        "D3": "DATE",
        "E3": "15.03.2024",
        "A5": "TO,",
        "B5": "ACME CONSTRUCTION PVT LTD",
        "A6": "Plot 14, MIDC Industrial Area",
        # header row (row index 7) in non-canonical column order
        "A8": "DESCRIPTION",
        "B8": "SR NO",
        "C8": "UNIT",
        "D8": "QTY",
        "E8": "RATE",
        "F8": "GST %",
        "G8": "AMOUNT (EXCL GST)",
        "A9": "TMT BAR 12MM",
        "B9": 1,
        "C9": "KG",
        "D9": 1000,
        "E9": 30,
        "F9": 18,
        "G9": 30000,
        "A10": "CEMENT OPC 53 GRADE",
        "B10": 2,
        "C10": "BAG",
        "D10": 50,
        "E10": "₹400",
        "F10": "28%",
        "G10": "20,000",
        "B12": "TOTAL",
        "G12": 50000,
        "A14": "PAYMENT 50% ADVANCE, BALANCE AGAINST DELIVERY",
        "A15": "OFFER VALIDITY 2 WEEKS",
    }
