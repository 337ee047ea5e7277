"""Header classification and line-item row walk."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from quotation_intake import DEFAULT_UNIT
from quotation_intake.sheet import Sheet
from quotation_intake.table import (
    ColumnRole,
    TableHeader,
    classify_header_cell,
    classify_header_row,
    detect_header,
    extract_line_items,
)

# ── Header synonyms ──────────────────────────────────────────────


@pytest.mark.parametrize(
    ("caption", "role"),
    [
        ("SR", ColumnRole.SR_NO),
        ("Sr.", ColumnRole.SR_NO),
        ("S.NO", ColumnRole.SR_NO),
        ("S. No.", ColumnRole.SR_NO),
        ("SR NO", ColumnRole.SR_NO),
        ("Sr.No.", ColumnRole.SR_NO),
        ("SERIAL", ColumnRole.SR_NO),
        ("#", ColumnRole.SR_NO),
        ("Desc", ColumnRole.DESCRIPTION),
        ("DESCRIPTION", ColumnRole.DESCRIPTION),
        ("Discription", ColumnRole.DESCRIPTION),
        ("PARTICULAR", ColumnRole.DESCRIPTION),
        ("Particulars", ColumnRole.DESCRIPTION),
        ("ITEM", ColumnRole.DESCRIPTION),
        ("Items", ColumnRole.DESCRIPTION),
        ("DETAILS", ColumnRole.DESCRIPTION),
        ("Product", ColumnRole.DESCRIPTION),
        ("QTY", ColumnRole.QUANTITY),
        ("Qty.", ColumnRole.QUANTITY),
        ("QUANTITY", ColumnRole.QUANTITY),
        ("Quan.", ColumnRole.QUANTITY),
        ("UNIT", ColumnRole.UNIT),
        ("Units", ColumnRole.UNIT),
        ("UOM", ColumnRole.UNIT),
        ("U.M.", ColumnRole.UNIT),
        ("RATE", ColumnRole.RATE),
        ("Price", ColumnRole.RATE),
        ("UNIT PRICE", ColumnRole.RATE),
        ("UnitPrice", ColumnRole.RATE),
        ("Rate/Unit", ColumnRole.RATE),
        ("GST", ColumnRole.GST),
        ("GST %", ColumnRole.GST),
        ("Tax", ColumnRole.GST),
        ("TAX%", ColumnRole.GST),
        ("VAT", ColumnRole.GST),
        ("AMOUNT", ColumnRole.AMOUNT),
        ("Amount (Excl GST)", ColumnRole.AMOUNT),
        ("AMT", ColumnRole.AMOUNT),
        ("Total", ColumnRole.AMOUNT),
        ("VALUE", ColumnRole.AMOUNT),
    ],
)
def test_classify_header_cell_synonyms(caption: str, role: ColumnRole) -> None:
    assert classify_header_cell(caption) is role


@pytest.mark.parametrize(
    "caption",
    ["", "   ", "REMARKS", "HSN CODE", "SR NO / CODE", "GRAND TOTAL", "UNIT RATE INCL"],
)
def test_classify_header_cell_rejects_other_captions(caption: str) -> None:
    assert classify_header_cell(caption) is None


def test_classify_header_row_rightmost_column_keeps_role() -> None:
    columns = classify_header_row({0: "SR NO", 1: "ITEM", 2: "DESCRIPTION", 5: "AMOUNT", 6: "TOTAL"})

    assert columns[ColumnRole.DESCRIPTION] == 2
    assert columns[ColumnRole.AMOUNT] == 6


def test_amount_comes_from_total_column_after_gst(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({
        "A7": "SR NO", "B7": "DESCRIPTION", "C7": "QTY", "D7": "RATE",
        "E7": "AMOUNT", "F7": "GST %", "G7": "TOTAL",
        "A8": 1, "B8": "PIPE", "C8": 2, "D8": 100, "E8": 200, "F8": 18, "G8": 236,
    })
    header = detect_header(sheet)
    assert header is not None

    (item,) = extract_line_items(sheet, header)

    assert header.column(ColumnRole.AMOUNT) == 6
    assert item.amount == 236
    assert (item.quantity, item.rate, item.gst_percent) == (2, 100, 18)


# ── Header detection ─────────────────────────────────────────────


def test_detect_header_handles_shuffled_columns(
    make_sheet: Callable[..., Sheet], quotation_cells: dict[str, Any]
) -> None:
    header = detect_header(make_sheet(quotation_cells))

    assert header is not None
    assert header.row == 7
    assert header.columns == {
        ColumnRole.DESCRIPTION: 0,
        ColumnRole.SR_NO: 1,
        ColumnRole.UNIT: 2,
        ColumnRole.QUANTITY: 3,
        ColumnRole.RATE: 4,
        ColumnRole.GST: 5,
        ColumnRole.AMOUNT: 6,
    }
    assert header.column_letters() == {
        "description": "A",
        "srNo": "B",
        "unit": "C",
        "quantity": "D",
        "rate": "E",
        "gst": "F",
        "amount": "G",
    }


def test_detect_header_needs_serial_and_description(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({
        "A7": "SR NO", "C7": "QTY",           # no description column
        "A9": "S.NO", "B9": "PARTICULARS", "C9": "AMOUNT",
    })

    header = detect_header(sheet)

    assert header is not None
    assert header.row == 8
    assert header.column(ColumnRole.QUANTITY) is None


def test_detect_header_ignores_rows_above_six(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({"A5": "SR NO", "B5": "DESCRIPTION", "A6": 1, "B6": "Pipe"})

    assert detect_header(sheet) is None


def test_detect_header_ignores_rows_below_twenty_one(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({"A22": "SR NO", "B22": "DESCRIPTION"})

    assert detect_header(sheet) is None


# ── Item rows ────────────────────────────────────────────────────


def _header(**extra: int) -> TableHeader:
    columns = {ColumnRole.SR_NO: 0, ColumnRole.DESCRIPTION: 1}
    columns.update({ColumnRole(k): v for k, v in extra.items()})
    return TableHeader(row=0, columns=columns)


def test_extract_line_items_from_fixture(
    make_sheet: Callable[..., Sheet], quotation_cells: dict[str, Any]
) -> None:
    sheet = make_sheet(quotation_cells)
    header = detect_header(sheet)
    assert header is not None

    items = extract_line_items(sheet, header)

    assert [item.to_dict() for item in items] == [
        {
            "srNo": 1,
            "description": "TMT BAR 12MM",
            "quantity": 1000,
            "unit": "KG",
            "rate": 30,
            "gstPercent": 18,
            "amount": 30000,
        },
        {
            "srNo": 2,
            "description": "CEMENT OPC 53 GRADE",
            "quantity": 50,
            "unit": "BAG",
            "rate": 400,
            "gstPercent": 28,
            "amount": 20000,
        },
    ]


def test_blank_serial_ends_table(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({
        "A1": "SR", "B1": "ITEM",
        "A2": 1, "B2": "Valve",
        "B3": "continuation text",
        "A4": 2, "B4": "Elbow",
    })

    items = extract_line_items(sheet, _header())

    assert [item.description for item in items] == ["Valve"]


@pytest.mark.parametrize("separator", [0, "0", "-", "SUB-TOTAL", "note"])
def test_zero_or_non_numeric_serial_skips_row(
    make_sheet: Callable[..., Sheet], separator: object
) -> None:
    sheet = make_sheet({
        "A1": "SR", "B1": "ITEM",
        "A2": 1, "B2": "Valve",
        "A3": separator, "B3": "Section B",
        "A4": 2, "B4": "Elbow",
    })

    items = extract_line_items(sheet, _header())

    assert [item.sr_no for item in items] == [1, 2]


def test_blank_description_skips_row(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({
        "A1": "SR", "B1": "ITEM",
        "A2": 1, "B2": "   ",
        "A3": 2, "B3": "Elbow",
    })

    items = extract_line_items(sheet, _header())

    assert [(item.sr_no, item.description) for item in items] == [(2, "Elbow")]


def test_defaults_apply_only_when_value_is_absent(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({
        "A1": "SR", "B1": "ITEM", "C1": "QTY", "D1": "UNIT", "E1": "RATE", "F1": "GST", "G1": "AMOUNT",
        "A2": 1, "B2": "Free sample", "C2": 0, "E2": 0, "F2": 0, "G2": 0,
        "A3": 2, "B3": "Bolt", "C3": "", "D3": " ", "E3": "n/a",
    })
    header = _header(quantity=2, unit=3, rate=4, gst=5, amount=6)

    first, second = extract_line_items(sheet, header)

    assert first.quantity == 0
    assert first.unit == DEFAULT_UNIT
    assert (first.rate, first.gst_percent, first.amount) == (0, 0, 0)
    assert second.quantity == 1
    assert second.unit == "NOS"
    assert second.rate == 0


def test_missing_optional_columns_use_defaults(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({"A1": "SR", "B1": "ITEM", "A2": "1", "B2": "Gasket"})

    (item,) = extract_line_items(sheet, _header())

    assert item.sr_no == 1
    assert (item.quantity, item.unit, item.rate, item.gst_percent, item.amount) == (
        1, "NOS", 0, 0, 0,
    )


def test_max_items_caps_the_walk(make_sheet: Callable[..., Sheet]) -> None:
    cells: dict[str, object] = {"A1": "SR", "B1": "ITEM"}
    for n in range(1, 8):
        cells[f"A{n + 1}"] = n
        cells[f"B{n + 1}"] = f"Item {n}"

    items = extract_line_items(make_sheet(cells), _header(), max_items=3)

    assert [item.sr_no for item in items] == [1, 2, 3]


def test_header_on_last_row_yields_no_items(make_sheet: Callable[..., Sheet]) -> None:
    sheet = make_sheet({"A1": "SR", "B1": "ITEM"})

    assert extract_line_items(sheet, _header()) == []
