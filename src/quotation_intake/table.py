"""Line-item table — header classification + sentinel-terminated row walk."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from openpyxl.utils import get_column_letter

from quotation_intake import DEFAULT_UNIT
from quotation_intake.models import LineItem
from quotation_intake.normalize import parse_number
from quotation_intake.sheet import Region, Sheet, cell_text, is_blank

logger = logging.getLogger(__name__)

HEADER_REGION = Region(5, 20, 0, 10)
DEFAULT_MAX_ITEMS = 100


class ColumnRole(str, Enum):
    SR_NO = "srNo"
    DESCRIPTION = "description"
    QUANTITY = "quantity"
    UNIT = "unit"
    RATE = "rate"
    GST = "gst"
    AMOUNT = "amount"


# Checked in declaration order; a header cell takes the first role that matches.
ROLE_SYNONYMS: dict[ColumnRole, tuple[re.Pattern[str], ...]] = {
    ColumnRole.SR_NO: (
        re.compile(r"^(SR\.?|S\.?\s*NO\.?|SR\.?\s*NO\.?|SERIAL|#)$"),
    ),
    ColumnRole.DESCRIPTION: (
        re.compile(r"^(DESC|DESCRIPTION|DISCRIPTION|PARTICULARS?|ITEMS?|DETAILS?|PRODUCT)$"),
    ),
    ColumnRole.QUANTITY: (
        re.compile(r"^(QTY\.?|QUANTITY|QUAN\.)$"),
    ),
    ColumnRole.UNIT: (
        re.compile(r"^(UNITS?|UOM|U\.M\.?)$"),
    ),
    ColumnRole.RATE: (
        re.compile(r"^(RATE|PRICE|UNIT\s*PRICE|RATE/UNIT)$"),
    ),
    ColumnRole.GST: (
        re.compile(r"^(GST|TAX|VAT|GST\s*%|TAX\s*%)$"),
    ),
    ColumnRole.AMOUNT: (
        re.compile(r"^AMOUNT"),
        re.compile(r"^(TOTAL|AMT|VALUE)$"),
    ),
}

REQUIRED_ROLES = (ColumnRole.SR_NO, ColumnRole.DESCRIPTION)


@dataclass(frozen=True)
class TableHeader:
    row: int
    columns: Mapping[ColumnRole, int] = field(default_factory=dict)

    def column(self, role: ColumnRole) -> int | None:
        return self.columns.get(role)

    def column_letters(self) -> dict[str, str]:
        return {
            role.value: get_column_letter(col + 1)
            for role, col in self.columns.items()
        }


# ── Header detection ─────────────────────────────────────────────


def classify_header_cell(text: str) -> ColumnRole | None:
    """Return the role a header caption names, or ``None``."""
    normalized = text.strip().upper()
    if not normalized:
        return None
    for role, patterns in ROLE_SYNONYMS.items():
        if any(pattern.search(normalized) for pattern in patterns):
            return role
    return None


def classify_header_row(texts_by_col: Mapping[int, str]) -> dict[ColumnRole, int]:
    """Map roles to columns for one row; the rightmost column claiming a role keeps it."""
    columns: dict[ColumnRole, int] = {}
    for col in sorted(texts_by_col):
        role = classify_header_cell(texts_by_col[col])
        if role is not None:
            columns[role] = col
    return columns


def detect_header(sheet: Sheet, region: Region = HEADER_REGION) -> TableHeader | None:
    """Find the first row in *region* naming both a serial-number and a description column."""
    area = region.clamp(sheet.bounds)
    for row in range(area.row_start, area.row_end + 1):
        texts = {
            col: cell_text(value).upper()
            for _row, col, value in sheet.scan(Region(row, row, area.col_start, area.col_end))
        }
        columns = classify_header_row(texts)
        if all(role in columns for role in REQUIRED_ROLES):
            header = TableHeader(row, columns)
            logger.info(
                "Table header at row %d: %s", row + 1, header.column_letters()
            )
            return header
    return None


# ── Item rows ────────────────────────────────────────────────────


def _value(sheet: Sheet, row: int, col: int | None) -> object:
    return None if col is None else sheet.cell(row, col)


def _number_or(value: object, default: int | float) -> int | float:
    parsed = parse_number(value)
    return default if parsed is None else parsed


def extract_line_items(
    sheet: Sheet, header: TableHeader, max_items: int = DEFAULT_MAX_ITEMS
) -> list[LineItem]:
    """Walk the rows under *header* and build line items.

    A blank serial-number cell ends the table. A serial number that is
    non-blank but unparseable, or that parses to 0, only skips its row, as
    does a row with a blank description.
    """
    sr_col = header.column(ColumnRole.SR_NO)
    if sr_col is None:
        return []

    items: list[LineItem] = []
    last_row = sheet.bounds.max_row
    for row in range(header.row + 1, last_row + 1):
        sr_value = sheet.cell(row, sr_col)
        if is_blank(sr_value):
            break

        sr_no = parse_number(sr_value)
        if sr_no is None or sr_no == 0:
            logger.debug("Skipping row %d: serial %r is not an item number", row + 1, sr_value)
            continue

        description = cell_text(_value(sheet, row, header.column(ColumnRole.DESCRIPTION)))
        if not description:
            logger.debug("Skipping row %d: blank description", row + 1)
            continue

        unit = cell_text(_value(sheet, row, header.column(ColumnRole.UNIT)))
        items.append(
            LineItem(
                sr_no=sr_no,
                description=description,
                quantity=_number_or(_value(sheet, row, header.column(ColumnRole.QUANTITY)), 1),
                unit=unit or DEFAULT_UNIT,
                rate=_number_or(_value(sheet, row, header.column(ColumnRole.RATE)), 0),
                gst_percent=_number_or(_value(sheet, row, header.column(ColumnRole.GST)), 0),
                amount=_number_or(_value(sheet, row, header.column(ColumnRole.AMOUNT)), 0),
            )
        )

        if len(items) >= max_items:
            logger.warning("Reached maximum of %d items", max_items)
            break

    logger.info("Extracted %d items", len(items))
    return items
