"""Orchestration — run every extractor over a sheet and assemble the record."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from quotation_intake.config import DEFAULT_CONFIG, ExtractionConfig
from quotation_intake.errors import NoLineItemsError, TableHeaderNotFoundError
from quotation_intake.fields import (
    extract_client_name,
    extract_date,
    extract_offer_validity,
    extract_payment_terms,
    extract_ref_no,
    extract_subtotal,
)
from quotation_intake.io import load_sheet
from quotation_intake.models import ExtractionReport, LineItem, QuotationRecord
from quotation_intake.sheet import CellBudget, Sheet
from quotation_intake.table import detect_header, extract_line_items
from quotation_intake.validator import validate_quotation

logger = logging.getLogger(__name__)


def extract_items(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> list[LineItem]:
    """Detect the item table header and read the rows beneath it."""
    header = detect_header(sheet)
    if header is None:
        raise TableHeaderNotFoundError("Could not find table header row")

    items = extract_line_items(sheet, header, max_items=config.max_items)
    if not items:
        raise NoLineItemsError("No line items found in table")

    if report is not None:
        report.header_row = header.row
        report.column_map = header.column_letters()
        report.record_source("items", f"{len(items)} rows below header row {header.row + 1}")
        if len(items) >= config.max_items:
            report.warnings.append(f"Reached maximum of {config.max_items} items")
    return items


def extract_quotation(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
    *,
    today: date | None = None,
) -> QuotationRecord:
    """Extract and validate one quotation from *sheet*.

    Fatal fields raise as soon as their strategies are exhausted; soft fields
    fall back to defaults and note a warning on *report*. The returned record
    has already passed :func:`validate_quotation`.
    """
    previous_budget = sheet.budget
    sheet.budget = CellBudget(config.max_cell_visits)
    logger.info("Extracting quotation from %r", sheet)
    try:
        record = QuotationRecord(
            ref_no=extract_ref_no(sheet, config, report),
            date=extract_date(sheet, config, report, today=today),
            client_name=extract_client_name(sheet, config, report),
            items=tuple(extract_items(sheet, config, report)),
            payment_terms=extract_payment_terms(sheet, config, report),
            offer_validity=extract_offer_validity(sheet, config, report),
            subtotal=extract_subtotal(sheet, config, report),
        )
        validate_quotation(record)
        cells_visited = sheet.cells_visited
    finally:
        sheet.budget = previous_budget

    if report is not None:
        report.cells_visited = cells_visited
    logger.info(
        "Quotation %s for %s: %d items, subtotal %s",
        record.ref_no,
        record.client_name,
        len(record.items),
        record.subtotal,
    )
    return record


def extract_quotation_file(
    source: Path | str | bytes,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
    *,
    suffix: str | None = None,
    today: date | None = None,
) -> QuotationRecord:
    """Load the first sheet of *source* (path or raw bytes) and extract from it."""
    sheet = load_sheet(source, suffix=suffix, max_bytes=config.max_file_bytes)
    return extract_quotation(sheet, config, report, today=today)
