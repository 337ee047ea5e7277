"""Scalar field extractors — one ordered strategy cascade per field.

Every strategy is a plain function ``(sheet, config) -> FieldHit | None``;
the first strategy that returns a hit wins. Fatal fields raise
:class:`FieldNotFoundError` when the cascade is exhausted, soft fields log a
warning and fall back to their documented default.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from quotation_intake import DEFAULT_OFFER_VALIDITY, DEFAULT_PAYMENT_TERMS
from quotation_intake.config import DEFAULT_CONFIG, ExtractionConfig
from quotation_intake.errors import FieldNotFoundError
from quotation_intake.models import ExtractionReport
from quotation_intake.normalize import parse_date, parse_number
from quotation_intake.search import Direction, adjacent_value, find_by_pattern, find_label
from quotation_intake.sheet import Region, Sheet, cell_address, cell_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldHit:
    value: Any
    source: str


Strategy = Callable[[Sheet, ExtractionConfig], FieldHit | None]

# ── Search windows ───────────────────────────────────────────────

LABEL_REGION = Region(0, 15, 0, 10)
CLIENT_LABEL_REGION = Region(0, 15, 0, 5)
CLIENT_KEYWORD_REGION = Region(3, 11, 0, 5)
TOP_LEFT_REGION = Region(0, 9, 0, 9)

# Columns E and F, where older templates put values beside a label.
SAME_ROW_VALUE_COLUMNS = (4, 5)

REF_NO_CELL = (3, 4)  # E4
CLIENT_CELL = (4, 1)  # B5
DATE_CELL = (4, 4)  # E5

SUBTOTAL_LOOKAHEAD = 5

# ── Vocabulary ───────────────────────────────────────────────────

REF_NO_LABELS = ("REF NO", "REF. NO", "QUOTATION NO", "QUOTE NO")
CLIENT_LABELS = ("TO,", "TO:", "TO")
DATE_LABELS = ("DATE", "DATED")

FIVE_DIGIT_RE = re.compile(r"\d{5}")
GENERIC_CLIENT_LABEL_RE = re.compile(r"^(TO|CLIENT|NAME):?$", re.IGNORECASE)
COMPANY_KEYWORD_RE = re.compile(
    r"\b(LTD|LIMITED|PVT|PRIVATE|CONSTRUCTION|INFRASTRUCTURE|PROJECTS?|"
    r"ENTERPRISES?|CORPORATION|COMPANY|INC)\b",
    re.IGNORECASE,
)


# ── Shared helpers ───────────────────────────────────────────────


def _is_issuer(text: str, config: ExtractionConfig) -> bool:
    return config.issuer_name in text.upper()


def _right_of(sheet: Sheet, row: int, col: int) -> tuple[Any, str]:
    return adjacent_value(sheet, row, col, Direction.RIGHT), cell_address(row, col + 1)


def _same_row_candidates(sheet: Sheet, row: int, col: int) -> list[tuple[Any, str]]:
    """Right-adjacent value first, then the same row's columns E and F."""
    candidates = [_right_of(sheet, row, col)]
    for value_col in SAME_ROW_VALUE_COLUMNS:
        if value_col != col:
            candidates.append((sheet.cell(row, value_col), cell_address(row, value_col)))
    return candidates


def run_cascade(
    field_name: str,
    strategies: Sequence[Strategy],
    sheet: Sheet,
    config: ExtractionConfig,
) -> FieldHit | None:
    for strategy in strategies:
        hit = strategy(sheet, config)
        if hit is not None:
            logger.info("%s: %r (%s)", field_name, hit.value, hit.source)
            return hit
        logger.debug("%s: strategy %s found nothing", field_name, strategy.__name__)
    return None


def _record(report: ExtractionReport | None, field_name: str, source: str) -> None:
    if report is not None:
        report.record_source(field_name, source)


def _soft_default(
    report: ExtractionReport | None, field_name: str, message: str
) -> None:
    logger.warning(message)
    if report is not None:
        report.warnings.append(message)
        report.record_source(field_name, "default")


# ── Reference number ─────────────────────────────────────────────


def ref_no_from_label(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    label = find_label(sheet, REF_NO_LABELS, LABEL_REGION)
    if label is None:
        return None
    for value, address in _same_row_candidates(sheet, label.row, label.col):
        if value is not None:
            return FieldHit(cell_text(value), f"label at {label.address} -> {address}")
    return None


def ref_no_from_fixed_cell(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    value = sheet.cell(*REF_NO_CELL)
    text = cell_text(value)
    if value is not None and FIVE_DIGIT_RE.fullmatch(text):
        return FieldHit(text, f"fixed cell {cell_address(*REF_NO_CELL)}")
    return None


def ref_no_from_pattern(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    match = find_by_pattern(sheet, FIVE_DIGIT_RE, TOP_LEFT_REGION)
    if match is None:
        return None
    return FieldHit(cell_text(match.value), f"5-digit pattern at {match.address}")


REF_NO_STRATEGIES: tuple[Strategy, ...] = (
    ref_no_from_label,
    ref_no_from_fixed_cell,
    ref_no_from_pattern,
)


def extract_ref_no(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> str:
    hit = run_cascade("ref_no", REF_NO_STRATEGIES, sheet, config)
    if hit is None or not hit.value:
        raise FieldNotFoundError("ref_no", "Reference number not found")
    _record(report, "ref_no", hit.source)
    return hit.value


# ── Client name ──────────────────────────────────────────────────


def client_from_label(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    label = find_label(sheet, CLIENT_LABELS, CLIENT_LABEL_REGION)
    if label is None:
        return None
    value, address = _right_of(sheet, label.row, label.col)
    text = cell_text(value)
    if len(text) > 3 and not _is_issuer(text, config):
        return FieldHit(text, f"label at {label.address} -> {address}")
    return None


def client_from_fixed_cell(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    text = cell_text(sheet.cell(*CLIENT_CELL))
    if len(text) <= 3 or _is_issuer(text, config) or GENERIC_CLIENT_LABEL_RE.match(text):
        return None
    return FieldHit(text, f"fixed cell {cell_address(*CLIENT_CELL)}")


def client_from_company_keyword(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    for row, col, value in sheet.scan(CLIENT_KEYWORD_REGION):
        text = cell_text(value)
        if len(text) > 5 and COMPANY_KEYWORD_RE.search(text) and not _is_issuer(text, config):
            return FieldHit(text, f"company keyword at {cell_address(row, col)}")
    return None


CLIENT_STRATEGIES: tuple[Strategy, ...] = (
    client_from_label,
    client_from_fixed_cell,
    client_from_company_keyword,
)


def extract_client_name(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> str:
    hit = run_cascade("client_name", CLIENT_STRATEGIES, sheet, config)
    if hit is None:
        raise FieldNotFoundError("client_name", "Client name not found")
    _record(report, "client_name", hit.source)
    return hit.value


# ── Date ─────────────────────────────────────────────────────────


def date_from_label(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    label = find_label(sheet, DATE_LABELS, LABEL_REGION)
    if label is None:
        return None
    for value, address in _same_row_candidates(sheet, label.row, label.col):
        parsed = parse_date(value)
        if parsed is not None:
            return FieldHit(parsed, f"label at {label.address} -> {address}")
    return None


def date_from_fixed_cell(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    parsed = parse_date(sheet.cell(*DATE_CELL))
    if parsed is None:
        return None
    return FieldHit(parsed, f"fixed cell {cell_address(*DATE_CELL)}")


def date_from_scan(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    for row, col, value in sheet.scan(TOP_LEFT_REGION):
        parsed = parse_date(value)
        if parsed is not None:
            return FieldHit(parsed, f"date-like value at {cell_address(row, col)}")
    return None


DATE_STRATEGIES: tuple[Strategy, ...] = (
    date_from_label,
    date_from_fixed_cell,
    date_from_scan,
)


def extract_date(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
    *,
    today: date | None = None,
) -> date:
    hit = run_cascade("date", DATE_STRATEGIES, sheet, config)
    if hit is None:
        _soft_default(report, "date", "Date not found, using current date")
        return today or date.today()
    _record(report, "date", hit.source)
    return hit.value


# ── Terms ────────────────────────────────────────────────────────


def payment_terms_from_scan(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    for row, col, value in sheet.scan():
        text = cell_text(value)
        if text.upper().startswith("PAYMENT"):
            return FieldHit(text, f"cell {cell_address(row, col)}")
    return None


def offer_validity_from_scan(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    for row, col, value in sheet.scan():
        text = cell_text(value)
        upper = text.upper()
        if "VALIDITY" in upper or upper.startswith("OFFER"):
            return FieldHit(text, f"cell {cell_address(row, col)}")
    return None


def extract_payment_terms(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> str:
    hit = run_cascade("payment_terms", (payment_terms_from_scan,), sheet, config)
    if hit is None:
        _soft_default(report, "payment_terms", "Payment terms not found, using default")
        return DEFAULT_PAYMENT_TERMS
    _record(report, "payment_terms", hit.source)
    return hit.value


def extract_offer_validity(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> str:
    hit = run_cascade("offer_validity", (offer_validity_from_scan,), sheet, config)
    if hit is None:
        _soft_default(report, "offer_validity", "Offer validity not found, using default")
        return DEFAULT_OFFER_VALIDITY
    _record(report, "offer_validity", hit.source)
    return hit.value


# ── Subtotal ─────────────────────────────────────────────────────


def subtotal_from_total_row(sheet: Sheet, config: ExtractionConfig) -> FieldHit | None:
    max_col = sheet.bounds.max_col
    for row, col, value in sheet.scan():
        if cell_text(value).upper() != "TOTAL":
            continue
        for check_col in range(col, min(col + SUBTOTAL_LOOKAHEAD, max_col) + 1):
            amount = parse_number(sheet.cell(row, check_col))
            if amount is not None and amount > 0:
                return FieldHit(
                    amount,
                    f"TOTAL at {cell_address(row, col)} -> {cell_address(row, check_col)}",
                )
    return None


def extract_subtotal(
    sheet: Sheet,
    config: ExtractionConfig = DEFAULT_CONFIG,
    report: ExtractionReport | None = None,
) -> int | float:
    hit = run_cascade("subtotal", (subtotal_from_total_row,), sheet, config)
    if hit is None:
        raise FieldNotFoundError("subtotal", "Subtotal not found")
    _record(report, "subtotal", hit.source)
    return hit.value
