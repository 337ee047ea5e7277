"""Data models used across the package."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from numbers import Integral
from typing import Any

from quotation_intake import DEFAULT_OFFER_VALIDITY, DEFAULT_PAYMENT_TERMS, DEFAULT_UNIT

Number = int | float

_STEM_UNSAFE_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class LineItem:
    """One row of the quotation's item table."""

    sr_no: Number
    description: str
    quantity: Number = 1
    unit: str = DEFAULT_UNIT
    rate: Number = 0
    gst_percent: Number = 0
    amount: Number = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "srNo": self.sr_no,
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            "rate": self.rate,
            "gstPercent": self.gst_percent,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class QuotationRecord:
    """Normalized quotation handed off to the persistence layer.

    Document-level GST is always 0: GST rates vary per product and are
    carried on each line item instead, so ``grand_total == subtotal``.
    """

    ref_no: str
    date: date
    client_name: str
    items: tuple[LineItem, ...]
    subtotal: Number
    payment_terms: str = DEFAULT_PAYMENT_TERMS
    offer_validity: str = DEFAULT_OFFER_VALIDITY
    gst: Number = field(default=0, init=False)
    grand_total: Number = field(default=0, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "grand_total", self.subtotal)

    def storage_stem(self) -> str:
        """File-name stem for stored artifacts: ``<refNo>_<client[:20]>``."""
        ref = _STEM_UNSAFE_RE.sub("_", self.ref_no)
        client = _STEM_UNSAFE_RE.sub("_", self.client_name[:20])
        return f"{ref}_{client}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "refNo": self.ref_no,
            "date": self.date.isoformat(),
            "clientName": self.client_name,
            "items": [item.to_dict() for item in self.items],
            "paymentTerms": self.payment_terms,
            "offerValidity": self.offer_validity,
            "subtotal": self.subtotal,
            "gst": self.gst,
            "grandTotal": self.grand_total,
        }


@dataclass
class ExtractionReport:
    """Provenance + warnings emitted alongside every extraction."""

    sources: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    header_row: int | None = None
    column_map: dict[str, str] = field(default_factory=dict)
    cells_visited: int = 0

    def __post_init__(self) -> None:
        self.warnings = _to_string_list(self.warnings, "warnings")
        self.cells_visited = _to_non_negative_int(self.cells_visited, "cells_visited")
        if self.header_row is not None:
            self.header_row = _to_non_negative_int(self.header_row, "header_row")

    def record_source(self, field_name: str, description: str) -> None:
        self.sources[field_name] = description

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources": dict(self.sources),
            "warnings": list(self.warnings),
            "header_row": self.header_row,
            "column_map": dict(self.column_map),
            "cells_visited": self.cells_visited,
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single CLI run."""

    tool: str = "quotation-intake"
    version: str = ""
    run_id: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    sha256: str = ""
    ref_no: str = ""
    item_count: int = 0
    status: str = "success"
    error_code: str | None = None
    error_message: str = ""

    def __post_init__(self) -> None:
        self.item_count = _to_non_negative_int(self.item_count, "item_count")
        if self.status not in {"success", "failed"}:
            raise ValueError("status must be 'success' or 'failed'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "run_id": self.run_id,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "sha256": self.sha256,
            "ref_no": self.ref_no,
            "item_count": self.item_count,
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
