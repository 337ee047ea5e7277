"""Structural completeness check for an assembled quotation."""

from __future__ import annotations

from quotation_intake.errors import QuotationValidationError
from quotation_intake.models import QuotationRecord


def collect_violations(record: QuotationRecord) -> list[str]:
    """Return every structural problem with *record*, in a fixed order."""
    errors: list[str] = []
    if not record.ref_no or not record.ref_no.strip():
        errors.append("Reference number is missing")
    if not record.client_name or not record.client_name.strip():
        errors.append("Client name is missing")
    if not record.items:
        errors.append("No line items found")
    if isinstance(record.subtotal, bool) or not record.subtotal or record.subtotal <= 0:
        errors.append("Invalid subtotal")
    return errors


def validate_quotation(record: QuotationRecord) -> QuotationRecord:
    """Raise :class:`QuotationValidationError` listing all violations, else return *record*."""
    errors = collect_violations(record)
    if errors:
        raise QuotationValidationError(errors)
    return record
