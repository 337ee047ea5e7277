"""Exception hierarchy raised by the extraction engine."""

from __future__ import annotations

from collections.abc import Sequence


class QuotationError(Exception):
    """Base class; ``code`` is a stable machine-readable identifier."""

    code = "quotation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class WorkbookLoadError(QuotationError):
    code = "workbook_load_failed"


class ScanBudgetExceededError(QuotationError):
    code = "scan_budget_exceeded"


class FieldNotFoundError(QuotationError):
    """A fatal field exhausted every strategy in its cascade."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.code = f"{field_name}_not_found"


class TableHeaderNotFoundError(QuotationError):
    code = "table_header_not_found"


class NoLineItemsError(QuotationError):
    code = "no_line_items"


class QuotationValidationError(QuotationError):
    code = "validation_failed"

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")
