"""quotation-intake — Extract structured quotations from loosely laid-out spreadsheets."""

__version__ = "0.2.0"

DEFAULT_PAYMENT_TERMS: str = "PAYMENT IMMEDIATE"
DEFAULT_OFFER_VALIDITY: str = "OFFER VALIDITY 1 WEEKS"
DEFAULT_UNIT: str = "NOS"
