"""Extraction settings shared by the library and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Any


def _to_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result <= 0:
        raise ValueError(f"{field_name} must be > 0")
    return result


@dataclass(frozen=True)
class ExtractionConfig:
    """Knobs for a single extraction run.

    ``issuer_name`` is the quoting company's own name; a candidate client
    name containing it (case-insensitively) is never accepted.
    """

    issuer_name: str = "MEGA ENTERPRISE"
    max_items: int = 100
    max_cell_visits: int = 1_000_000
    max_file_bytes: int = 10 * 1024 * 1024

    def __post_init__(self) -> None:
        if not isinstance(self.issuer_name, str) or not self.issuer_name.strip():
            raise ValueError("issuer_name must be a non-empty string")
        object.__setattr__(self, "issuer_name", self.issuer_name.strip().upper())
        object.__setattr__(self, "max_items", _to_positive_int(self.max_items, "max_items"))
        object.__setattr__(
            self, "max_cell_visits", _to_positive_int(self.max_cell_visits, "max_cell_visits")
        )
        object.__setattr__(
            self, "max_file_bytes", _to_positive_int(self.max_file_bytes, "max_file_bytes")
        )


DEFAULT_CONFIG = ExtractionConfig()
