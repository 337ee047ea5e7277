"""I/O helpers — load the first sheet of a workbook, write JSON artifacts."""

from __future__ import annotations

import hashlib
import io
import json
import zipfile
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from quotation_intake.errors import WorkbookLoadError
from quotation_intake.sheet import Sheet

OPENPYXL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
SUPPORTED_SUFFIXES = OPENPYXL_SUFFIXES + (".xls", ".csv")

# ── Loading ──────────────────────────────────────────────────────


def _plain(value: Any) -> Any:
    """Unwrap numpy/pandas scalars; map pandas missing markers to ``None``."""
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    item = getattr(value, "item", None)
    if callable(item) and not isinstance(value, pd.Timestamp):
        converted = item()
        if isinstance(converted, (str, int, float, bool)):
            return converted
    return value


def _frame_rows(df: pd.DataFrame) -> list[list[Any]]:
    return [[_plain(value) for value in row] for row in df.itertuples(index=False, name=None)]


def _read_openpyxl(data: bytes) -> tuple[str, Iterable[Sequence[Any]]]:
    try:
        workbook = load_workbook(io.BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise WorkbookLoadError(f"Could not read workbook: {exc}") from exc
    worksheet = workbook.worksheets[0]
    return worksheet.title, list(worksheet.iter_rows(values_only=True))


def _read_xls(data: bytes) -> tuple[str, Iterable[Sequence[Any]]]:
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        df = read_excel(io.BytesIO(data), engine="xlrd", header=None, sheet_name=0)
    except ImportError as exc:
        raise WorkbookLoadError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc
    except ValueError as exc:
        raise WorkbookLoadError(f"Could not read workbook: {exc}") from exc
    return "Sheet1", _frame_rows(df)


def _read_csv(data: bytes) -> tuple[str, Iterable[Sequence[Any]]]:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
            continue
        lines = text.splitlines()
        if not lines:
            return "csv", []
        # Comma count is an upper bound on the field count, so ragged rows fit.
        width = max(line.count(",") for line in lines) + 1
        try:
            df = pd.read_csv(
                io.StringIO(text),
                header=None,
                names=list(range(width)),
                dtype="string",
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except pd.errors.ParserError as exc:
            last_exc = exc
            continue
        return "csv", _frame_rows(df)
    raise WorkbookLoadError("Could not read CSV (decode or parse failed)") from last_exc


def load_sheet(
    source: Path | str | bytes,
    *,
    suffix: str | None = None,
    max_bytes: int | None = None,
) -> Sheet:
    """Load the first sheet of *source* into a :class:`Sheet`.

    *source* is a path or the raw uploaded bytes; for bytes, *suffix*
    (e.g. ``".xlsx"``) selects the reader.

    Raises
    ------
    FileNotFoundError
        If *source* is a path that does not exist.
    WorkbookLoadError
        If the file is too large, of an unsupported type, or unreadable.
    """
    path: Path | None = None
    if isinstance(source, (bytes, bytearray)):
        data: bytes | None = bytes(source)
        size = len(source)
        if not suffix:
            raise WorkbookLoadError("A file suffix is required when loading raw bytes")
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        data = None
        size = path.stat().st_size
        suffix = suffix or path.suffix

    suffix = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
    if suffix not in SUPPORTED_SUFFIXES:
        raise WorkbookLoadError(
            f"Unsupported file type: {suffix!r}. Use .xlsx, .xls, or .csv"
        )
    if max_bytes is not None and size > max_bytes:
        raise WorkbookLoadError(f"File is {size} bytes; the limit is {max_bytes} bytes")
    if data is None:
        data = cast(Path, path).read_bytes()

    if suffix in OPENPYXL_SUFFIXES:
        name, rows = _read_openpyxl(data)
    elif suffix == ".xls":
        name, rows = _read_xls(data)
    else:
        name, rows = _read_csv(data)
    return Sheet(rows, name=name)


# ── Writing ──────────────────────────────────────────────────────


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
