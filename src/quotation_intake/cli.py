"""CLI entry point for quotation-intake."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from quotation_intake import __version__
from quotation_intake.config import ExtractionConfig
from quotation_intake.errors import QuotationError
from quotation_intake.extractor import extract_quotation
from quotation_intake.io import load_sheet, sha256_file, write_json
from quotation_intake.models import ExtractionReport, QuotationRecord, RunManifest

app = typer.Typer(
    name="qintake",
    help="quotation-intake — Extract structured quotations from messy spreadsheets.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"quotation-intake v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_config(
    issuer: str | None,
    max_items: int | None,
    max_cell_visits: int | None,
    max_file_bytes: int | None = None,
) -> ExtractionConfig:
    overrides: dict[str, object] = {}
    if issuer:
        overrides["issuer_name"] = issuer
    if max_items is not None:
        overrides["max_items"] = max_items
    if max_cell_visits is not None:
        overrides["max_cell_visits"] = max_cell_visits
    if max_file_bytes is not None:
        overrides["max_file_bytes"] = max_file_bytes
    return ExtractionConfig(**overrides)  # type: ignore[arg-type]


def _extract(
    input_file: Path, config: ExtractionConfig
) -> tuple[QuotationRecord, ExtractionReport]:
    report = ExtractionReport()
    sheet = load_sheet(input_file, max_bytes=config.max_file_bytes)
    record = extract_quotation(sheet, config, report)
    return record, report


def _write_manifest(
    out_dir: Path,
    input_file: Path,
    run_id: str,
    created_at: str,
    *,
    record: QuotationRecord | None = None,
    error: Exception | None = None,
) -> Path:
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    error_code: str | None = None
    if isinstance(error, QuotationError):
        error_code = error.code
    elif error is not None:
        error_code = "internal_error"

    manifest = RunManifest(
        version=__version__,
        run_id=run_id,
        input_path=str(input_file.resolve()),
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        sha256=sha256,
        ref_no=record.ref_no if record else "",
        item_count=len(record.items) if record else 0,
        status="failed" if error is not None else "success",
        error_code=error_code,
        error_message=str(error) if error is not None else "",
    )
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())


def _items_table(record: QuotationRecord) -> RichTable:
    tbl = RichTable(title=f"Items ({len(record.items)})", show_lines=False)
    for heading in ("Sr", "Description", "Qty", "Unit", "Rate", "GST %", "Amount"):
        tbl.add_column(heading)
    for item in record.items:
        tbl.add_row(
            str(item.sr_no),
            item.description,
            str(item.quantity),
            item.unit,
            str(item.rate),
            str(item.gst_percent),
            str(item.amount),
        )
    return tbl


def _summary_table(record: QuotationRecord, report: ExtractionReport) -> RichTable:
    tbl = RichTable(title="Quotation", show_lines=True)
    tbl.add_column("Field", style="bold")
    tbl.add_column("Value")
    tbl.add_column("Source", style="dim")

    rows = [
        ("ref_no", "Ref No", record.ref_no),
        ("date", "Date", record.date.isoformat()),
        ("client_name", "Client", record.client_name),
        ("payment_terms", "Payment terms", record.payment_terms),
        ("offer_validity", "Offer validity", record.offer_validity),
        ("subtotal", "Subtotal", str(record.subtotal)),
    ]
    for key, label, value in rows:
        tbl.add_row(label, value, report.sources.get(key, ""))
    tbl.add_row("GST", str(record.gst), "")
    tbl.add_row("Grand total", str(record.grand_total), "")
    if report.column_map:
        columns = ", ".join(f"{role}={col}" for role, col in report.column_map.items())
        tbl.add_row("Columns", columns, report.sources.get("items", ""))
    for w in report.warnings:
        tbl.add_row("Warning", f"[yellow]{w}[/yellow]", "")
    return tbl


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """quotation-intake CLI."""


# ── extract command ──────────────────────────────────────────────


@app.command()
def extract(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the quotation workbook (.xlsx, .xls or .csv).",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for quotation.json + report + manifest.",
    ),
    issuer: str | None = typer.Option(
        None, "--issuer",
        help="Issuing company's own name; never accepted as the client.",
    ),
    max_items: int | None = typer.Option(
        None, "--max-items", min=1,
        help="Stop reading line items after this many rows.",
    ),
    max_cell_visits: int | None = typer.Option(
        None, "--max-cell-visits", min=1,
        help="Abort extraction after reading this many cells.",
    ),
    max_file_bytes: int | None = typer.Option(
        None, "--max-file-bytes", min=1,
        help="Reject input files larger than this many bytes.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log which strategy located each field.",
    ),
) -> None:
    """Extract a quotation record from a spreadsheet and write it as JSON."""
    _configure_logging(verbose)
    echo = _printer(quiet)
    created_at = _utcnow_iso()
    run_id = created_at
    out_dir.mkdir(parents=True, exist_ok=True)

    if not quiet:
        console.print(Panel(
            f"[bold]quotation-intake[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}",
            title="Extraction Start", border_style="blue",
        ))

    try:
        config = _build_config(issuer, max_items, max_cell_visits, max_file_bytes)
        echo("[blue]>[/blue] Extracting …")
        record, report = _extract(input_file, config)
    except (QuotationError, FileNotFoundError, OSError, ValueError) as exc:
        manifest_path = _write_manifest(out_dir, input_file, run_id, created_at, error=exc)
        _err(str(exc))
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)
    except Exception as exc:
        message = f"Unexpected internal error: {exc}"
        manifest_path = _write_manifest(
            out_dir, input_file, run_id, created_at, error=RuntimeError(message)
        )
        _err(message)
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=1)

    if not quiet:
        for w in report.warnings:
            console.print(f"  [yellow]![/yellow] {w}")

    quotation_path = write_json(out_dir / "quotation.json", record.to_dict())
    echo(f"  Quotation -> {quotation_path}")
    report_path = write_json(out_dir / "extraction_report.json", report.to_dict())
    echo(f"  Report    -> {report_path}")
    manifest_path = _write_manifest(out_dir, input_file, run_id, created_at, record=record)
    echo(f"  Manifest  -> {manifest_path}")

    if not quiet:
        console.print(Panel(
            f"[green]Done[/green] — {record.ref_no} for {record.client_name}, "
            f"{len(record.items)} items, subtotal {record.subtotal}",
            title="Extraction Complete", border_style="green",
        ))


# ── inspect command ──────────────────────────────────────────────


@app.command()
def inspect(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the quotation workbook (.xlsx, .xls or .csv).",
        exists=True, readable=True,
    ),
    issuer: str | None = typer.Option(
        None, "--issuer",
        help="Issuing company's own name; never accepted as the client.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log which strategy located each field.",
    ),
) -> None:
    """Show what would be extracted, without writing any files.

    Exit 0 = extraction succeeded, exit 2 = extraction failed.
    """
    _configure_logging(verbose)
    console.print(Panel(
        f"[bold]quotation-intake[/bold] v{__version__}  [dim]inspect mode[/dim]\n"
        f"Input: {input_file}",
        title="Inspect", border_style="cyan",
    ))

    try:
        record, report = _extract(input_file, _build_config(issuer, None, None))
    except (QuotationError, FileNotFoundError, OSError, ValueError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    console.print(_summary_table(record, report))
    console.print(_items_table(record))
    console.print(f"  Status: [green]PASS[/green] ({report.cells_visited} cells read)")
