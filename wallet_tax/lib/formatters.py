"""
Output formatters for wallet tax reports.

This module handles JSON and CSV report generation, timestamp-based
filenames, and the short human-readable summary printed by the CLI.
"""

import csv
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from .models import REPORT_COLUMNS, PnlSource, TaxReport

OUTPUT_FORMATS = ("json", "csv")

SOURCE_LABELS = {
    PnlSource.PRIMARY: "on-chain swap history (Helius)",
    PnlSource.SECONDARY: "wallet statistics (gmgn)",
    PnlSource.DEMO: "demo estimate (no live data available)",
}


def generate_timestamp() -> str:
    """
    Generate a timestamp string for filenames.

    Returns:
        Timestamp in YYYYMMDD_HHMMSS format
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def generate_filename(base_path: str, fmt: str, timestamp: Optional[str] = None) -> str:
    """
    Generate a timestamped filename for a report.

    Args:
        base_path: Base output path (e.g., "tax_report.json")
        fmt: Output format, used as the suffix when base_path has none
        timestamp: Optional timestamp to use (generates new one if not provided)

    Returns:
        Report file path

    Examples:
        generate_filename("tax_report.csv", "csv", "20241214_153022")
        -> "tax_report_20241214_153022.csv"
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    path = Path(base_path)
    suffix = path.suffix or f".{fmt}"
    return str(path.parent / f"{path.stem}_{timestamp}{suffix}")


def write_csv_to_stream(report: TaxReport, stream: TextIO) -> None:
    writer = csv.writer(stream)
    writer.writerow(REPORT_COLUMNS)
    writer.writerow(report.to_csv_row())


def write_json_to_stream(report: TaxReport, stream: TextIO) -> None:
    json.dump(report.to_dict(), stream, indent=2)
    stream.write("\n")


def write_report(
    report: TaxReport,
    output_path: Optional[str] = None,
    fmt: str = "json",
) -> Optional[str]:
    """
    Write a report to a file or stdout.

    Args:
        report: TaxReport to write
        output_path: Base output path. If None, writes to stdout.
        fmt: "json" or "csv"

    Returns:
        The file path written, or None when writing to stdout

    Raises:
        ValueError: If fmt is not supported
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    write = write_csv_to_stream if fmt == "csv" else write_json_to_stream

    if output_path is None:
        write(report, sys.stdout)
        return None

    filename = generate_filename(output_path, fmt)
    with open(filename, "w", newline="", encoding="utf-8") as f:
        write(report, f)

    return filename


def format_summary(report: TaxReport) -> str:
    """Format a short human-readable summary of a report."""
    lines = [f"Realized PNL: ${report.tax.total_pnl:,.2f}"]
    if report.pnl.is_extended:
        lines.append(
            f"  {report.pnl.pnl_sol:,.4f} SOL over {report.pnl.trade_count} trades "
            f"(bought {report.pnl.total_buy_sol:,.4f}, sold {report.pnl.total_sell_sol:,.4f})"
        )

    if report.tax.is_loss:
        lines.append("No tax owed on a net loss")
    else:
        lines.append(
            f"Federal tax ({report.tax.federal_rate:.1%}): ${report.tax.federal_tax:,.2f}"
        )
        lines.append(
            f"{report.state} tax ({report.tax.state_rate:.2%}): ${report.tax.state_tax:,.2f}"
        )
        lines.append(f"Total tax: ${report.tax.total_tax:,.2f}")

    lines.append(f"Data source: {SOURCE_LABELS[report.pnl.source]}")
    return "\n".join(lines)
