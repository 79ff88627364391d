"""Report serialization to JSON and CSV.

JSON is a structural dump of the whole Report. CSV lists the filtered
transactions only, one unquoted row each, so spreadsheet tools can read it
directly.

JSON numbers are floats: amounts keep about 15 significant digits, and
rounding raises decimal.InvalidOperation for values with more than 28
digits (the default Decimal context precision).
"""

import csv
import dataclasses
import io
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

from ledger_analytics.config import Config, OutputConfig
from ledger_analytics.models.report import FinancialSummary, MonthlyBucket, Report
from ledger_analytics.utils.date_utils import date_to_iso
from ledger_analytics.utils.decimal_utils import format_currency, quantize
from ledger_analytics.utils.logging_config import LogContext, get_logger
from ledger_analytics.utils.sanitize import sanitize_row

logger = get_logger(__name__)

SERIALIZE_FORMATS = ("json", "csv")

CSV_HEADERS = ["Date", "Type", "Amount", "Category", "User", "Department"]

# Computed properties added to the JSON form of these types
_EXTRA_PROPERTIES: dict[type, tuple[str, ...]] = {
    MonthlyBucket: ("label",),
    FinancialSummary: ("net_income",),
    Report: ("total_records",),
}


def _to_jsonable(value: object, decimal_places: int) -> object:
    """Recursively convert report values into JSON-compatible types."""
    if isinstance(value, Decimal):
        return float(quantize(value, decimal_places))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {
            f.name: _to_jsonable(getattr(value, f.name), decimal_places)
            for f in dataclasses.fields(value)
        }
        for prop in _EXTRA_PROPERTIES.get(type(value), ()):
            data[prop] = _to_jsonable(getattr(value, prop), decimal_places)
        return data
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v, decimal_places) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(v, decimal_places) for v in value]
    return value


def report_to_dict(report: Report, decimal_places: int = 2) -> dict[str, object]:
    """Convert a Report to plain Python types.

    Decimals are rounded half-up to decimal_places and emitted as numbers.

    Args:
        report: Report to convert.
        decimal_places: Rounding for amounts and percentages.

    Returns:
        Dictionary mirroring the Report structure.
    """
    return _to_jsonable(report, decimal_places)  # type: ignore[return-value]


def to_json(report: Report, output_config: Optional[OutputConfig] = None) -> str:
    """Serialize the full report as JSON."""
    output_config = output_config or OutputConfig()
    data = report_to_dict(report, output_config.decimal_places)
    return json.dumps(data, indent=output_config.json_indent, ensure_ascii=False)


def to_csv(report: Report, output_config: Optional[OutputConfig] = None) -> str:
    """Serialize the filtered transactions as CSV.

    Values are never quoted. A delimiter inside a value is escaped with a
    backslash, so names containing commas do not round-trip through tools
    that do not understand the escape.
    """
    output_config = output_config or OutputConfig()
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        quoting=csv.QUOTE_NONE,
        escapechar="\\",
        lineterminator="\n",
    )

    writer.writerow(CSV_HEADERS)
    for txn in report.transactions:
        writer.writerow([
            date_to_iso(txn.occurred_on),
            txn.kind.value,
            format_currency(txn.amount, output_config.decimal_places),
            *sanitize_row([txn.category_name, txn.user_name, txn.department_name]),
        ])

    return buffer.getvalue()


def serialize(report: Report, fmt: str = "json", output_config: Optional[OutputConfig] = None) -> str:
    """Serialize a report.

    Args:
        report: Report to serialize.
        fmt: "json" (full report) or "csv" (transaction rows only).
        output_config: Output settings (indent, decimal places).

    Returns:
        The serialized report.

    Raises:
        ValueError: If fmt is not a supported format.
    """
    fmt = fmt.lower()
    if fmt == "json":
        return to_json(report, output_config)
    if fmt == "csv":
        return to_csv(report, output_config)
    raise ValueError(
        f"Unsupported export format '{fmt}', expected one of {', '.join(SERIALIZE_FORMATS)}"
    )


def export_report(report: Report, output_path: Path, fmt: str, config: Optional[Config] = None) -> Path:
    """Write a report to a file.

    Args:
        report: Report to export.
        output_path: Destination file.
        fmt: "json", "csv" or "xlsx".
        config: Application configuration.

    Returns:
        The path written.
    """
    config = config or Config()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with LogContext(logger, "export_report", path=output_path, format=fmt):
        if fmt.lower() == "xlsx":
            from ledger_analytics.output.excel_writer import ExcelWriter

            ExcelWriter(config).write(output_path, report)
        else:
            content = serialize(report, fmt, config.output)
            with open(output_path, "w", newline="", encoding="utf-8") as f:
                f.write(content)

    logger.info(f"Exported {fmt} report ({report.total_records} transactions) to {output_path}")
    return output_path
