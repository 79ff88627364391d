"""Report export to JSON, CSV and Excel."""

from ledger_analytics.output.excel_writer import ExcelWriter
from ledger_analytics.output.serializer import export_report, serialize

__all__ = ["ExcelWriter", "export_report", "serialize"]
