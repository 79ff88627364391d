"""Excel workbook writer for analytics reports."""

from decimal import Decimal
from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ledger_analytics.config import Config
from ledger_analytics.models.report import ChartData, RankedEntity, Report
from ledger_analytics.utils.logging_config import get_logger
from ledger_analytics.utils.sanitize import sanitize_for_csv, sanitize_row

logger = get_logger(__name__)


class ExcelWriter:
    """Writes an analytics report to a multi-sheet Excel workbook.

    Generates sheets:
    - Summary
    - Categories (expense and income)
    - Monthly (with previous-year comparison)
    - User Ranking
    - Department Ranking
    - Transactions
    """

    def __init__(self, config: Config):
        """Initialize Excel writer.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        self.bold = Font(bold=True)
        self.centered = Alignment(horizontal="center")

    def write(self, output_path: Path, report: Report) -> None:
        """Write the report to an Excel workbook.

        Args:
            output_path: Path for output file.
            report: Report to write.
        """
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, report)
        self._create_categories(wb, report)
        self._create_monthly(wb, report)
        self._create_ranking(wb, "User Ranking", report.user_ranking, department_column=True)
        self._create_ranking(wb, "Department Ranking", report.department_ranking)
        self._create_transactions(wb, report)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")

    def _write_header(self, ws: Worksheet, headers: Sequence[str], row: int = 1) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.centered
            ws.column_dimensions[get_column_letter(col)].width = max(14, len(header) + 4)

    def _money(self, amount: Decimal) -> float:
        return round(float(amount), self.output_config.decimal_places)

    def _money_format(self) -> str:
        places = self.output_config.decimal_places
        return "#,##0" + ("." + "0" * places if places > 0 else "")

    def _create_summary(self, wb: Workbook, report: Report) -> None:
        ws = wb.create_sheet("Summary")
        summary = report.summary
        quality = report.statistics.data_quality

        rows: list[tuple[str, object]] = [
            ("Generated At", report.generated_at.isoformat()),
            ("Transactions", report.total_records),
            ("Total Income", self._money(summary.total_income)),
            ("Total Expense", self._money(summary.total_expense)),
            ("Net Income", self._money(summary.net_income)),
            ("Monthly Income", self._money(summary.monthly_income)),
            ("Monthly Expense", self._money(summary.monthly_expense)),
            ("Quarterly Income", self._money(summary.quarterly_income)),
            ("Quarterly Expense", self._money(summary.quarterly_expense)),
            ("Income Growth %", self._money(summary.income_growth)),
            ("Expense Growth %", self._money(summary.expense_growth)),
            ("Profit Margin %", self._money(summary.profit_margin)),
            ("Average Transaction", self._money(summary.average_transaction)),
            ("Completeness", float(quality.completeness)),
            ("Accuracy", float(quality.accuracy)),
            ("Consistency", float(quality.consistency)),
        ]

        self._write_header(ws, ["Metric", "Value"])
        for row_idx, (label, value) in enumerate(rows, 2):
            ws.cell(row=row_idx, column=1, value=label).font = self.bold
            ws.cell(row=row_idx, column=2, value=value)
        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 28

    def _create_categories(self, wb: Workbook, report: Report) -> None:
        ws = wb.create_sheet("Categories")
        self._write_header(ws, ["Type", "Category", "Amount", "Transactions", "Trend %"])

        row = 2
        for chart in (report.expense_chart, report.income_chart):
            for entry in chart.categories:
                ws.cell(row=row, column=1, value=chart.kind.value)
                ws.cell(row=row, column=2, value=sanitize_for_csv(entry.name))
                amount_cell = ws.cell(row=row, column=3, value=self._money(entry.amount))
                amount_cell.number_format = self._money_format()
                ws.cell(row=row, column=4, value=entry.count)
                ws.cell(row=row, column=5, value=self._money(entry.trend))
                row += 1

    def _create_monthly(self, wb: Workbook, report: Report) -> None:
        ws = wb.create_sheet("Monthly")
        self._write_header(ws, ["Type", "Month", "Amount", "Previous Year", "Transactions"])

        row = 2
        charts: tuple[ChartData, ...] = (report.expense_chart, report.income_chart)
        for chart in charts:
            for bucket, point in zip(chart.monthly, chart.comparison):
                ws.cell(row=row, column=1, value=chart.kind.value)
                ws.cell(row=row, column=2, value=bucket.label)
                for col, amount in ((3, bucket.total), (4, point.previous_year)):
                    cell = ws.cell(row=row, column=col, value=self._money(amount))
                    cell.number_format = self._money_format()
                ws.cell(row=row, column=5, value=bucket.count)
                row += 1

    def _create_ranking(
        self,
        wb: Workbook,
        title: str,
        entities: Sequence[RankedEntity],
        department_column: bool = False,
    ) -> None:
        ws = wb.create_sheet(title)
        headers = ["Rank", "Badge", "Name"]
        if department_column:
            headers.append("Department")
        else:
            headers.append("Users")
        headers += ["Amount", "Transactions", "Average", "Trend %", "Efficiency"]
        self._write_header(ws, headers)

        for row, entity in enumerate(entities, 2):
            ws.cell(row=row, column=1, value=entity.rank)
            ws.cell(row=row, column=2, value=entity.badge.value)
            ws.cell(row=row, column=3, value=sanitize_for_csv(entity.name))
            ws.cell(
                row=row,
                column=4,
                value=sanitize_for_csv(entity.department) if department_column else entity.user_count,
            )
            ws.cell(row=row, column=5, value=self._money(entity.amount)).number_format = self._money_format()
            ws.cell(row=row, column=6, value=entity.transaction_count)
            ws.cell(row=row, column=7, value=self._money(entity.average_amount))
            ws.cell(row=row, column=8, value=self._money(entity.trend))
            ws.cell(row=row, column=9, value=self._money(entity.efficiency))

    def _create_transactions(self, wb: Workbook, report: Report) -> None:
        ws = wb.create_sheet("Transactions")
        self._write_header(
            ws, ["Date", "Type", "Amount", "Category", "User", "Department", "Description"]
        )

        for row, txn in enumerate(report.transactions, 2):
            values = sanitize_row([
                txn.occurred_on,
                txn.kind.value,
                self._money(txn.amount),
                txn.category_name,
                txn.user_name,
                txn.department_name,
                txn.description,
            ])
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value)
            ws.cell(row=row, column=3).number_format = self._money_format()
        ws.freeze_panes = "A2"
