"""Tests for the Excel workbook writer."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from openpyxl import load_workbook

from ledger_analytics.config import Config
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.output.excel_writer import ExcelWriter
from ledger_analytics.processing.report_generator import build_report


def create_transaction(txn_id: str, amount: str, user: str, kind=TransactionKind.EXPENSE) -> Transaction:
    """Helper to create test transactions."""
    return Transaction(
        id=txn_id,
        kind=kind,
        amount=Decimal(amount),
        occurred_on=date(2024, 2, 5),
        category_name="Food",
        user_name=user,
        department_name="Sales",
        description="=cmd",
    )


class TestExcelWriter:
    """Tests for ExcelWriter.write."""

    def test_sheets_and_contents(self, tmp_path: Path) -> None:
        """Test sheet layout, ranking rows and sanitized text cells."""
        report = build_report(
            [
                create_transaction("1", "250", "Bob"),
                create_transaction("2", "750", "Alice"),
                create_transaction("3", "2000", "Alice", TransactionKind.INCOME),
            ],
            now=datetime(2024, 3, 1),
        )
        path = tmp_path / "reports" / "analytics.xlsx"

        ExcelWriter(Config()).write(path, report)

        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Summary",
            "Categories",
            "Monthly",
            "User Ranking",
            "Department Ranking",
            "Transactions",
        ]

        summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True)}
        assert summary["Transactions"] == 3
        assert summary["Total Expense"] == 1000
        assert summary["Total Income"] == 2000

        users = list(wb["User Ranking"].iter_rows(min_row=2, values_only=True))
        assert [(r[0], r[1], r[2]) for r in users] == [(1, "gold", "Alice"), (2, "silver", "Bob")]

        transactions = wb["Transactions"]
        assert transactions.max_row == 4
        assert transactions.cell(row=2, column=7).value == "'=cmd"

    def test_empty_report(self, tmp_path: Path) -> None:
        """Test that an empty report still produces every sheet."""
        path = tmp_path / "empty.xlsx"

        ExcelWriter(Config()).write(path, build_report([], now=datetime(2024, 3, 1)))

        wb = load_workbook(path)
        assert len(wb.sheetnames) == 6
        assert wb["Transactions"].max_row == 1
