"""Data models for store records, transactions, filters and reports."""

from ledger_analytics.models.filters import FilterSpec, KindFilter
from ledger_analytics.models.records import (
    CategoryRecord,
    ExpenseRecord,
    IncomeRecord,
    UserRecord,
)
from ledger_analytics.models.report import (
    AggregationBucket,
    Badge,
    ChartData,
    FinancialSummary,
    MonthlyBucket,
    PeriodComparison,
    RankedEntity,
    Report,
    Statistics,
)
from ledger_analytics.models.transaction import UNKNOWN, Transaction, TransactionKind

__all__ = [
    "AggregationBucket",
    "Badge",
    "CategoryRecord",
    "ChartData",
    "ExpenseRecord",
    "FilterSpec",
    "FinancialSummary",
    "IncomeRecord",
    "KindFilter",
    "MonthlyBucket",
    "PeriodComparison",
    "RankedEntity",
    "Report",
    "Statistics",
    "Transaction",
    "TransactionKind",
    "UNKNOWN",
    "UserRecord",
]
