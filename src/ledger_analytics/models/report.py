"""Report data models produced by the analytics engine.

All result objects are frozen: they are rebuilt on each request and never
mutated after they are returned.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from ledger_analytics.models.filters import FilterSpec
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.utils.date_utils import month_label

ZERO = Decimal("0")


@dataclass(frozen=True)
class AggregationBucket:
    """Accumulated total for one grouping key.

    Attributes:
        key: Group key (category, user or department name).
        total: Exact sum of the contributing amounts.
        count: Number of contributing transactions.
        transaction_ids: Ids of the contributing transactions, in input order.
    """

    key: str
    total: Decimal
    count: int
    transaction_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class MonthlyBucket:
    """Accumulated total for one calendar month."""

    year: int
    month: int
    total: Decimal
    count: int
    transaction_ids: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


@dataclass(frozen=True)
class PeriodComparison:
    """Metric for two comparable periods and the growth between them."""

    current: Decimal
    previous: Decimal
    growth_percent: Decimal


class Badge(Enum):
    """Display hint for the top three ranks."""

    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    NONE = "none"

    @classmethod
    def for_rank(cls, rank: int) -> "Badge":
        return {1: cls.GOLD, 2: cls.SILVER, 3: cls.BRONZE}.get(rank, cls.NONE)


@dataclass(frozen=True)
class RankedEntity:
    """One row of a ranking table.

    Attributes:
        name: Entity name (user or department).
        amount: Accumulated amount.
        transaction_count: Number of transactions.
        average_amount: amount / transaction_count.
        trend: Current-month vs previous-month growth in percent.
        efficiency: Heuristic score in [0, 100]; higher means smaller
            average transactions. Not a financial measure.
        rank: 1-based position after sorting; never shared.
        badge: Display badge derived from rank.
        department: Department of a ranked user.
        user_count: Number of users in a ranked department.
    """

    name: str
    amount: Decimal
    transaction_count: int
    average_amount: Decimal
    trend: Decimal
    efficiency: Decimal
    rank: int
    badge: Badge
    department: Optional[str] = None
    user_count: Optional[int] = None


@dataclass(frozen=True)
class FinancialSummary:
    """Totals and derived figures for the filtered transactions."""

    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    monthly_income: Decimal = ZERO
    monthly_expense: Decimal = ZERO
    quarterly_income: Decimal = ZERO
    quarterly_expense: Decimal = ZERO
    income_growth: Decimal = ZERO
    expense_growth: Decimal = ZERO
    profit_margin: Decimal = ZERO
    average_transaction: Decimal = ZERO
    elapsed_months: int = 1

    @property
    def net_income(self) -> Decimal:
        """Total income minus total expense."""
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class CategoryEntry:
    """Category total with its month-over-month trend."""

    name: str
    amount: Decimal
    count: int
    trend: Decimal


@dataclass(frozen=True)
class YearComparisonPoint:
    """Monthly total next to the same calendar month one year earlier."""

    label: str
    current_year: Decimal
    previous_year: Decimal


@dataclass(frozen=True)
class GrowthMetrics:
    """Growth figures for one transaction kind.

    quarterly_growth is monthly_growth * 3, an approximation.
    """

    monthly_growth: Decimal = ZERO
    year_over_year: Decimal = ZERO
    quarterly_growth: Decimal = ZERO


@dataclass(frozen=True)
class ChartData:
    """Chart datasets for one transaction kind."""

    kind: TransactionKind
    categories: tuple[CategoryEntry, ...] = ()
    monthly: tuple[MonthlyBucket, ...] = ()
    comparison: tuple[YearComparisonPoint, ...] = ()
    growth: GrowthMetrics = field(default_factory=GrowthMetrics)

    @property
    def labels(self) -> list[str]:
        return [c.name for c in self.categories]

    @property
    def amounts(self) -> list[Decimal]:
        return [c.amount for c in self.categories]


@dataclass(frozen=True)
class DataQuality:
    """Fractions in [0, 1] describing how complete the filtered records are.

    completeness: share with a non-empty description.
    accuracy: share with a resolved category.
    consistency: share with a resolved user.
    """

    completeness: Decimal = Decimal("1")
    accuracy: Decimal = Decimal("1")
    consistency: Decimal = Decimal("1")


@dataclass(frozen=True)
class Statistics:
    """Counts over the filtered transactions."""

    total_transactions: int = 0
    income_transactions: int = 0
    expense_transactions: int = 0
    unique_users: int = 0
    unique_categories: int = 0
    unique_departments: int = 0
    average_transaction_amount: Decimal = ZERO
    data_quality: DataQuality = field(default_factory=DataQuality)


@dataclass(frozen=True)
class Report:
    """Complete analytics result for one filter.

    Attributes:
        generated_at: Evaluation instant; trend windows are relative to it.
        filters: The filter the report was built with.
        transactions: Filtered transactions, in input order.
        summary: Financial summary.
        expense_chart: Expense chart datasets.
        income_chart: Income chart datasets.
        user_ranking: Users ranked by expense amount.
        department_ranking: Departments ranked by expense amount.
        statistics: Counts and data quality.
    """

    generated_at: datetime
    filters: FilterSpec
    transactions: tuple[Transaction, ...]
    summary: FinancialSummary
    expense_chart: ChartData
    income_chart: ChartData
    user_ranking: tuple[RankedEntity, ...]
    department_ranking: tuple[RankedEntity, ...]
    statistics: Statistics

    @property
    def total_records(self) -> int:
        """Number of transactions that passed the filter."""
        return len(self.transactions)
