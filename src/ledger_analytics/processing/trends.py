"""Period-over-period growth calculations.

Comparison windows are calendar periods relative to the evaluation instant
("now"), not to the date range of the active filter. A report filtered to
2023 still shows how the current month compares with the previous one.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from ledger_analytics.models.report import GrowthMetrics, MonthlyBucket, PeriodComparison
from ledger_analytics.models.transaction import Transaction
from ledger_analytics.utils.date_utils import month_bounds, shift_month
from ledger_analytics.utils.decimal_utils import HUNDRED, ZERO, sum_amounts

MetricExtractor = Callable[[Iterable[Transaction]], Decimal]


def growth_percent(current: Decimal, previous: Decimal) -> Decimal:
    """Percentage change from previous to current.

    Growth against a previous value of zero is defined as 0 rather than
    infinity, so charts always receive a finite number.

    Args:
        current: Metric for the current period.
        previous: Metric for the previous period.

    Returns:
        ((current - previous) / previous) * 100, or 0 when previous <= 0.
    """
    if previous <= 0:
        return ZERO
    return (current - previous) / previous * HUNDRED


def total_metric(transactions: Iterable[Transaction]) -> Decimal:
    """Default metric: the sum of amounts."""
    return sum_amounts(t.amount for t in transactions)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date interval."""

    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class ComparisonWindow:
    """Pair of periods compared by period_over_period."""

    current: DateWindow
    previous: DateWindow


def _as_date(now: date | datetime) -> date:
    return now.date() if isinstance(now, datetime) else now


def month_window(now: date | datetime, months_back: int = 0) -> DateWindow:
    """Calendar month months_back months before the month containing now."""
    today = _as_date(now)
    year, month = shift_month(today.year, today.month, -months_back)
    start, end = month_bounds(year, month)
    return DateWindow(start, end)


def month_over_month(now: date | datetime, months_back: int = 0) -> ComparisonWindow:
    """Compare a calendar month with the month before it.

    months_back=0 compares the current month with last month;
    months_back=1 compares last month with the month before.
    """
    return ComparisonWindow(
        current=month_window(now, months_back),
        previous=month_window(now, months_back + 1),
    )


def year_over_year(now: date | datetime) -> ComparisonWindow:
    """Compare the current calendar year with the preceding one."""
    year = _as_date(now).year
    return ComparisonWindow(
        current=DateWindow(date(year, 1, 1), date(year, 12, 31)),
        previous=DateWindow(date(year - 1, 1, 1), date(year - 1, 12, 31)),
    )


def period_over_period(
    transactions: Iterable[Transaction],
    metric: MetricExtractor,
    window: ComparisonWindow,
) -> PeriodComparison:
    """Evaluate a metric over two windows and the growth between them.

    Args:
        transactions: Transactions to measure.
        metric: Reduces the transactions of one period to a number,
            e.g. total_metric.
        window: The current and previous periods.

    Returns:
        PeriodComparison with both values and the growth percentage.
    """
    transactions = list(transactions)
    current = metric(t for t in transactions if window.current.contains(t.occurred_on))
    previous = metric(t for t in transactions if window.previous.contains(t.occurred_on))
    return PeriodComparison(
        current=current,
        previous=previous,
        growth_percent=growth_percent(current, previous),
    )


def series_growth(series: Sequence[MonthlyBucket]) -> Decimal:
    """Growth between the last two buckets of a monthly series (0 if fewer than two)."""
    if len(series) < 2:
        return ZERO
    return growth_percent(series[-1].total, series[-2].total)


def growth_metrics(
    transactions: Iterable[Transaction],
    series: Sequence[MonthlyBucket],
    now: date | datetime,
) -> GrowthMetrics:
    """Growth figures for one transaction kind.

    Args:
        transactions: Transactions of a single kind.
        series: Their monthly series.
        now: Evaluation instant for the year-over-year window.

    Returns:
        GrowthMetrics with monthly, yearly and approximate quarterly growth.
    """
    monthly = series_growth(series)
    yearly = period_over_period(transactions, total_metric, year_over_year(now))
    return GrowthMetrics(
        monthly_growth=monthly,
        year_over_year=yearly.growth_percent,
        quarterly_growth=monthly * 3,
    )
