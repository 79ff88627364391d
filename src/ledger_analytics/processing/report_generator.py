"""Report generation: the single entry point that assembles a Report.

build_report validates the filter, applies it, and derives the summary,
chart datasets, rankings and statistics from the filtered transactions.
It reads its inputs only and returns a new Report.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from ledger_analytics.config import AnalyticsConfig
from ledger_analytics.models.filters import FilterSpec
from ledger_analytics.models.records import UserRecord
from ledger_analytics.models.report import (
    CategoryEntry,
    ChartData,
    DataQuality,
    FinancialSummary,
    MonthlyBucket,
    Report,
    Statistics,
    YearComparisonPoint,
)
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.processing.aggregator import (
    by_category,
    group_sum,
    group_sum_by_month,
    of_kind,
    total_amount,
    zero_fill_months,
)
from ledger_analytics.processing.filter_evaluator import FilterEvaluator
from ledger_analytics.processing.ranking import Dimension, RankingEngine
from ledger_analytics.processing.trends import (
    growth_metrics,
    month_over_month,
    period_over_period,
    total_metric,
)
from ledger_analytics.utils.date_utils import elapsed_months
from ledger_analytics.utils.decimal_utils import ZERO, divide, percentage
from ledger_analytics.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


def build_report(
    transactions: Iterable[Transaction],
    spec: Optional[FilterSpec] = None,
    now: Optional[datetime] = None,
    config: Optional[AnalyticsConfig] = None,
    user_index: Optional[Mapping[str, UserRecord]] = None,
) -> Report:
    """Build the full analytics report for a filter.

    Args:
        transactions: Normalized transactions from the current store snapshot.
        spec: Filter to apply (no restriction when None).
        now: Evaluation instant for trend windows (default: current time).
        config: Analytics configuration.
        user_index: Users keyed by id, used for department head counts.

    Returns:
        The Report. An empty filter result still yields a Report with zero
        totals and empty datasets.

    Raises:
        InvalidFilterRangeError: If the filter has an inverted range. No
            aggregation is attempted in that case.
    """
    spec = spec or FilterSpec()
    config = config or AnalyticsConfig()
    if now is None:
        now = datetime.now()

    spec.validate()

    with LogContext(logger, "build_report", kind=spec.kind.value, now=now.isoformat()):
        filtered = FilterEvaluator().apply(transactions, spec)

        expenses = of_kind(filtered, TransactionKind.EXPENSE)
        ranking_engine = RankingEngine(config)

        report = Report(
            generated_at=now,
            filters=spec,
            transactions=tuple(filtered),
            summary=summarize(filtered, now, config),
            expense_chart=build_chart_data(filtered, TransactionKind.EXPENSE, now, spec, config),
            income_chart=build_chart_data(filtered, TransactionKind.INCOME, now, spec, config),
            user_ranking=tuple(
                ranking_engine.rank(expenses, Dimension.USER, now=now, user_index=user_index)
            ),
            department_ranking=tuple(
                ranking_engine.rank(expenses, Dimension.DEPARTMENT, now=now, user_index=user_index)
            ),
            statistics=compute_statistics(filtered, config),
        )

    logger.info(
        f"Built report with {report.total_records} transactions, "
        f"{len(report.user_ranking)} users, {len(report.department_ranking)} departments"
    )
    return report


def summarize(
    transactions: list[Transaction],
    now: date | datetime,
    config: Optional[AnalyticsConfig] = None,
) -> FinancialSummary:
    """Compute the financial summary.

    Monthly figures divide totals by the number of months spanned by the
    transactions (at least one); quarterly figures are three months' worth.
    Income and expense growth compare the last complete calendar month
    before now with the month before it.

    Args:
        transactions: Filtered transactions.
        now: Evaluation instant.
        config: Analytics configuration.

    Returns:
        FinancialSummary (all zeros for no transactions).
    """
    config = config or AnalyticsConfig()
    if not transactions:
        return FinancialSummary()

    income = of_kind(transactions, TransactionKind.INCOME)
    expenses = of_kind(transactions, TransactionKind.EXPENSE)
    total_income = total_amount(income)
    total_expense = total_amount(expenses)

    dates = [t.occurred_on for t in transactions]
    months = elapsed_months(min(dates), max(dates), config.days_per_month)
    monthly_income = divide(total_income, months)
    monthly_expense = divide(total_expense, months)

    window = month_over_month(now, months_back=1)

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        monthly_income=monthly_income,
        monthly_expense=monthly_expense,
        quarterly_income=monthly_income * 3,
        quarterly_expense=monthly_expense * 3,
        income_growth=period_over_period(income, total_metric, window).growth_percent,
        expense_growth=period_over_period(expenses, total_metric, window).growth_percent,
        profit_margin=(
            percentage(total_income - total_expense, total_income) if total_income > 0 else ZERO
        ),
        average_transaction=divide(total_amount(transactions), len(transactions)),
        elapsed_months=months,
    )


def build_chart_data(
    transactions: list[Transaction],
    kind: TransactionKind,
    now: date | datetime,
    spec: Optional[FilterSpec] = None,
    config: Optional[AnalyticsConfig] = None,
) -> ChartData:
    """Build the category, monthly and year-over-year datasets for one kind.

    Args:
        transactions: Filtered transactions (both kinds).
        kind: Kind to chart.
        now: Evaluation instant for category trends and yearly growth.
        spec: Active filter; its date bounds limit zero-filling.
        config: Analytics configuration.

    Returns:
        ChartData for the kind (empty datasets when it has no transactions).
    """
    config = config or AnalyticsConfig()
    own = of_kind(transactions, kind)
    if not own:
        return ChartData(kind=kind)

    window = month_over_month(now)
    members: dict[str, list[Transaction]] = {}
    for txn in own:
        members.setdefault(txn.category_name, []).append(txn)

    categories = tuple(
        CategoryEntry(
            name=bucket.key,
            amount=bucket.total,
            count=bucket.count,
            trend=period_over_period(members[bucket.key], total_metric, window).growth_percent,
        )
        for bucket in group_sum(own, by_category)
    )

    monthly = group_sum_by_month(own)
    if config.zero_fill_months:
        monthly = zero_fill_months(
            monthly,
            spec.start_date if spec else None,
            spec.end_date if spec else None,
        )

    return ChartData(
        kind=kind,
        categories=categories,
        monthly=tuple(monthly),
        comparison=tuple(year_comparison(own, monthly)),
        growth=growth_metrics(own, monthly, now),
    )


def year_comparison(
    transactions: list[Transaction],
    series: list[MonthlyBucket],
) -> list[YearComparisonPoint]:
    """Pair each monthly bucket with the same calendar month one year earlier.

    The previous year is taken relative to each bucket, not to the
    evaluation instant: unlike the month-over-month and year-over-year
    windows in trends.py, this comparison does not depend on now, so a
    2022 bucket is paired with 2021 whatever the current year is.

    Args:
        transactions: Transactions of one kind.
        series: Their monthly series.

    Returns:
        One YearComparisonPoint per bucket, in series order.
    """
    by_month: dict[tuple[int, int], Decimal] = {}
    for txn in transactions:
        by_month[txn.month_key] = by_month.get(txn.month_key, ZERO) + txn.amount

    return [
        YearComparisonPoint(
            label=bucket.label,
            current_year=bucket.total,
            previous_year=by_month.get((bucket.year - 1, bucket.month), ZERO),
        )
        for bucket in series
    ]


def compute_statistics(
    transactions: list[Transaction],
    config: Optional[AnalyticsConfig] = None,
) -> Statistics:
    """Count transactions and measure data quality.

    Data quality is reported as fractions of the filtered transactions:
    completeness (non-empty description), accuracy (resolved category) and
    consistency (resolved user). With no transactions all three are 1.

    Args:
        transactions: Filtered transactions.
        config: Analytics configuration (for the unknown label).

    Returns:
        Statistics for the transactions.
    """
    config = config or AnalyticsConfig()
    total = len(transactions)
    if total == 0:
        return Statistics()

    unknown = config.unknown_label
    described = sum(1 for t in transactions if t.description and t.description.strip())
    categorized = sum(1 for t in transactions if t.category_name and t.category_name != unknown)
    attributed = sum(1 for t in transactions if t.user_name and t.user_name != unknown)

    return Statistics(
        total_transactions=total,
        income_transactions=sum(1 for t in transactions if t.is_income),
        expense_transactions=sum(1 for t in transactions if t.is_expense),
        unique_users=len({t.user_name for t in transactions}),
        unique_categories=len({t.category_name for t in transactions}),
        unique_departments=len({t.department_name for t in transactions}),
        average_transaction_amount=divide(total_amount(transactions), total),
        data_quality=DataQuality(
            completeness=divide(Decimal(described), total),
            accuracy=divide(Decimal(categorized), total),
            consistency=divide(Decimal(attributed), total),
        ),
    )
