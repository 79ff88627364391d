"""Grouped sums over transactions.

Totals are accumulated as Decimal so that thousands of additions do not
drift. Conversion to display form is left to the output layer.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ledger_analytics.models.report import AggregationBucket, MonthlyBucket
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.utils.date_utils import generate_month_range
from ledger_analytics.utils.decimal_utils import ZERO, sum_amounts

KeyFn = Callable[[Transaction], str]


def by_category(txn: Transaction) -> str:
    return txn.category_name


def by_user(txn: Transaction) -> str:
    return txn.user_name


def by_department(txn: Transaction) -> str:
    return txn.department_name


class _Accumulator:
    """Running total, count and ids for one bucket."""

    __slots__ = ("total", "count", "ids")

    def __init__(self) -> None:
        self.total = ZERO
        self.count = 0
        self.ids: list[str] = []

    def add(self, txn: Transaction) -> None:
        self.total += txn.amount
        self.count += 1
        self.ids.append(txn.id)


def group_sum(transactions: Iterable[Transaction], key_fn: KeyFn) -> list[AggregationBucket]:
    """Sum amounts per key.

    Buckets come out in the order their key is first seen, so chart labels
    stay stable for a given input order.

    Args:
        transactions: Transactions to group.
        key_fn: Extracts the grouping key from a transaction.

    Returns:
        One AggregationBucket per distinct key.
    """
    groups: dict[str, _Accumulator] = {}
    for txn in transactions:
        groups.setdefault(key_fn(txn), _Accumulator()).add(txn)

    return [
        AggregationBucket(key=key, total=acc.total, count=acc.count, transaction_ids=tuple(acc.ids))
        for key, acc in groups.items()
    ]


def group_sum_by_month(transactions: Iterable[Transaction]) -> list[MonthlyBucket]:
    """Sum amounts per calendar month, oldest month first.

    Only months with at least one transaction appear; see zero_fill_months.

    Args:
        transactions: Transactions to group.

    Returns:
        Chronologically ordered MonthlyBuckets.
    """
    groups: dict[tuple[int, int], _Accumulator] = {}
    for txn in transactions:
        groups.setdefault(txn.month_key, _Accumulator()).add(txn)

    return [
        MonthlyBucket(
            year=year,
            month=month,
            total=acc.total,
            count=acc.count,
            transaction_ids=tuple(acc.ids),
        )
        for (year, month), acc in sorted(groups.items())
    ]


def zero_fill_months(
    series: list[MonthlyBucket],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[MonthlyBucket]:
    """Insert empty buckets for months without transactions.

    Args:
        series: Chronological monthly series from group_sum_by_month.
        start: First month to cover (defaults to the first bucket).
        end: Last month to cover (defaults to the last bucket).

    Returns:
        Series with one bucket for every month from start to end.
    """
    if not series and (start is None or end is None):
        return []
    if start is None:
        start = date(series[0].year, series[0].month, 1)
    if end is None:
        end = date(series[-1].year, series[-1].month, 1)

    existing = {(b.year, b.month): b for b in series}
    return [
        existing.get((year, month)) or MonthlyBucket(year=year, month=month, total=ZERO, count=0)
        for year, month in generate_month_range(start, end)
    ]


def total_amount(
    transactions: Iterable[Transaction],
    kind: Optional[TransactionKind] = None,
) -> Decimal:
    """Sum amounts, optionally restricted to one kind."""
    return sum_amounts(t.amount for t in transactions if kind is None or t.kind is kind)


def of_kind(transactions: Iterable[Transaction], kind: TransactionKind) -> list[Transaction]:
    """Transactions of one kind, in input order."""
    return [t for t in transactions if t.kind is kind]
