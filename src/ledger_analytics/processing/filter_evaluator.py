"""Filter evaluator applying a FilterSpec to transactions."""

from typing import Callable, Iterable

from ledger_analytics.models.filters import FilterSpec, KindFilter
from ledger_analytics.models.transaction import Transaction
from ledger_analytics.utils.date_utils import is_date_in_range
from ledger_analytics.utils.logging_config import get_logger

logger = get_logger(__name__)

Predicate = Callable[[Transaction], bool]


class FilterEvaluator:
    """Applies a FilterSpec to a transaction sequence.

    Axes are checked in a fixed order: date range, kind, category, user,
    department, amount range. Unset axes contribute no predicate.
    """

    def apply(self, transactions: Iterable[Transaction], spec: FilterSpec) -> list[Transaction]:
        """Return the transactions matching every axis of spec.

        The input is not modified; the result keeps input order.

        Args:
            transactions: Transactions to filter.
            spec: Filter to apply.

        Returns:
            New list of matching transactions.
        """
        predicates = self._predicates(spec)
        transactions = list(transactions)
        filtered = [t for t in transactions if all(p(t) for p in predicates)]

        logger.debug(
            f"Filter kept {len(filtered)}/{len(transactions)} transactions "
            f"({len(predicates)} active axes)"
        )
        return filtered

    @staticmethod
    def _predicates(spec: FilterSpec) -> list[Predicate]:
        predicates: list[Predicate] = []

        if spec.start_date is not None or spec.end_date is not None:
            start, end = spec.start_date, spec.end_date
            predicates.append(lambda t: is_date_in_range(t.occurred_on, start, end))

        if spec.kind is not KindFilter.ALL:
            kind_value = spec.kind.value
            predicates.append(lambda t: t.kind.value == kind_value)

        if spec.categories:
            categories = frozenset(spec.categories)
            predicates.append(lambda t: t.category_name in categories)

        if spec.users:
            users = frozenset(spec.users)
            predicates.append(lambda t: t.user_name in users)

        if spec.departments:
            departments = frozenset(spec.departments)
            predicates.append(lambda t: t.department_name in departments)

        if spec.min_amount is not None:
            low = spec.min_amount
            predicates.append(lambda t: t.amount >= low)

        if spec.max_amount is not None:
            high = spec.max_amount
            predicates.append(lambda t: t.amount <= high)

        return predicates


def apply_filter(transactions: Iterable[Transaction], spec: FilterSpec) -> list[Transaction]:
    """Convenience function to filter transactions.

    Args:
        transactions: Transactions to filter.
        spec: Filter to apply.

    Returns:
        New list of matching transactions.
    """
    return FilterEvaluator().apply(transactions, spec)
