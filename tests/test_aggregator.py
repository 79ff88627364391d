"""Tests for grouped sums."""

from datetime import date
from decimal import Decimal
from itertools import count

from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.processing.aggregator import (
    by_category,
    by_department,
    by_user,
    group_sum,
    group_sum_by_month,
    of_kind,
    total_amount,
    zero_fill_months,
)

_ids = count(1)


def create_transaction(
    amount: str = "100",
    kind: TransactionKind = TransactionKind.EXPENSE,
    occurred_on: date = date(2024, 1, 15),
    category: str = "Food",
    user: str = "Alice",
    department: str = "Sales",
) -> Transaction:
    """Helper to create test transactions."""
    return Transaction(
        id=f"t{next(_ids)}",
        kind=kind,
        amount=Decimal(amount),
        occurred_on=occurred_on,
        category_name=category,
        user_name=user,
        department_name=department,
    )


class TestGroupSum:
    """Tests for group_sum."""

    def test_sums_per_key_in_first_seen_order(self) -> None:
        """Test totals and bucket order."""
        txns = [
            create_transaction("10", category="Travel"),
            create_transaction("5", category="Food"),
            create_transaction("2.5", category="Travel"),
        ]

        buckets = group_sum(txns, by_category)

        assert [b.key for b in buckets] == ["Travel", "Food"]
        assert buckets[0].total == Decimal("12.5")
        assert buckets[0].count == 2
        assert buckets[0].transaction_ids == (txns[0].id, txns[2].id)

    def test_bucket_totals_conserve_input_total(self) -> None:
        """Test that the buckets of a key function partition the input."""
        txns = [
            create_transaction("10.10", user="Alice", department="Sales"),
            create_transaction("20.20", user="Bob", department="Ops"),
            create_transaction("30.30", user="Carol", department="Sales"),
        ]

        for key_fn in (by_category, by_user, by_department):
            buckets = group_sum(txns, key_fn)
            assert sum(b.total for b in buckets) == Decimal("60.60")
            assert sum(b.count for b in buckets) == 3

    def test_exact_decimal_accumulation(self) -> None:
        """Test that repeated small amounts add up exactly."""
        txns = [create_transaction("0.1") for _ in range(10)]

        assert group_sum(txns, by_category)[0].total == Decimal("1.0")

    def test_empty_input(self) -> None:
        """Test that no transactions give no buckets."""
        assert group_sum([], by_user) == []


class TestGroupSumByMonth:
    """Tests for group_sum_by_month and zero_fill_months."""

    def test_chronological_across_years(self) -> None:
        """Test ordering by (year, month) regardless of input order."""
        txns = [
            create_transaction("3", occurred_on=date(2024, 2, 1)),
            create_transaction("1", occurred_on=date(2023, 12, 31)),
            create_transaction("2", occurred_on=date(2024, 1, 10)),
            create_transaction("4", occurred_on=date(2024, 2, 29)),
        ]

        series = group_sum_by_month(txns)

        assert [b.label for b in series] == ["2023-12", "2024-01", "2024-02"]
        assert [b.total for b in series] == [Decimal("1"), Decimal("2"), Decimal("7")]
        assert series[2].count == 2

    def test_sparse_months_are_omitted(self) -> None:
        """Test that months without transactions are absent by default."""
        txns = [
            create_transaction(occurred_on=date(2024, 1, 1)),
            create_transaction(occurred_on=date(2024, 4, 1)),
        ]

        assert [b.month for b in group_sum_by_month(txns)] == [1, 4]

    def test_zero_fill_between_buckets(self) -> None:
        """Test that zero_fill_months inserts empty months."""
        series = group_sum_by_month(
            [
                create_transaction("5", occurred_on=date(2024, 1, 1)),
                create_transaction("7", occurred_on=date(2024, 3, 1)),
            ]
        )

        filled = zero_fill_months(series)

        assert [b.label for b in filled] == ["2024-01", "2024-02", "2024-03"]
        assert filled[1].total == Decimal("0")
        assert filled[1].count == 0
        assert filled[2].total == Decimal("7")

    def test_zero_fill_with_explicit_bounds(self) -> None:
        """Test filling out to bounds outside the data."""
        series = group_sum_by_month([create_transaction(occurred_on=date(2024, 2, 10))])

        filled = zero_fill_months(series, date(2023, 12, 15), date(2024, 3, 31))

        assert [b.label for b in filled] == ["2023-12", "2024-01", "2024-02", "2024-03"]

    def test_zero_fill_empty_series(self) -> None:
        """Test empty input without bounds."""
        assert zero_fill_months([]) == []


class TestTotals:
    """Tests for total_amount and of_kind."""

    def test_total_by_kind(self) -> None:
        """Test restricting a total to one kind."""
        txns = [
            create_transaction("1000"),
            create_transaction("500"),
            create_transaction("3000", kind=TransactionKind.INCOME),
        ]

        assert total_amount(txns) == Decimal("4500")
        assert total_amount(txns, TransactionKind.EXPENSE) == Decimal("1500")
        assert total_amount(txns, TransactionKind.INCOME) == Decimal("3000")
        assert len(of_kind(txns, TransactionKind.INCOME)) == 1

    def test_total_of_nothing_is_zero(self) -> None:
        """Test the empty total."""
        assert total_amount([]) == Decimal("0")
