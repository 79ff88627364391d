"""Tests for user and department rankings."""

from datetime import date, datetime
from decimal import Decimal
from itertools import count

import pytest

from ledger_analytics.config import AnalyticsConfig
from ledger_analytics.models.records import UserRecord
from ledger_analytics.models.report import Badge
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.processing.ranking import (
    Dimension,
    RankingEngine,
    RankMetric,
    efficiency_score,
    rank_entities,
)

NOW = datetime(2024, 3, 15, 12, 0)

_ids = count(1)


def create_transaction(
    amount: str,
    user: str = "Alice",
    department: str = "Sales",
    occurred_on: date = date(2024, 3, 1),
) -> Transaction:
    """Helper to create test expenses."""
    return Transaction(
        id=str(next(_ids)),
        kind=TransactionKind.EXPENSE,
        amount=Decimal(amount),
        occurred_on=occurred_on,
        category_name="Food",
        user_name=user,
        department_name=department,
    )


class TestRankingOrder:
    """Tests for ordering, ranks and badges."""

    def test_tie_broken_by_name(self) -> None:
        """Test that equal amounts are ordered by name and ranks stay distinct."""
        txns = [create_transaction("500", user="Bob"), create_transaction("500", user="Alice")]

        ranked = RankingEngine().rank(txns, Dimension.USER, now=NOW)

        assert [(e.name, e.rank, e.badge) for e in ranked] == [
            ("Alice", 1, Badge.GOLD),
            ("Bob", 2, Badge.SILVER),
        ]

    def test_descending_amount_and_badges(self) -> None:
        """Test ordering by amount and badges for the top three only."""
        txns = [
            create_transaction("10", user="Dan"),
            create_transaction("40", user="Alice"),
            create_transaction("30", user="Bob"),
            create_transaction("20", user="Carol"),
        ]

        ranked = rank_entities(txns, Dimension.USER, now=NOW)

        assert [e.name for e in ranked] == ["Alice", "Bob", "Carol", "Dan"]
        assert [e.rank for e in ranked] == [1, 2, 3, 4]
        assert [e.badge for e in ranked] == [Badge.GOLD, Badge.SILVER, Badge.BRONZE, Badge.NONE]

    def test_input_order_does_not_change_ranking(self) -> None:
        """Test that the ranking is a total order independent of input order."""
        txns = [
            create_transaction("5", user="Zed"),
            create_transaction("5", user="Amy"),
            create_transaction("7", user="Max"),
        ]

        forward = RankingEngine().rank(txns, Dimension.USER, now=NOW)
        backward = RankingEngine().rank(list(reversed(txns)), Dimension.USER, now=NOW)

        assert [e.name for e in forward] == [e.name for e in backward] == ["Max", "Amy", "Zed"]

    def test_rank_by_transaction_count(self) -> None:
        """Test ordering by number of transactions."""
        txns = [
            create_transaction("1000", user="Alice"),
            create_transaction("1", user="Bob"),
            create_transaction("1", user="Bob"),
        ]

        ranked = RankingEngine().rank(txns, Dimension.USER, RankMetric.TRANSACTIONS, now=NOW)

        assert [e.name for e in ranked] == ["Bob", "Alice"]

    def test_empty(self) -> None:
        """Test that no transactions give an empty ranking."""
        assert RankingEngine().rank([], Dimension.DEPARTMENT, now=NOW) == []


class TestRankedEntityFields:
    """Tests for derived per-entity figures."""

    def test_user_fields(self) -> None:
        """Test amount, count, average, efficiency and department of a user."""
        txns = [
            create_transaction("1000", occurred_on=date(2024, 2, 10)),
            create_transaction("1500", occurred_on=date(2024, 3, 10)),
        ]

        entity = RankingEngine().rank(txns, Dimension.USER, now=NOW)[0]

        assert entity.amount == Decimal("2500")
        assert entity.transaction_count == 2
        assert entity.average_amount == Decimal("1250")
        assert entity.efficiency == Decimal("99.875")
        assert entity.trend == Decimal("50")
        assert entity.department == "Sales"
        assert entity.user_count is None

    def test_department_uses_department_scale(self) -> None:
        """Test the department efficiency scale and head count from the user index."""
        txns = [
            create_transaction("5000", user="Alice", department="Sales"),
            create_transaction("5000", user="Bob", department="Sales"),
        ]
        user_index = {
            "u1": UserRecord(id="u1", name="Alice", department="Sales"),
            "u2": UserRecord(id="u2", name="Bob", department="Sales"),
            "u3": UserRecord(id="u3", name="Carol", department="Sales"),
        }

        entity = RankingEngine().rank(
            txns, Dimension.DEPARTMENT, now=NOW, user_index=user_index
        )[0]

        assert entity.name == "Sales"
        assert entity.efficiency == Decimal("99.9")
        assert entity.user_count == 3
        assert entity.department is None

    def test_department_head_count_without_index(self) -> None:
        """Test counting distinct users seen in the transactions."""
        txns = [
            create_transaction("1", user="Alice", department="Ops"),
            create_transaction("1", user="Alice", department="Ops"),
            create_transaction("1", user="Bob", department="Ops"),
        ]

        entity = RankingEngine().rank(txns, Dimension.DEPARTMENT, now=NOW)[0]

        assert entity.user_count == 2

    def test_configured_scale(self) -> None:
        """Test that the efficiency scale is read from configuration."""
        config = AnalyticsConfig(user_efficiency_scale=Decimal("100"))
        txns = [create_transaction("1000")]

        entity = RankingEngine(config).rank(txns, Dimension.USER, now=NOW)[0]

        assert entity.efficiency == Decimal("90")


class TestEfficiencyScore:
    """Tests for efficiency_score."""

    @pytest.mark.parametrize(
        "average,expected",
        [
            ("0", "100"),
            ("10000", "99"),
            ("1000000", "0"),
            ("5000000", "0"),
        ],
    )
    def test_clamped_to_range(self, average: str, expected: str) -> None:
        """Test the score formula and its clamping to [0, 100]."""
        assert efficiency_score(Decimal(average), Decimal("10000")) == Decimal(expected)
