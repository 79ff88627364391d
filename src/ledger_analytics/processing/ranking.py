"""Ranking of users and departments by accumulated expense."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from ledger_analytics.config import AnalyticsConfig
from ledger_analytics.models.records import UserRecord
from ledger_analytics.models.report import AggregationBucket, Badge, RankedEntity
from ledger_analytics.models.transaction import Transaction
from ledger_analytics.processing.aggregator import KeyFn, by_department, by_user, group_sum
from ledger_analytics.processing.trends import month_over_month, period_over_period, total_metric
from ledger_analytics.utils.decimal_utils import HUNDRED, ZERO, divide
from ledger_analytics.utils.logging_config import get_logger

logger = get_logger(__name__)


class Dimension(Enum):
    """Entity type a ranking groups by."""

    USER = "user"
    DEPARTMENT = "department"

    @property
    def key_fn(self) -> KeyFn:
        return by_user if self is Dimension.USER else by_department


class RankMetric(Enum):
    """Value a ranking is ordered by (descending)."""

    AMOUNT = "amount"
    TRANSACTIONS = "transactions"


def efficiency_score(average_amount: Decimal, scale: Decimal) -> Decimal:
    """Heuristic score in [0, 100] that falls as the average transaction grows.

    Args:
        average_amount: Average transaction amount of the entity.
        scale: Amount that costs one point of score.

    Returns:
        max(0, min(100, 100 - average_amount / scale)).
    """
    return max(ZERO, min(HUNDRED, HUNDRED - average_amount / scale))


class RankingEngine:
    """Orders entities by a metric and derives rank, badge, trend and efficiency.

    Ordering is by metric descending, then name ascending, so every input
    has exactly one ranking. Ranks are 1-based positions in that order and
    are never shared, even between entities with equal metrics.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """Initialize ranking engine.

        Args:
            config: Analytics configuration providing the efficiency scales.
        """
        self.config = config or AnalyticsConfig()

    def rank(
        self,
        transactions: Iterable[Transaction],
        group_by: Dimension,
        metric: RankMetric = RankMetric.AMOUNT,
        now: Optional[date | datetime] = None,
        user_index: Optional[Mapping[str, UserRecord]] = None,
    ) -> list[RankedEntity]:
        """Rank the entities found in transactions.

        Args:
            transactions: Transactions to rank (normally expenses only).
            group_by: Entity type to group by.
            metric: Value to order by.
            now: Evaluation instant for the per-entity trend (default: now).
            user_index: Users keyed by id, used for department head counts.

        Returns:
            RankedEntities ordered by rank.
        """
        transactions = list(transactions)
        if now is None:
            now = datetime.now()

        buckets = group_sum(transactions, group_by.key_fn)
        buckets.sort(key=lambda b: b.key)
        buckets.sort(key=lambda b: self._metric_value(b, metric), reverse=True)

        members: dict[str, list[Transaction]] = {}
        for txn in transactions:
            members.setdefault(group_by.key_fn(txn), []).append(txn)

        window = month_over_month(now)
        scale = (
            self.config.user_efficiency_scale
            if group_by is Dimension.USER
            else self.config.department_efficiency_scale
        )
        head_counts = self._department_head_counts(transactions, user_index)

        ranked: list[RankedEntity] = []
        for position, bucket in enumerate(buckets, start=1):
            own = members[bucket.key]
            average = divide(bucket.total, bucket.count)
            trend = period_over_period(own, total_metric, window).growth_percent

            ranked.append(
                RankedEntity(
                    name=bucket.key,
                    amount=bucket.total,
                    transaction_count=bucket.count,
                    average_amount=average,
                    trend=trend,
                    efficiency=efficiency_score(average, scale),
                    rank=position,
                    badge=Badge.for_rank(position),
                    department=own[0].department_name if group_by is Dimension.USER else None,
                    user_count=(
                        head_counts.get(bucket.key, 1) if group_by is Dimension.DEPARTMENT else None
                    ),
                )
            )

        logger.debug(f"Ranked {len(ranked)} {group_by.value} entities by {metric.value}")
        return ranked

    @staticmethod
    def _metric_value(bucket: AggregationBucket, metric: RankMetric) -> Decimal:
        if metric is RankMetric.TRANSACTIONS:
            return Decimal(bucket.count)
        return bucket.total

    @staticmethod
    def _department_head_counts(
        transactions: list[Transaction],
        user_index: Optional[Mapping[str, UserRecord]],
    ) -> dict[str, int]:
        """Users per department, from the user index when given.

        Without an index, distinct user names seen in the transactions are
        counted instead.
        """
        members: dict[str, set[str]] = {}
        if user_index:
            for user_id, user in user_index.items():
                if user.department:
                    members.setdefault(user.department, set()).add(user_id)
        else:
            for txn in transactions:
                members.setdefault(txn.department_name, set()).add(txn.user_name)
        return {dept: max(1, len(names)) for dept, names in members.items()}


def rank_entities(
    transactions: Iterable[Transaction],
    group_by: Dimension,
    metric: RankMetric = RankMetric.AMOUNT,
    now: Optional[date | datetime] = None,
    config: Optional[AnalyticsConfig] = None,
) -> list[RankedEntity]:
    """Convenience function to rank entities.

    Args:
        transactions: Transactions to rank.
        group_by: Entity type to group by.
        metric: Value to order by.
        now: Evaluation instant for trends.
        config: Analytics configuration.

    Returns:
        RankedEntities ordered by rank.
    """
    return RankingEngine(config).rank(transactions, group_by, metric, now)
