"""Analytics pipeline: normalize, filter, aggregate, rank and report."""

from ledger_analytics.processing.aggregator import (
    group_sum,
    group_sum_by_month,
    zero_fill_months,
)
from ledger_analytics.processing.filter_evaluator import FilterEvaluator, apply_filter
from ledger_analytics.processing.normalizer import Normalizer, normalize_records
from ledger_analytics.processing.ranking import (
    Dimension,
    RankingEngine,
    RankMetric,
    rank_entities,
)
from ledger_analytics.processing.report_generator import build_report
from ledger_analytics.processing.trends import growth_percent, period_over_period

__all__ = [
    "Normalizer",
    "normalize_records",
    "FilterEvaluator",
    "apply_filter",
    "group_sum",
    "group_sum_by_month",
    "zero_fill_months",
    "growth_percent",
    "period_over_period",
    "Dimension",
    "RankingEngine",
    "RankMetric",
    "rank_entities",
    "build_report",
]
