"""Numeric aggregation over domain records."""

from butler.aggregation.aggregator import DataAggregator
from butler.aggregation.schemas import (
    AggregationResult,
    DataPoint,
    SpendingAnalysis,
    TrendBucket,
    TrendGranularity,
    TrendResult,
)

__all__ = [
    "AggregationResult",
    "DataAggregator",
    "DataPoint",
    "SpendingAnalysis",
    "TrendBucket",
    "TrendGranularity",
    "TrendResult",
]
