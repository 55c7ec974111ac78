"""
Pydantic v2 data models for the contribution scorer.

Model Organization:
    - enums: Aggregation function enumeration
    - slices: Metric/dataset descriptors, slices, time ranges, cost entries
      and scoring results

Usage:
    >>> from rootcause.models import DatasetConfig, MetricConfig, Slice
    >>> dataset = DatasetConfig(dataset="pageviews", dimensions=("country",))
    >>> metric = MetricConfig(name="views", dataset="pageviews")
    >>> s = Slice(metric=metric, dataset=dataset, dimension="country=US", score=2.0)
"""

from .enums import MetricAggFunction
from .slices import (
    CostEntry,
    DatasetConfig,
    MetricConfig,
    MetricExpression,
    ScoringResult,
    Slice,
    TimeRange,
    slice_identity,
)

__all__ = [
    "MetricAggFunction",
    "CostEntry",
    "DatasetConfig",
    "MetricConfig",
    "MetricExpression",
    "ScoringResult",
    "Slice",
    "TimeRange",
    "slice_identity",
]
