"""
Consistency checks for a batch of slices submitted for scoring.

A cube is built for exactly one metric of one dataset, so every slice in a
scoring batch must share both.
"""

from collections.abc import Sequence

from rootcause.models.slices import DatasetConfig, MetricConfig, Slice


class InconsistentInputError(ValueError):
    """Raised when slices in one scoring batch mix metrics or datasets."""

    pass


def validate_consistency(slices: Sequence[Slice]) -> tuple[MetricConfig, DatasetConfig]:
    """
    Return the metric and dataset shared by all slices.

    Args:
        slices: Non-empty sequence of slices

    Returns:
        (metric, dataset) of the first slice

    Raises:
        ValueError: If ``slices`` is empty
        InconsistentInputError: On the first slice whose metric or dataset
            differs from the first slice's
    """
    if not slices:
        raise ValueError("Cannot validate an empty slice collection")

    first = slices[0]
    metric = first.metric
    dataset = first.dataset

    for s in slices[1:]:
        if s.metric != metric:
            raise InconsistentInputError(
                f"Slices must derive from the same metric: "
                f"'{metric.name}' != '{s.metric.name}' (slice '{s.dimension}')"
            )
        if s.dataset != dataset:
            raise InconsistentInputError(
                f"Slices must derive from the same dataset: "
                f"'{dataset.dataset}' != '{s.dataset.dataset}' (slice '{s.dimension}')"
            )

    return metric, dataset
