"""
Slice Aggregator for dimension contribution scoring.

Turns a cube cost breakdown into normalized contribution weights:

    weight(slice) = SUM(cost of entries with slice identity) / SUM(all costs)

Entries for the same identity (from overlapping dimension explorations) are
additive. A breakdown with zero total cost yields a weight of 0.0 for every
identity.
"""

import math
from collections.abc import Iterable

import pandas as pd

from rootcause.models.slices import CostEntry
from rootcause.utils.logging import get_logger

logger = get_logger(__name__)

DIMENSION = "dimension"
COST = "cost"


class SliceAggregator:
    """
    Groups cost entries by slice identity and normalizes them into weights.

    Example:
        >>> weights = SliceAggregator().aggregate([
        ...     CostEntry(dim_name="country", dim_value="US", cost=30.0),
        ...     CostEntry(dim_name="country", dim_value="FR", cost=10.0),
        ... ])
        >>> weights
        {'country=US': 0.75, 'country=FR': 0.25}
    """

    def aggregate(self, costs: Iterable[CostEntry]) -> dict[str, float]:
        """
        Build the normalized weight map for a cost breakdown.

        Args:
            costs: Cost entries reported by a cube adapter

        Returns:
            Mapping of slice identity to weight in [0, 1], in order of first
            appearance. Weights sum to 1.0 whenever the total cost is non-zero.
        """
        costs = list(costs)
        if not costs:
            return {}

        df = pd.DataFrame({
            DIMENSION: [c.key for c in costs],
            COST: [c.cost for c in costs],
        })
        # scale by the largest cost so sums of huge costs stay finite
        largest = df[COST].max()
        if largest > 0.0:
            df[COST] = df[COST] / largest

        summed = df.groupby(DIMENSION, sort=False)[COST].sum()
        total = float(summed.sum())

        if total == 0.0:
            weights = summed * 0.0
        else:
            weights = summed / total

        logger.debug(
            "cost_set_aggregated",
            entries=len(costs),
            identities=len(weights),
            scaled_total=total,
        )

        return {str(key): float(value) for key, value in weights.items()}


def weights_normalized(weights: dict[str, float], tolerance: float = 1e-9) -> bool:
    """True if ``weights`` sum to 1.0 within ``tolerance``, or are all zero."""
    total = math.fsum(weights.values())
    if total == 0.0:
        return True
    return abs(total - 1.0) <= tolerance
