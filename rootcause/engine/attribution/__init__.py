"""
Dimension contribution attribution.

Scores candidate slices of a metric by how much of the metric's change
between a baseline and a current window each slice explains:
- Consistency validation (one metric, one dataset per batch)
- Cube decomposition through a pluggable CubeAdapter
- Cost aggregation into normalized contribution weights
- Multiplicative combination with each slice's existing score

Example:
    >>> from rootcause.engine.attribution import ContributionScorer
    >>> scorer = ContributionScorer()
    >>> scored = scorer.score(slices, current=current, baseline=baseline)
"""

from .aggregator import SliceAggregator, weights_normalized
from .scorer import ContributionScorer
from .validator import InconsistentInputError, validate_consistency

__all__ = [
    "ContributionScorer",
    "InconsistentInputError",
    "SliceAggregator",
    "validate_consistency",
    "weights_normalized",
]
