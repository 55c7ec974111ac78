"""
Scoring engines of the root cause analysis pipeline.

- Contribution attribution: ranks dimension slices of a metric by their share
  of the metric's change between a baseline and a current window
"""

__version__ = "1.0.0"

__all__ = [
    "ContributionScorer",
]

from rootcause.engine.attribution import ContributionScorer
