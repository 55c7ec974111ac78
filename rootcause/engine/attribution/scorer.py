"""
Contribution Scorer for dimension slices.

Performs contribution analysis for a batch of slices of one metric, given a
current and a baseline time range. A cube is built over all dimensions of the
slices' dataset; the cube's cost breakdown is normalized into per-slice
contribution weights, and each slice's final score is

    score' = score * contribution_weight

Slices the cube attributes no cost to are dropped from the output.
"""

from collections.abc import Callable, Iterable
from typing import Optional

from rootcause.config import get_settings
from rootcause.cube import get_cube_adapter
from rootcause.cube.base import CubeAdapter
from rootcause.models.enums import MetricAggFunction
from rootcause.models.slices import MetricExpression, ScoringResult, Slice, TimeRange
from rootcause.utils.logging import configure_logging, get_logger, log_event, scoring_context

from .aggregator import SliceAggregator, weights_normalized
from .validator import validate_consistency


class ContributionScorer:
    """
    Scores slices by their share of a metric's change between two windows.

    The scorer holds no per-call state: every call creates its own cube
    adapter through ``cube_factory``, so independent calls may run in
    parallel as long as the adapters tolerate it.

    Attributes:
        cube_factory: Zero-argument callable returning a fresh CubeAdapter
        agg_function: Aggregation applied to the metric before decomposition
        aggregator: Turns cost breakdowns into normalized weights
        weight_tolerance: Tolerance used when checking weights sum to 1.0

    Example:
        >>> scorer = ContributionScorer(cube_factory=lambda: adapter)
        >>> scored = scorer.score(slices, current=current, baseline=baseline)
        >>> print(max(scored, key=lambda s: s.score).dimension)
    """

    def __init__(
        self,
        cube_factory: Optional[Callable[[], CubeAdapter]] = None,
        agg_function: Optional[MetricAggFunction] = None,
        aggregator: Optional[SliceAggregator] = None,
    ):
        settings = get_settings()
        self.cube_factory = cube_factory or get_cube_adapter
        self.agg_function = agg_function or MetricAggFunction(settings.default_agg_function)
        self.aggregator = aggregator or SliceAggregator()
        self.weight_tolerance = settings.weight_tolerance
        self.logger = get_logger(__name__)
        if settings.log_configure:
            configure_logging()

    def score(
        self,
        slices: Iterable[Slice],
        current: TimeRange,
        baseline: TimeRange,
    ) -> list[Slice]:
        """
        Perform contribution analysis on slices of the same metric and dataset.

        Args:
            slices: Slices sharing one metric and dataset
            current: Current time range
            baseline: Baseline time range

        Returns:
            Slices with score updated according to contribution. Order follows
            the cube's cost breakdown, not the input.

        Raises:
            InconsistentInputError: If slices mix metrics or datasets
            OlapQueryError: If the cube backend query fails
            DecompositionError: If the cube cannot be built
        """
        return self.score_detailed(slices, current, baseline).slices

    def score_detailed(
        self,
        slices: Iterable[Slice],
        current: TimeRange,
        baseline: TimeRange,
    ) -> ScoringResult:
        """
        Same as ``score``, additionally reporting the weight map and the
        identities of input slices that were dropped as unresolved.
        """
        slices = list(slices)
        if not slices:
            return ScoringResult()

        metric, dataset = validate_consistency(slices)

        expression = MetricExpression.for_metric(metric, self.agg_function)
        dimensions = list(dataset.dimensions)

        with scoring_context(metric=metric.name, dataset=dataset.dataset):
            with self.cube_factory() as adapter:
                adapter.configure(
                    dataset=dataset.dataset,
                    metric_expression=expression,
                    current_start=current.start,
                    current_end=current.end,
                    baseline_start=baseline.start,
                    baseline_end=baseline.end,
                )
                costs = adapter.build_cost_set(dimensions, len(dimensions), [])

            weights = self.aggregator.aggregate(costs)
            if not weights_normalized(weights, self.weight_tolerance):
                self.logger.warning("weights_not_normalized", total=sum(weights.values()))

            # later duplicates of an identity replace earlier ones
            by_identity = {s.dimension: s for s in slices}

            scored = []
            for identity, weight in weights.items():
                s = by_identity.get(identity)
                if s is None:
                    continue
                # final score is dimension_contribution * base_score
                scored.append(s.with_score(s.score * weight))

            unresolved = [identity for identity in by_identity if identity not in weights]
            for identity in unresolved:
                log_event(self.logger, "warning", "slice_unresolved", dimension=identity)

            self.logger.info(
                "slices_scored",
                expression=str(expression),
                input_slices=len(slices),
                cost_entries=len(costs),
                scored_slices=len(scored),
                unresolved_slices=len(unresolved),
            )

        return ScoringResult(slices=scored, unresolved=unresolved, weights=weights)
