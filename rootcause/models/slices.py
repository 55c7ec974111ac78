"""
Slice and cube models for dimension contribution scoring.

This module defines the entities exchanged between the upstream candidate
generator, the contribution scorer and the cube decomposition backends:
metric and dataset descriptors, scored slices, time ranges and the cost
entries a cube reports for each explored dimension value.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import MetricAggFunction

IDENTITY_SEPARATOR = "="


def slice_identity(dim_name: str, dim_value: str) -> str:
    """
    Encode a dimension name/value pair as a slice identity key.

    The key splits on its first separator, so names must not contain it;
    values may.
    """
    return f"{dim_name}{IDENTITY_SEPARATOR}{dim_value}"


class MetricConfig(BaseModel):
    """
    A metric that slices are cut from.

    Attributes:
        name: Metric column name in the dataset
        dataset: Name of the dataset the metric belongs to
        alias: Optional display name
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Metric column name in the dataset", min_length=1)
    dataset: str = Field(description="Dataset the metric belongs to", min_length=1)
    alias: Optional[str] = Field(default=None, description="Optional display name")


class DatasetConfig(BaseModel):
    """
    A dataset and the dimensions its metrics can be broken down by.

    Attributes:
        dataset: Dataset (collection) name
        dimensions: Ordered dimension names available for decomposition
        timezone: Calendar the dataset is interpreted in, always UTC
    """

    model_config = ConfigDict(frozen=True)

    dataset: str = Field(description="Dataset (collection) name", min_length=1)
    dimensions: tuple[str, ...] = Field(
        default=(), description="Ordered dimension names available for decomposition"
    )
    timezone: str = Field(default="UTC", description="Calendar the dataset is interpreted in")

    @field_validator("dimensions")
    @classmethod
    def validate_unique_dimensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure no dimension is listed twice."""
        if len(set(v)) != len(v):
            raise ValueError("Dataset dimensions must be unique")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v.upper() != "UTC":
            raise ValueError("Datasets are always interpreted in UTC")
        return "UTC"


class MetricExpression(BaseModel):
    """
    An aggregation over a metric, as handed to cube backends.

    Attributes:
        expression_name: Metric column the aggregation is applied to
        agg_function: Aggregation function
        dataset: Dataset the metric is read from
    """

    model_config = ConfigDict(frozen=True)

    expression_name: str = Field(description="Metric column the aggregation applies to")
    agg_function: MetricAggFunction = Field(
        default=MetricAggFunction.SUM, description="Aggregation function"
    )
    dataset: str = Field(description="Dataset the metric is read from")

    @classmethod
    def for_metric(
        cls,
        metric: MetricConfig,
        agg_function: MetricAggFunction = MetricAggFunction.SUM,
    ) -> "MetricExpression":
        """Build the expression aggregating ``metric`` with ``agg_function``."""
        return cls(
            expression_name=metric.name,
            agg_function=agg_function,
            dataset=metric.dataset,
        )

    def __str__(self) -> str:
        return f"{self.agg_function.value}({self.expression_name})"


class Slice(BaseModel):
    """
    A metric restricted to one dimension-value combination, with a score.

    Slices are immutable: scoring produces a new Slice with the same identity
    via ``with_score`` and never mutates the input.

    Attributes:
        metric: Metric the slice is cut from
        dataset: Dataset the metric lives in
        dimension: Slice identity, encoded as ``name=value``
        score: Relevance score assigned upstream
    """

    model_config = ConfigDict(frozen=True)

    metric: MetricConfig = Field(description="Metric the slice is cut from")
    dataset: DatasetConfig = Field(description="Dataset the metric lives in")
    dimension: str = Field(description="Slice identity (name=value)", min_length=1)
    score: float = Field(default=1.0, description="Relevance score assigned upstream")

    @model_validator(mode="after")
    def validate_metric_in_dataset(self) -> "Slice":
        """Ensure the metric belongs to the slice's dataset."""
        if self.metric.dataset != self.dataset.dataset:
            raise ValueError(
                f"Metric '{self.metric.name}' belongs to dataset '{self.metric.dataset}', "
                f"not '{self.dataset.dataset}'"
            )
        return self

    @staticmethod
    def identity(dim_name: str, dim_value: str) -> str:
        """Slice identity for a dimension name/value pair."""
        return slice_identity(dim_name, dim_value)

    @property
    def dimension_name(self) -> str:
        return self.dimension.partition(IDENTITY_SEPARATOR)[0]

    @property
    def dimension_value(self) -> str:
        return self.dimension.partition(IDENTITY_SEPARATOR)[2]

    def with_score(self, score: float) -> "Slice":
        """Return a copy of this slice carrying ``score``."""
        return self.model_copy(update={"score": score})


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimeRange(BaseModel):
    """
    A time window with inclusive start and exclusive end, always in UTC.

    Naive datetimes are read as UTC; aware datetimes are converted.

    Attributes:
        start: Inclusive window start
        end: Exclusive window end
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Inclusive window start (UTC)")
    end: datetime = Field(description="Exclusive window end (UTC)")

    @field_validator("start", "end")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        """Normalize timestamps to UTC."""
        return _to_utc(v)

    @model_validator(mode="after")
    def validate_order(self) -> "TimeRange":
        """Ensure the window does not end before it starts."""
        if self.end < self.start:
            raise ValueError("Time range end must not be before start")
        return self

    @classmethod
    def from_millis(cls, start: int, end: int) -> "TimeRange":
        """Build a range from epoch milliseconds."""
        return cls(
            start=datetime.fromtimestamp(start / 1000, tz=timezone.utc),
            end=datetime.fromtimestamp(end / 1000, tz=timezone.utc),
        )

    def contains(self, instant: datetime) -> bool:
        instant = _to_utc(instant)
        return self.start <= instant < self.end


class CostEntry(BaseModel):
    """
    One row of a cube cost breakdown.

    Attributes:
        dim_name: Dimension name
        dim_value: Dimension value
        cost: Non-negative contribution cost to the change between windows
    """

    model_config = ConfigDict(frozen=True)

    dim_name: str = Field(description="Dimension name")
    dim_value: str = Field(description="Dimension value")
    cost: float = Field(description="Contribution cost", ge=0.0, allow_inf_nan=False)

    @field_validator("dim_name")
    @classmethod
    def validate_dim_name(cls, v: str) -> str:
        """Reject names that would make the slice identity ambiguous."""
        if IDENTITY_SEPARATOR in v:
            raise ValueError(f"Dimension name must not contain '{IDENTITY_SEPARATOR}': {v!r}")
        return v

    @property
    def key(self) -> str:
        """Slice identity this entry contributes to."""
        return slice_identity(self.dim_name, self.dim_value)


class ScoringResult(BaseModel):
    """
    Detailed outcome of one scoring pass.

    Attributes:
        slices: Scored slices, in weight map order
        unresolved: Identities of input slices no cost could be attributed to
        weights: Normalized weight map the scores were derived from
    """

    slices: list[Slice] = Field(default_factory=list, description="Scored slices")
    unresolved: list[str] = Field(
        default_factory=list, description="Input identities without attributed cost"
    )
    weights: dict[str, float] = Field(
        default_factory=dict, description="Normalized weight per slice identity"
    )
