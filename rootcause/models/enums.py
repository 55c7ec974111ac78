"""
Enumeration types for the contribution scorer.

All enums inherit from str to ensure JSON serialization compatibility.
"""

from enum import Enum


class MetricAggFunction(str, Enum):
    """
    Aggregation functions a metric can be rolled up with before the cube
    decomposes its change.
    """

    SUM = "SUM"
    AVG = "AVG"
    COUNT = "COUNT"
    MAX = "MAX"
    MIN = "MIN"
