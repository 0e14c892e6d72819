from __future__ import annotations


class AggregationCycleFailure(RuntimeError):
    """Unexpected internal exception during a cycle (outside adapter boundaries)."""


class AggregatorConfigError(ValueError):
    """The aggregator was wired with inconsistent timing or thresholds."""
