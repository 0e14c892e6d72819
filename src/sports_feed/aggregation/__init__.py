from sports_feed.aggregation.cascade import CascadeController, CascadePolicy, CycleResult
from sports_feed.aggregation.errors import AggregationCycleFailure, AggregatorConfigError
from sports_feed.aggregation.facade import (
    EventAggregator,
    build_aggregator,
    build_default_aggregator,
)

__all__ = [
    "AggregationCycleFailure",
    "AggregatorConfigError",
    "CascadeController",
    "CascadePolicy",
    "CycleResult",
    "EventAggregator",
    "build_aggregator",
    "build_default_aggregator",
]
