"""Service layer for tank classification and grouping."""

from .display_policy import SubgroupDisplayPolicy
from .group_aggregator import GroupAggregator
from .grouping_engine import GroupingEngine
from .sort_engine import SortConfig, SortEngine
from .status_classifier import StatusClassifier

__all__ = [
    "GroupAggregator",
    "GroupingEngine",
    "SortConfig",
    "SortEngine",
    "StatusClassifier",
    "SubgroupDisplayPolicy",
]
