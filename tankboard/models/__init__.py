"""Data models for the tank board."""

from .tank_models import (
    ClassifiedTank,
    FleetSummary,
    Group,
    GroupStatus,
    GroupSummary,
    SortDirection,
    StatusLevel,
    Subgroup,
    TankBoard,
    TankRecord,
)

__all__ = [
    "ClassifiedTank",
    "FleetSummary",
    "Group",
    "GroupStatus",
    "GroupSummary",
    "SortDirection",
    "StatusLevel",
    "Subgroup",
    "TankBoard",
    "TankRecord",
]
