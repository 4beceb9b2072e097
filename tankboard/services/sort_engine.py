"""
Sort Engine Service

Orders the tanks inside a group or subgroup for display.

- strings compare case-insensitively, numbers numerically, dates in time order
- status sorts by urgency (ascending = most urgent first)
- missing values (None, NaN) always go last, in either direction
- the sort is stable, so sorting twice by the same key changes nothing
"""

import math
from dataclasses import dataclass, fields, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from tankboard.models.tank_models import (
    ClassifiedTank,
    Group,
    SortDirection,
    StatusLevel,
    TankRecord,
)

FieldSelector = Union[str, Callable[[ClassifiedTank], Any]]

DERIVED_FIELDS = ("fill_percent", "status", "ullage", "dip_is_stale", "serviced_today")
RECORD_FIELDS = tuple(f.name for f in fields(TankRecord))

_MISSING = object()


@dataclass(frozen=True)
class SortConfig:
    """Current sort of the board, as driven by the table header."""
    field: str = "location"
    direction: SortDirection = SortDirection.ASC

    def toggle(self, field: str) -> "SortConfig":
        """Same field flips direction; a new field starts ascending."""
        if field == self.field:
            flipped = (
                SortDirection.DESC
                if self.direction == SortDirection.ASC
                else SortDirection.ASC
            )
            return replace(self, direction=flipped)
        return SortConfig(field=field, direction=SortDirection.ASC)


def _comparable(value: Any) -> Any:
    """Map a raw field value to a sortable key, or _MISSING."""
    if value is None:
        return _MISSING
    if isinstance(value, StatusLevel):
        return (0, -value.severity)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        if math.isnan(value):
            return _MISSING
        return (0, value)
    if isinstance(value, str):
        return (1, value.casefold())
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (0, value.timestamp())
    if isinstance(value, date):
        return (0, datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())
    return (2, str(value))


class SortEngine:
    """
    Example Usage:
        engine = SortEngine()
        ordered = engine.sort(tanks, "days_to_min_level", SortDirection.ASC)
    """

    def resolve(self, field: FieldSelector) -> Callable[[ClassifiedTank], Any]:
        if callable(field):
            return field
        if field in DERIVED_FIELDS:
            return lambda tank: getattr(tank, field)
        if field in RECORD_FIELDS:
            return lambda tank: getattr(tank.record, field)
        raise ValueError(f"Unknown sort field: {field!r}")

    def sort(
        self,
        tanks: Iterable[ClassifiedTank],
        field: FieldSelector = "location",
        direction: Union[SortDirection, str] = SortDirection.ASC,
    ) -> List[ClassifiedTank]:
        """
        Return a new, ordered list. The input is not touched.

        Raises:
            ValueError: unknown field name or direction
        """
        direction = SortDirection(direction)
        selector = self.resolve(field)

        present: List[Tuple[Any, ClassifiedTank]] = []
        missing: List[ClassifiedTank] = []
        for tank in tanks:
            key = _comparable(selector(tank))
            if key is _MISSING:
                missing.append(tank)
            else:
                present.append((key, tank))

        ordered = sorted(
            present,
            key=lambda pair: pair[0],
            reverse=direction == SortDirection.DESC,
        )
        return [tank for _, tank in ordered] + missing

    def sort_group(
        self,
        group: Group,
        field: FieldSelector = "location",
        direction: Union[SortDirection, str] = SortDirection.ASC,
    ) -> Group:
        """Sort the direct tanks and each subgroup's tanks of a group."""
        return replace(
            group,
            tanks=self.sort(group.tanks, field, direction),
            subgroups=[
                replace(sg, tanks=self.sort(sg.tanks, field, direction))
                for sg in group.subgroups
            ],
        )

    def sort_groups(
        self,
        groups: Iterable[Group],
        config: Optional[SortConfig] = None,
    ) -> List[Group]:
        config = config or SortConfig()
        return [self.sort_group(g, config.field, config.direction) for g in groups]
