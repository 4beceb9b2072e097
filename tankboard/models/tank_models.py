"""
Tank Board Data Models
======================

Dataclasses and enums shared by the classifier, the grouping engine and the
board orchestrator. Nothing in here is persisted: every derived value is
rebuilt from TankRecord on each pass.

Author: Tank Board Team
Version: 1.2.0
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════════════


class StatusLevel(str, Enum):
    """Per-tank urgency"""
    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"
    UNKNOWN = "unknown"  # No usable level and no forecast

    @property
    def severity(self) -> int:
        """Higher = more urgent. Unknown ranks below normal."""
        return _SEVERITY[self]


_SEVERITY = {
    StatusLevel.CRITICAL: 3,
    StatusLevel.LOW: 2,
    StatusLevel.NORMAL: 1,
    StatusLevel.UNKNOWN: 0,
}


class GroupStatus(str, Enum):
    """Aggregate status of a group or subgroup"""
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ══════════════════════════════════════════════════════════════════════════════
# ROW PARSING HELPERS
# ══════════════════════════════════════════════════════════════════════════════


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _to_float(value: Any) -> Optional[float]:
    """Numbers and numeric strings become floats; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(parsed) else parsed
    try:
        # Decimal from the MySQL driver
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _to_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = _to_datetime(value)
    return parsed.date() if parsed else None


def _to_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ══════════════════════════════════════════════════════════════════════════════
# DATA CLASSES
# ══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TankRecord:
    """
    One tank reading as delivered by the data store.

    Level fields are optional individually; missing or non-numeric values are
    expected with late telemetry and simply classify as unknown.
    """
    id: str
    location: str
    group_name: Optional[str] = None
    subgroup_name: Optional[str] = None

    # Volumes (litres)
    current_level: Optional[float] = None
    min_level: Optional[float] = None
    safe_level: Optional[float] = None

    # Forecast supplied upstream
    days_to_min_level: Optional[float] = None

    # Context only
    rolling_average_use: Optional[float] = None
    previous_day_used: Optional[float] = None
    product_type: Optional[str] = None
    last_dip_timestamp: Optional[datetime] = None
    last_dip_by: Optional[str] = None
    serviced_on: Optional[date] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TankRecord":
        """
        Build a record from a tanks view row or an API payload.

        Raises:
            ValueError: the row has no id
        """
        tank_id = _to_name(_first(row, "id", "tank_id"))
        if tank_id is None:
            raise ValueError("Tank row has no id")

        return cls(
            id=tank_id,
            location=str(_first(row, "location", "location_name") or ""),
            group_name=_to_name(_first(row, "group_name", "groupName")),
            subgroup_name=_to_name(
                _first(row, "subgroup_name", "subgroup", "subgroupName")
            ),
            current_level=_to_float(_first(row, "current_level", "currentLevel")),
            min_level=_to_float(_first(row, "min_level", "minLevel")),
            safe_level=_to_float(
                _first(row, "safe_level", "safeLevel", "capacity")
            ),
            days_to_min_level=_to_float(
                _first(row, "days_to_min_level", "daysToMinLevel")
            ),
            rolling_average_use=_to_float(
                _first(
                    row,
                    "rolling_avg_lpd",
                    "rolling_avg",
                    "rolling_average_use",
                    "rollingAverageUse",
                )
            ),
            previous_day_used=_to_float(
                _first(row, "prev_day_used", "previous_day_used", "previousDayUsed")
            ),
            product_type=_to_name(_first(row, "product_type", "productType")),
            last_dip_timestamp=_to_datetime(
                _first(
                    row,
                    "last_dip_ts",
                    "last_dip_date",
                    "last_dip_timestamp",
                    "lastDipTimestamp",
                )
            ),
            last_dip_by=_to_name(_first(row, "last_dip_by", "lastDipBy")),
            serviced_on=_to_date(_first(row, "serviced_on", "servicedOn")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location,
            "group_name": self.group_name,
            "subgroup_name": self.subgroup_name,
            "product_type": self.product_type,
            "current_level": self.current_level,
            "min_level": self.min_level,
            "safe_level": self.safe_level,
            "days_to_min_level": self.days_to_min_level,
            "rolling_average_use": self.rolling_average_use,
            "previous_day_used": self.previous_day_used,
            "last_dip_timestamp": self.last_dip_timestamp.isoformat() if self.last_dip_timestamp else None,
            "last_dip_by": self.last_dip_by,
            "serviced_on": self.serviced_on.isoformat() if self.serviced_on else None,
        }


@dataclass(frozen=True)
class ClassifiedTank:
    """A TankRecord together with the values derived from it on this pass."""
    record: TankRecord
    fill_percent: Optional[int]  # Percent above minimum, None = unknown
    status: StatusLevel
    ullage: Optional[float] = None
    dip_is_stale: bool = False
    serviced_today: bool = False

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def location(self) -> str:
        return self.record.location

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data.update({
            "fill_percent": self.fill_percent,
            "status": self.status.value,
            "ullage": round(self.ullage, 1) if self.ullage is not None else None,
            "dip_is_stale": self.dip_is_stale,
            "serviced_today": self.serviced_today,
        })
        return data


@dataclass(frozen=True)
class GroupSummary:
    """Rolled-up status and counts for a group or subgroup"""
    status: GroupStatus = GroupStatus.NORMAL
    critical_count: int = 0
    low_count: int = 0
    total_tanks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "critical_count": self.critical_count,
            "low_count": self.low_count,
            "total_tanks": self.total_tanks,
        }


@dataclass
class Subgroup:
    name: str
    tanks: List[ClassifiedTank] = field(default_factory=list)
    summary: GroupSummary = field(default_factory=GroupSummary)

    @property
    def status(self) -> GroupStatus:
        return self.summary.status

    @property
    def critical_count(self) -> int:
        return self.summary.critical_count

    @property
    def low_count(self) -> int:
        return self.summary.low_count

    @property
    def total_tanks(self) -> int:
        return self.summary.total_tanks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            **self.summary.to_dict(),
            "tanks": [tank.to_dict() for tank in self.tanks],
        }


@dataclass
class Group:
    """
    Top-level bucket on the board.

    `tanks` holds the direct (no subgroup) tanks; after flattening it holds
    every tank of the group and `subgroups` is empty.
    """
    name: str
    tanks: List[ClassifiedTank] = field(default_factory=list)
    subgroups: List[Subgroup] = field(default_factory=list)
    show_subgroups_as_nested: bool = False
    summary: GroupSummary = field(default_factory=GroupSummary)

    @property
    def status(self) -> GroupStatus:
        return self.summary.status

    @property
    def critical_count(self) -> int:
        return self.summary.critical_count

    @property
    def low_count(self) -> int:
        return self.summary.low_count

    @property
    def total_tanks(self) -> int:
        return self.summary.total_tanks

    @property
    def tank_count(self) -> int:
        """Direct tanks plus every subgroup tank, independent of the summary."""
        return len(self.tanks) + sum(len(sg.tanks) for sg in self.subgroups)

    def all_tanks(self) -> Iterator[ClassifiedTank]:
        yield from self.tanks
        for subgroup in self.subgroups:
            yield from subgroup.tanks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "show_subgroups_as_nested": self.show_subgroups_as_nested,
            **self.summary.to_dict(),
            "tanks": [tank.to_dict() for tank in self.tanks],
            "subgroups": [sg.to_dict() for sg in self.subgroups],
        }


@dataclass
class FleetSummary:
    """Counts across the whole board"""
    total_tanks: int = 0
    critical: int = 0
    low: int = 0
    normal: int = 0
    unknown: int = 0
    serviced_today: int = 0
    stale_dips: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tanks": self.total_tanks,
            "critical": self.critical,
            "low": self.low,
            "normal": self.normal,
            "unknown": self.unknown,
            "serviced_today": self.serviced_today,
            "stale_dips": self.stale_dips,
        }


@dataclass
class TankBoard:
    """
    Complete board response.
    This is the single structure the rendering surface consumes.
    """
    generated_at: str
    groups: List[Group] = field(default_factory=list)
    summary: FleetSummary = field(default_factory=FleetSummary)
    sort_field: str = "location"
    sort_direction: SortDirection = SortDirection.ASC
    version: str = "1.2.0"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response"""
        return {
            "generated_at": self.generated_at,
            "version": self.version,
            "sort": {
                "field": self.sort_field,
                "direction": self.sort_direction.value,
            },
            "summary": self.summary.to_dict(),
            "groups": [group.to_dict() for group in self.groups],
        }
