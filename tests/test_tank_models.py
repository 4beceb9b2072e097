"""
Tests for tank board models
Row parsing and serialization

Run with: pytest tests/test_tank_models.py -v
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from tankboard.models.tank_models import (
    FleetSummary,
    Group,
    GroupStatus,
    GroupSummary,
    StatusLevel,
    Subgroup,
    TankRecord,
)


class TestStatusLevel:
    """Severity ordering"""

    def test_severity_order(self):
        assert (
            StatusLevel.CRITICAL.severity
            > StatusLevel.LOW.severity
            > StatusLevel.NORMAL.severity
            > StatusLevel.UNKNOWN.severity
        )

    def test_string_values(self):
        assert StatusLevel("critical") is StatusLevel.CRITICAL
        assert GroupStatus.WARNING.value == "warning"


class TestTankRecordFromRow:
    """View rows and API payloads"""

    def test_view_row(self, sample_tank_row):
        record = TankRecord.from_row(sample_tank_row)

        assert record.id == "a1b2c3"
        assert record.location == "Midland Depot"
        assert record.subgroup_name == "Midland"
        assert record.min_level == 5000.0
        assert record.safe_level == 55000.0
        assert record.days_to_min_level == 4.2
        assert record.previous_day_used == 1650.0
        assert record.last_dip_by == "jsmith"
        assert record.serviced_on is None

    def test_camel_case_keys(self):
        record = TankRecord.from_row({
            "id": 42,
            "location": "Welshpool",
            "groupName": "BGC",
            "subgroupName": "Metro",
            "currentLevel": "1200.5",
            "minLevel": 200,
            "safeLevel": 5000,
            "daysToMinLevel": 3,
            "lastDipTimestamp": "2026-10-17T22:15:00+08:00",
            "servicedOn": "2026-10-18",
        })

        assert record.id == "42"
        assert record.group_name == "BGC"
        assert record.subgroup_name == "Metro"
        assert record.current_level == 1200.5
        assert record.days_to_min_level == 3.0
        assert record.last_dip_timestamp.utcoffset().total_seconds() == 8 * 3600
        assert record.serviced_on == date(2026, 10, 18)

    def test_decimal_values(self):
        record = TankRecord.from_row({
            "id": "d1",
            "location": "x",
            "current_level": Decimal("1500.25"),
        })
        assert record.current_level == 1500.25

    def test_non_numeric_levels_become_none(self):
        record = TankRecord.from_row({
            "id": "n1",
            "location": "x",
            "current_level": "n/a",
            "min_level": True,
            "safe_level": float("nan"),
            "days_to_min_level": "",
        })
        assert record.current_level is None
        assert record.min_level is None
        assert record.safe_level is None
        assert record.days_to_min_level is None

    def test_blank_group_names_become_none(self):
        record = TankRecord.from_row({
            "id": "b1", "location": "x", "group_name": "  ", "subgroup": "",
        })
        assert record.group_name is None
        assert record.subgroup_name is None

    def test_capacity_used_as_safe_level(self):
        record = TankRecord.from_row({"id": "c1", "location": "x", "capacity": 60000})
        assert record.safe_level == 60000.0

    def test_dip_date_and_datetime_values(self):
        dipped = datetime(2026, 10, 16, 7, 0, tzinfo=timezone.utc)
        record = TankRecord.from_row({
            "id": "t", "location": "x",
            "last_dip_ts": dipped,
            "serviced_on": datetime(2026, 10, 18, 11, 0),
        })
        assert record.last_dip_timestamp == dipped
        assert record.serviced_on == date(2026, 10, 18)

    def test_unparseable_timestamp(self):
        record = TankRecord.from_row({"id": "t", "location": "x", "last_dip_ts": "yesterday"})
        assert record.last_dip_timestamp is None

    @pytest.mark.parametrize("row", [{"location": "x"}, {"id": None}, {"id": "  "}, {"tank_id": ""}])
    def test_missing_id_rejected(self, row):
        with pytest.raises(ValueError, match="no id"):
            TankRecord.from_row(row)

    def test_tank_id_alias(self):
        assert TankRecord.from_row({"tank_id": 7, "location": "x"}).id == "7"

    def test_to_dict(self, sample_tank_row):
        data = TankRecord.from_row(sample_tank_row).to_dict()
        assert data["last_dip_timestamp"] == "2026-10-15T06:30:00+00:00"
        assert data["serviced_on"] is None
        assert data["subgroup_name"] == "Midland"


class TestGroupModels:
    """Group helpers and serialization"""

    def test_tank_count_and_all_tanks(self, tank_factory):
        direct = tank_factory()
        nested = tank_factory(subgroup_name="North")
        group = Group(name="BGC", tanks=[direct], subgroups=[Subgroup(name="North", tanks=[nested])])

        assert group.tank_count == 2
        assert list(group.all_tanks()) == [direct, nested]

    def test_summary_properties(self):
        summary = GroupSummary(
            status=GroupStatus.WARNING, critical_count=0, low_count=2, total_tanks=5
        )
        group = Group(name="BGC", summary=summary)
        assert group.status == GroupStatus.WARNING
        assert group.low_count == 2
        assert group.total_tanks == 5

    def test_group_to_dict(self, tank_factory):
        group = Group(
            name="BGC",
            tanks=[tank_factory(location="Coogee")],
            show_subgroups_as_nested=False,
        )
        data = group.to_dict()
        assert data["name"] == "BGC"
        assert data["status"] == "normal"
        assert data["tanks"][0]["location"] == "Coogee"
        assert data["subgroups"] == []

    def test_fleet_summary_to_dict(self):
        data = FleetSummary(total_tanks=3, critical=1, normal=2).to_dict()
        assert data == {
            "total_tanks": 3,
            "critical": 1,
            "low": 0,
            "normal": 2,
            "unknown": 0,
            "serviced_today": 0,
            "stale_dips": 0,
        }
