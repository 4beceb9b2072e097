"""
Tank-related fixtures for testing
"""

from datetime import datetime, timezone

import pytest

from settings import ClassificationSettings, DisplayPolicySettings, GroupingSettings
from tankboard.models.tank_models import TankRecord
from tankboard.services.status_classifier import StatusClassifier

# Fixed reference time so staleness checks never depend on the wall clock
NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

_counter = {"n": 0}


def make_record(**overrides) -> TankRecord:
    """TankRecord with healthy defaults (50% above min, no forecast)."""
    _counter["n"] += 1
    values = {
        "id": f"tank-{_counter['n']}",
        "location": f"Site {_counter['n']}",
        "current_level": 30000.0,
        "min_level": 10000.0,
        "safe_level": 50000.0,
    }
    values.update(overrides)
    return TankRecord(**values)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def classification_settings():
    return ClassificationSettings(
        critical_percent=10.0,
        low_percent=20.0,
        critical_days=1.5,
        low_days=2.5,
        dip_stale_days=4.0,
    )


@pytest.fixture
def grouping_settings():
    return GroupingSettings(
        pinned_group="Swan Transit",
        ungrouped_name="Other",
        no_subgroup_name="No Subgroup",
    )


@pytest.fixture
def display_settings():
    return DisplayPolicySettings(
        always_nest_substrings=["kalgoorlie"],
        large_group_total_tanks=20,
        large_group_subgroups_over=1,
        large_subgroup_tanks=10,
        nest_substrings=["gsf"],
    )


@pytest.fixture
def classifier(classification_settings):
    return StatusClassifier(classification_settings)


@pytest.fixture
def tank_factory(classifier):
    """Build a ClassifiedTank from record overrides"""

    def _make(**overrides):
        return classifier.classify_tank(make_record(**overrides), now=NOW)

    return _make


@pytest.fixture
def sample_fleet():
    """Small mixed fleet across groups, subgroups and statuses"""
    return [
        # critical by percent: (15-10)/(60-10) = 10%
        make_record(
            id="t1", location="Bunbury", group_name="Swan Transit",
            current_level=15.0, min_level=10.0, safe_level=60.0,
        ),
        # critical by days despite 50%
        make_record(
            id="t2", location="alkimos", group_name="Swan Transit",
            subgroup_name="North", days_to_min_level=1.2,
        ),
        # low by percent: 15%
        make_record(
            id="t3", location="Coogee", group_name="BGC",
            current_level=16000.0, days_to_min_level=9.0,
        ),
        # normal
        make_record(id="t4", location="Dardanup", group_name="BGC"),
        # unknown: no levels, no forecast
        make_record(
            id="t5", location="Esperance", group_name="Kalgoorlie",
            subgroup_name="Mine Site", current_level=None,
        ),
        # ungrouped, normal
        make_record(id="t6", location="Forrestfield"),
    ]
