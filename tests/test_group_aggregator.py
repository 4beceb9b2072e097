"""
Tests for GroupAggregator
Group / subgroup status roll-up

Run with: pytest tests/test_group_aggregator.py -v
"""

from dataclasses import replace

import pytest

from tankboard.models.tank_models import Group, GroupStatus, StatusLevel, Subgroup
from tankboard.services.display_policy import SubgroupDisplayPolicy
from tankboard.services.group_aggregator import GroupAggregator


@pytest.fixture
def aggregator(classifier):
    return GroupAggregator(classifier)


class TestSummarize:
    """Counts and status for a tank list"""

    def test_empty_is_normal(self, aggregator):
        summary = aggregator.summarize([])
        assert summary.status == GroupStatus.NORMAL
        assert (summary.critical_count, summary.low_count, summary.total_tanks) == (0, 0, 0)

    def test_critical_wins(self, aggregator, tank_factory):
        tanks = [
            tank_factory(days_to_min_level=1.0),
            tank_factory(days_to_min_level=2.0),
            tank_factory(),
        ]
        summary = aggregator.summarize(tanks)
        assert summary.status == GroupStatus.CRITICAL
        assert summary.critical_count == 1
        assert summary.low_count == 1
        assert summary.total_tanks == 3

    def test_low_only_is_warning(self, aggregator, tank_factory):
        summary = aggregator.summarize([tank_factory(days_to_min_level=2.0), tank_factory()])
        assert summary.status == GroupStatus.WARNING

    def test_unknown_counts_toward_total_only(self, aggregator, tank_factory):
        summary = aggregator.summarize([tank_factory(current_level=None), tank_factory()])
        assert summary.status == GroupStatus.NORMAL
        assert summary.critical_count == 0
        assert summary.low_count == 0
        assert summary.total_tanks == 2

    def test_status_recomputed_from_record(self, aggregator, tank_factory):
        """A carried status that no longer matches the record is ignored"""
        tank = replace(tank_factory(), status=StatusLevel.CRITICAL)
        summary = aggregator.summarize([tank])
        assert summary.critical_count == 0
        assert summary.status == GroupStatus.NORMAL


class TestAggregateGroup:
    """Summaries attached to groups and subgroups"""

    def _nested_group(self, tank_factory):
        return Group(
            name="BGC",
            tanks=[tank_factory(group_name="BGC", days_to_min_level=2.0)],
            subgroups=[
                Subgroup(
                    name="North",
                    tanks=[
                        tank_factory(group_name="BGC", subgroup_name="North"),
                        tank_factory(
                            group_name="BGC", subgroup_name="North", days_to_min_level=0.8
                        ),
                    ],
                ),
                Subgroup(
                    name="South",
                    tanks=[tank_factory(group_name="BGC", subgroup_name="South")],
                ),
            ],
        )

    def test_subgroup_and_group_summaries(self, aggregator, tank_factory):
        group = aggregator.aggregate_group(self._nested_group(tank_factory))

        north, south = group.subgroups
        assert north.status == GroupStatus.CRITICAL
        assert north.critical_count == 1
        assert north.total_tanks == 2
        assert south.status == GroupStatus.NORMAL

        assert group.status == GroupStatus.CRITICAL
        assert group.critical_count == 1
        assert group.low_count == 1
        assert group.total_tanks == 4

    def test_same_summary_nested_or_flattened(self, aggregator, tank_factory):
        group = self._nested_group(tank_factory)
        flattened = Group(name=group.name, tanks=list(group.all_tanks()))

        nested_summary = aggregator.aggregate_group(group).summary
        flat_summary = aggregator.aggregate_group(flattened).summary
        assert nested_summary == flat_summary

    def test_input_not_mutated(self, aggregator, tank_factory):
        group = self._nested_group(tank_factory)
        aggregator.aggregate_group(group)
        assert group.total_tanks == 0
        assert group.subgroups[0].total_tanks == 0

    def test_aggregate_all(self, aggregator, tank_factory):
        groups = [
            Group(name="A", tanks=[tank_factory(days_to_min_level=1.0)]),
            Group(name="B", tanks=[tank_factory()]),
        ]
        result = aggregator.aggregate_all(groups)
        assert [g.status for g in result] == [GroupStatus.CRITICAL, GroupStatus.NORMAL]

    def test_after_display_policy(self, aggregator, tank_factory, display_settings, grouping_settings):
        policy = SubgroupDisplayPolicy(display_settings, grouping_settings)
        group = Group(
            name="BGC",
            tanks=[tank_factory(group_name="BGC")],
            subgroups=[
                Subgroup(
                    name="No Subgroup",
                    tanks=[tank_factory(group_name="BGC", days_to_min_level=2.0)],
                )
            ],
        )
        result = aggregator.aggregate_group(policy.apply(group))

        assert result.subgroups == []
        assert result.total_tanks == 2
        assert result.status == GroupStatus.WARNING
