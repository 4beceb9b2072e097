"""
Grouping Engine Service

Partitions a flat tank list into groups and subgroups.

Tanks without a group land in "Other"; tanks without a subgroup land in the
group's direct list. Named subgroups are created on first sight and then
sorted by name. Groups are ordered with the pinned group first and the rest
by plain (case-sensitive, code point) string order.
"""

from typing import Dict, Iterable, List, Optional

import structlog

from settings import GroupingSettings, get_settings
from tankboard.models.tank_models import ClassifiedTank, Group, Subgroup

logger = structlog.get_logger()


class GroupingEngine:
    """
    Structural partition only: no classification, no display decisions.

    Every input tank ends up in exactly one leaf bucket, in input order.
    """

    def __init__(self, config: Optional[GroupingSettings] = None):
        self.config = config or get_settings().grouping

    def bucket_names(self, tank: ClassifiedTank) -> tuple:
        record = tank.record
        group = record.group_name or self.config.ungrouped_name
        subgroup = record.subgroup_name or self.config.no_subgroup_name
        return group, subgroup

    def partition(self, tanks: Iterable[ClassifiedTank]) -> List[Group]:
        groups: Dict[str, Group] = {}
        subgroups: Dict[tuple, Subgroup] = {}

        for tank in tanks:
            group_name, subgroup_name = self.bucket_names(tank)

            group = groups.get(group_name)
            if group is None:
                group = groups[group_name] = Group(name=group_name)

            if subgroup_name == self.config.no_subgroup_name:
                group.tanks.append(tank)
                continue

            key = (group_name, subgroup_name)
            subgroup = subgroups.get(key)
            if subgroup is None:
                subgroup = subgroups[key] = Subgroup(name=subgroup_name)
                group.subgroups.append(subgroup)
            subgroup.tanks.append(tank)

        for group in groups.values():
            group.subgroups.sort(key=lambda sg: sg.name)

        ordered = self.order_groups(groups.values())
        logger.debug(
            "Tanks partitioned",
            groups=len(ordered),
            subgroups=len(subgroups),
        )
        return ordered

    def order_groups(self, groups: Iterable[Group]) -> List[Group]:
        """Pinned group first, remainder by name."""
        pinned = self.config.pinned_group
        return sorted(groups, key=lambda g: (g.name != pinned, g.name))
