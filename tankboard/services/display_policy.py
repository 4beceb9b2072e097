"""
Subgroup Display Policy

Decides per group whether subgroups stay as nested sections or are folded
into the group's own tank list. First matching rule wins:

    1. name contains an always-nest substring ("kalgoorlie")   -> nested
    2. more than 20 tanks AND more than 1 subgroup              -> nested
    3. any subgroup with more than 10 tanks                     -> nested
    4. name contains a nest substring ("gsf")                   -> nested
    5. any subgroup not named after the no-subgroup sentinel    -> nested
    6. otherwise                                                -> flattened

Flattening is structural: the returned group has no subgroups left, so
aggregation and sorting see the final shape.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

import structlog

from settings import DisplayPolicySettings, GroupingSettings, get_settings
from tankboard.models.tank_models import Group

logger = structlog.get_logger()


def _contains_any(name: str, substrings: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(s.lower() in lowered for s in substrings if s)


class SubgroupDisplayPolicy:
    def __init__(
        self,
        config: Optional[DisplayPolicySettings] = None,
        grouping: Optional[GroupingSettings] = None,
    ):
        self.config = config or get_settings().display_policy
        self.no_subgroup_name = (grouping or get_settings().grouping).no_subgroup_name

    def matching_rule(self, group: Group) -> Optional[int]:
        """Number of the first rule that keeps subgroups nested, or None."""
        cfg = self.config
        subgroups = group.subgroups

        if _contains_any(group.name, cfg.always_nest_substrings):
            return 1
        if (
            group.tank_count > cfg.large_group_total_tanks
            and len(subgroups) > cfg.large_group_subgroups_over
        ):
            return 2
        if any(len(sg.tanks) > cfg.large_subgroup_tanks for sg in subgroups):
            return 3
        if _contains_any(group.name, cfg.nest_substrings):
            return 4
        if any(sg.name != self.no_subgroup_name for sg in subgroups):
            return 5
        return None

    def should_nest(self, group: Group) -> bool:
        return self.matching_rule(group) is not None

    def apply(self, group: Group) -> Group:
        """Return a new Group with the nesting decision applied."""
        rule = self.matching_rule(group)

        if rule is not None:
            logger.debug("Subgroups nested", group=group.name, rule=rule)
            return replace(
                group,
                tanks=list(group.tanks),
                subgroups=[replace(sg, tanks=list(sg.tanks)) for sg in group.subgroups],
                show_subgroups_as_nested=True,
            )

        merged = list(group.tanks)
        for subgroup in group.subgroups:
            merged.extend(subgroup.tanks)

        if group.subgroups:
            logger.debug(
                "Subgroups flattened",
                group=group.name,
                subgroups=len(group.subgroups),
            )
        return replace(group, tanks=merged, subgroups=[], show_subgroups_as_nested=False)

    def apply_all(self, groups: Iterable[Group]) -> List[Group]:
        return [self.apply(group) for group in groups]
