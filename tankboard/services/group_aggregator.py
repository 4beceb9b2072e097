"""
Group Aggregator Service

Rolls tank classifications up to group and subgroup level.

Each tank is re-classified from its record rather than trusting the status
it was carried with, so a summary can never drift from the current
thresholds. Unknown tanks count toward total_tanks only.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

import structlog

from tankboard.models.tank_models import (
    ClassifiedTank,
    Group,
    GroupStatus,
    GroupSummary,
    StatusLevel,
)
from tankboard.services.status_classifier import StatusClassifier

logger = structlog.get_logger()


class GroupAggregator:
    def __init__(self, classifier: Optional[StatusClassifier] = None):
        self.classifier = classifier or StatusClassifier()

    def summarize(self, tanks: Iterable[ClassifiedTank]) -> GroupSummary:
        critical = low = total = 0

        for tank in tanks:
            total += 1
            status = self.classifier.classify_record(tank.record)
            if status == StatusLevel.CRITICAL:
                critical += 1
            elif status == StatusLevel.LOW:
                low += 1

        if critical:
            status = GroupStatus.CRITICAL
        elif low:
            status = GroupStatus.WARNING
        else:
            status = GroupStatus.NORMAL

        return GroupSummary(
            status=status, critical_count=critical, low_count=low, total_tanks=total
        )

    def aggregate_group(self, group: Group) -> Group:
        """
        Return a new Group with its own summary and one per subgroup.

        The group summary spans direct tanks and every subgroup tank, so it is
        the same whether or not the group was flattened.
        """
        subgroups = [
            replace(sg, summary=self.summarize(sg.tanks)) for sg in group.subgroups
        ]
        return replace(
            group,
            subgroups=subgroups,
            summary=self.summarize(group.all_tanks()),
        )

    def aggregate_all(self, groups: Iterable[Group]) -> List[Group]:
        aggregated = [self.aggregate_group(group) for group in groups]
        logger.debug(
            "Groups aggregated",
            groups=len(aggregated),
            critical_groups=sum(1 for g in aggregated if g.status == GroupStatus.CRITICAL),
        )
        return aggregated
