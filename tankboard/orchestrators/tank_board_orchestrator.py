"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                         TANK BOARD ORCHESTRATOR                                ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  Thin pipeline over the service layer:                                         ║
║    records → classify → group → nest/flatten → aggregate → sort → board        ║
║                                                                                ║
║  Every call rebuilds the whole board from the records it is given. Nothing    ║
║  is cached between calls, so callers may recompute on any refresh tick.       ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from tankboard.models.tank_models import (
    ClassifiedTank,
    FleetSummary,
    Group,
    SortDirection,
    StatusLevel,
    TankBoard,
    TankRecord,
)
from tankboard.repositories.tank_repository import TankRepository
from tankboard.services.display_filter import ServicedPredicate, hide_serviced, serviced_on
from tankboard.services.display_policy import SubgroupDisplayPolicy
from tankboard.services.group_aggregator import GroupAggregator
from tankboard.services.grouping_engine import GroupingEngine
from tankboard.services.sort_engine import SortConfig, SortEngine
from tankboard.services.status_classifier import StatusClassifier

logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Configuration for TankBoardOrchestrator."""

    default_sort_field: str = "location"
    default_sort_direction: SortDirection = SortDirection.ASC
    # Apply the serviced filter after grouping; group summaries then still
    # include serviced tanks
    filter_after_grouping: bool = False


class TankBoardOrchestrator:
    """
    Combines the tank services into the board the dashboard renders.

    Services:
    - StatusClassifier: per-tank percent and urgency
    - GroupingEngine: group / subgroup partition
    - SubgroupDisplayPolicy: nested or flattened subgroups
    - GroupAggregator: group and subgroup status counts
    - SortEngine: ordering inside each bucket

    Repositories:
    - TankRepository: read-only tank rows (only needed by load_board)
    """

    VERSION = "1.2.0"

    def __init__(
        self,
        classifier: Optional[StatusClassifier] = None,
        grouping_engine: Optional[GroupingEngine] = None,
        display_policy: Optional[SubgroupDisplayPolicy] = None,
        aggregator: Optional[GroupAggregator] = None,
        sort_engine: Optional[SortEngine] = None,
        tank_repo: Optional[TankRepository] = None,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.config = config or OrchestratorConfig()
        self.tank_repo = tank_repo

        self.classifier = classifier or StatusClassifier()
        self.grouping_engine = grouping_engine or GroupingEngine()
        self.display_policy = display_policy or SubgroupDisplayPolicy()
        self.aggregator = aggregator or GroupAggregator(self.classifier)
        self.sort_engine = sort_engine or SortEngine()

        logger.info(f"TankBoardOrchestrator v{self.VERSION} initialized")

    def classify_all(
        self,
        records: Iterable[TankRecord],
        now: datetime,
        is_serviced: Optional[ServicedPredicate] = None,
    ) -> List[ClassifiedTank]:
        return [
            self.classifier.classify_tank(
                record,
                now=now,
                serviced_today=bool(is_serviced and is_serviced(record)),
            )
            for record in records
        ]

    def build_board(
        self,
        records: Iterable[TankRecord],
        sort: Optional[SortConfig] = None,
        is_serviced: Optional[ServicedPredicate] = None,
        hide_serviced_tanks: bool = False,
        now: Optional[datetime] = None,
    ) -> TankBoard:
        """
        Build the full board from tank records.

        Args:
            records: Tank readings for this pass
            sort: Field and direction for the tanks inside each bucket
            is_serviced: Predicate marking tanks serviced today
            hide_serviced_tanks: Drop serviced tanks from the displayed set
            now: Reference time for dip staleness (defaults to current UTC)

        Returns:
            TankBoard with ordered groups and a fleet summary

        Raises:
            ValueError: unknown sort field or direction
        """
        now = now or datetime.now(timezone.utc)
        sort = sort or SortConfig(
            self.config.default_sort_field, self.config.default_sort_direction
        )
        # Fail on a bad sort field or direction before doing any work
        sort = SortConfig(sort.field, SortDirection(sort.direction))
        self.sort_engine.resolve(sort.field)

        tanks = self.classify_all(records, now, is_serviced)
        summary = self.summarize_fleet(tanks)

        hide = is_serviced if hide_serviced_tanks else None
        if not self.config.filter_after_grouping:
            tanks = hide_serviced(tanks, hide)

        groups = self.grouping_engine.partition(tanks)
        groups = self.display_policy.apply_all(groups)
        groups = self.aggregator.aggregate_all(groups)

        if self.config.filter_after_grouping and hide is not None:
            groups = [self._without_serviced(group, hide) for group in groups]

        groups = self.sort_engine.sort_groups(groups, sort)

        logger.info(
            f"Board built: {summary.total_tanks} tanks, {len(groups)} groups, "
            f"{summary.critical} critical, {summary.low} low, {summary.unknown} unknown"
        )

        return TankBoard(
            generated_at=now.isoformat(),
            groups=groups,
            summary=summary,
            sort_field=sort.field,
            sort_direction=sort.direction,
            version=self.VERSION,
        )

    def load_board(
        self,
        sort: Optional[SortConfig] = None,
        hide_serviced_tanks: bool = False,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> TankBoard:
        """Fetch tanks from the repository and build the board."""
        if self.tank_repo is None:
            raise RuntimeError("TankBoardOrchestrator has no tank repository")

        now = now or datetime.now(timezone.utc)
        records = self.tank_repo.get_all_tanks()
        return self.build_board(
            records,
            sort=sort,
            is_serviced=serviced_on(today or now.date()),
            hide_serviced_tanks=hide_serviced_tanks,
            now=now,
        )

    def summarize_fleet(self, tanks: List[ClassifiedTank]) -> FleetSummary:
        summary = FleetSummary(total_tanks=len(tanks))
        for tank in tanks:
            if tank.status == StatusLevel.CRITICAL:
                summary.critical += 1
            elif tank.status == StatusLevel.LOW:
                summary.low += 1
            elif tank.status == StatusLevel.NORMAL:
                summary.normal += 1
            else:
                summary.unknown += 1
            if tank.serviced_today:
                summary.serviced_today += 1
            if tank.dip_is_stale:
                summary.stale_dips += 1
        return summary

    @staticmethod
    def _without_serviced(group: Group, is_serviced: ServicedPredicate) -> Group:
        return replace(
            group,
            tanks=hide_serviced(group.tanks, is_serviced),
            subgroups=[
                replace(sg, tanks=hide_serviced(sg.tanks, is_serviced))
                for sg in group.subgroups
            ],
        )
