"""
Status Classifier Service

Turns a tank's percent-above-minimum and its days-to-minimum forecast into a
single urgency level. The two signals are independent: either one crossing a
threshold is enough.

    critical  percent <= 10  OR  days <= 1.5
    low       percent <= 20  OR  days <= 2.5
    normal    otherwise
    unknown   no percent AND no days

Thresholds come from ClassificationSettings; the numbers above are the
defaults.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from settings import ClassificationSettings, get_settings
from tankboard.models.tank_models import ClassifiedTank, StatusLevel, TankRecord
from tankboard.services.tank_normalizer import (
    fill_percent_above_min,
    is_dip_stale,
    is_number,
    ullage,
)

logger = structlog.get_logger()


class StatusClassifier:
    """
    Pure, total classifier over (percent, days).

    Example Usage:
        classifier = StatusClassifier()
        classifier.classify(50, 1.2)   # StatusLevel.CRITICAL
        classifier.classify(None, None)  # StatusLevel.UNKNOWN
    """

    def __init__(self, config: Optional[ClassificationSettings] = None):
        self.config = config or get_settings().classification
        self.dip_max_age = timedelta(days=self.config.dip_stale_days)

        logger.debug(
            "StatusClassifier initialized",
            critical_percent=self.config.critical_percent,
            low_percent=self.config.low_percent,
            critical_days=self.config.critical_days,
            low_days=self.config.low_days,
        )

    def classify(self, percent: Optional[float], days: Optional[float]) -> StatusLevel:
        has_percent = is_number(percent)
        has_days = is_number(days, finite=False)

        if not has_percent and not has_days:
            return StatusLevel.UNKNOWN

        if (has_percent and percent <= self.config.critical_percent) or (
            has_days and days <= self.config.critical_days
        ):
            return StatusLevel.CRITICAL

        if (has_percent and percent <= self.config.low_percent) or (
            has_days and days <= self.config.low_days
        ):
            return StatusLevel.LOW

        return StatusLevel.NORMAL

    def classify_record(self, record: TankRecord) -> StatusLevel:
        """Normalize then classify; recomputed on every call."""
        return self.classify(fill_percent_above_min(record), record.days_to_min_level)

    def classify_tank(
        self,
        record: TankRecord,
        now: Optional[datetime] = None,
        serviced_today: bool = False,
    ) -> ClassifiedTank:
        """
        Build the ClassifiedTank carried through grouping and sorting.

        Args:
            record: Tank reading
            now: Reference time for dip staleness (defaults to current UTC)
            serviced_today: Result of the caller's serviced predicate

        Returns:
            ClassifiedTank with percent, status, ullage and staleness
        """
        if now is None:
            now = datetime.now(timezone.utc)

        percent = fill_percent_above_min(record)
        return ClassifiedTank(
            record=record,
            fill_percent=percent,
            status=self.classify(percent, record.days_to_min_level),
            ullage=ullage(record),
            dip_is_stale=is_dip_stale(record, now, self.dip_max_age),
            serviced_today=serviced_today,
        )
