"""
Tank Normalizer

Fill level as a percentage of usable capacity: the range between a tank's
minimum operating level and its safe fill level. A tank sitting exactly at
its minimum reads 0%, never the leftover fraction of the safe level.

Raw current/safe percentages are not computed anywhere in this package.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from tankboard.models.tank_models import TankRecord


def is_number(value: Any, finite: bool = True) -> bool:
    """Real int or float (bools excluded). NaN never counts; infinity only when finite=False."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) if finite else not math.isnan(value)


def percent_above_min(
    current_level: Any, min_level: Any, safe_level: Any
) -> Optional[int]:
    """
    (current - min) / (safe - min) * 100, floored at 0 and capped at 100.

    Returns None when any operand is missing or non-numeric, or when the
    usable range is not positive. Halves round up.

    Examples:
        >>> percent_above_min(15, 10, 60)
        10
        >>> percent_above_min(5, 10, 60)
        0
        >>> percent_above_min(50, 10, 10) is None
        True
    """
    if not (is_number(current_level) and is_number(min_level) and is_number(safe_level)):
        return None

    usable = safe_level - min_level
    if usable <= 0:
        return None

    raw = (current_level - min_level) / usable * 100
    return int(min(100, max(0, math.floor(raw + 0.5))))


def fill_percent_above_min(record: TankRecord) -> Optional[int]:
    """Percent above minimum for a tank record (None = unknown)."""
    return percent_above_min(record.current_level, record.min_level, record.safe_level)


def ullage(record: TankRecord) -> Optional[float]:
    """Unused volume up to the safe level. Informational only."""
    if not (is_number(record.safe_level) and is_number(record.current_level)):
        return None
    return record.safe_level - record.current_level


def is_dip_stale(
    record: TankRecord, now: datetime, max_age: timedelta = timedelta(days=4)
) -> bool:
    """
    True when the last dip is older than max_age.

    Tanks that were never dipped are not flagged. Naive timestamps are
    compared as UTC against an aware `now` (and vice versa).
    """
    last_dip = record.last_dip_timestamp
    if last_dip is None:
        return False

    if (last_dip.tzinfo is None) != (now.tzinfo is None):
        if last_dip.tzinfo is None:
            last_dip = last_dip.replace(tzinfo=timezone.utc)
        else:
            now = now.replace(tzinfo=timezone.utc)

    return (now - last_dip) > max_age
