"""
Tank Repository - Read-only access to the tanks view

Reads one row per tank (group names already joined, forecast already
computed by the view) and hands back TankRecords. Updates (dips, serviced
flags) are made elsewhere.
"""

import logging
from typing import Any, Dict, List, Optional, Set

import pymysql
from pymysql import cursors

from tankboard.models.tank_models import TankRecord

logger = logging.getLogger(__name__)


# Views this repository is allowed to read from
ALLOWED_TANK_VIEWS: Set[str] = {
    "tanks_with_rolling_avg",
    "fuel_tanks_status",
}

TANK_COLUMNS = """
    id,
    location,
    product_type,
    group_name,
    subgroup,
    current_level,
    min_level,
    safe_level,
    days_to_min_level,
    rolling_avg_lpd,
    prev_day_used,
    last_dip_ts,
    last_dip_by,
    serviced_on
"""


class TankRepository:
    """Repository for tank data access operations."""

    def __init__(self, db_config: Dict[str, Any], view: str = "tanks_with_rolling_avg"):
        if view not in ALLOWED_TANK_VIEWS:
            raise ValueError(f"View not allowed: {view}")

        self.db_config = db_config
        self.view = view
        logger.info(
            f"TankRepository initialized for DB: {db_config.get('database')} ({view})"
        )

    def _get_connection(self):
        """Get database connection."""
        return pymysql.connect(**self.db_config, cursorclass=cursors.DictCursor)

    def _fetch(self, where: str = "", params: tuple = ()) -> List[Dict[str, Any]]:
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute(
                    f"SELECT {TANK_COLUMNS} FROM {self.view} {where} ORDER BY location",
                    params,
                )
                return list(cursor.fetchall())
        finally:
            conn.close()

    def _to_records(self, rows: List[Dict[str, Any]]) -> List[TankRecord]:
        """Map rows to records, skipping rows the view returned without an id."""
        records = []
        for row in rows:
            try:
                records.append(TankRecord.from_row(row))
            except ValueError as e:
                logger.warning(f"Skipping row from {self.view}: {e} (location={row.get('location')})")
        return records

    def get_all_tanks(self) -> List[TankRecord]:
        """Get every tank on the board."""
        try:
            rows = self._fetch()
        except pymysql.MySQLError as e:
            logger.error(f"Error fetching tanks from {self.view}: {e}", exc_info=True)
            raise

        logger.debug(f"Fetched {len(rows)} tanks")
        return self._to_records(rows)

    def get_tanks_by_group(self, group_name: str) -> List[TankRecord]:
        """Get the tanks of one group."""
        try:
            rows = self._fetch("WHERE group_name = %s", (group_name,))
        except pymysql.MySQLError as e:
            logger.error(f"Error fetching tanks for group {group_name}: {e}", exc_info=True)
            raise

        return self._to_records(rows)

    def get_tank_by_id(self, tank_id: str) -> Optional[TankRecord]:
        """Get a single tank by ID."""
        try:
            rows = self._fetch("WHERE id = %s", (tank_id,))
        except pymysql.MySQLError as e:
            logger.error(f"Error fetching tank {tank_id}: {e}", exc_info=True)
            raise

        records = self._to_records(rows)
        if not records:
            logger.warning(f"Tank not found: {tank_id}")
            return None
        return records[0]
