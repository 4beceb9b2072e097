"""
Tank Board Router - v1.2.0
Classified, grouped and sorted tank board for the dashboard

Endpoints:
- GET  /tankboard/api/board     - Board built from the tanks view
- POST /tankboard/api/board     - Board built from tanks in the request body
- POST /tankboard/api/classify  - Percent, status and flags for one tank
- GET  /tankboard/api/policy    - Thresholds currently in force
"""

import logging
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

import pymysql
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from settings import get_settings
from tankboard.config_helper import setup_architecture
from tankboard.models.tank_models import SortDirection, TankRecord
from tankboard.orchestrators import TankBoardOrchestrator
from tankboard.services.display_filter import serviced_on
from tankboard.services.sort_engine import SortConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tankboard/api", tags=["Tank Board"])

Level = Optional[Union[float, str]]


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST MODELS
# ═══════════════════════════════════════════════════════════════════════════════


class TankPayload(BaseModel):
    """One tank as sent by the dashboard - matches the tanks view columns"""

    id: str
    location: str = ""
    group_name: Optional[str] = None
    subgroup: Optional[str] = None
    product_type: Optional[str] = None

    # Strings are accepted; anything non-numeric classifies as unknown
    current_level: Level = None
    min_level: Level = None
    safe_level: Level = None
    days_to_min_level: Level = None
    rolling_avg: Level = None
    prev_day_used: Level = None

    last_dip_ts: Optional[datetime] = None
    last_dip_by: Optional[str] = None
    serviced_on: Optional[date] = None

    def to_record(self) -> TankRecord:
        return TankRecord.from_row(self.model_dump())


class BoardRequest(BaseModel):
    """Request model for building a board from supplied tanks"""

    tanks: List[TankPayload] = Field(default_factory=list)
    sort_field: str = "location"
    sort_direction: SortDirection = SortDirection.ASC
    hide_serviced: bool = False
    # Day the serviced flag is compared against (defaults to today, UTC)
    today: Optional[date] = None


# ═══════════════════════════════════════════════════════════════════════════════
# DEPENDENCIES
# ═══════════════════════════════════════════════════════════════════════════════


@lru_cache(maxsize=1)
def get_orchestrator() -> TankBoardOrchestrator:
    _, _, orchestrator = setup_architecture()
    return orchestrator


# ═══════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/board")
async def build_board(
    request: BoardRequest,
    orchestrator: TankBoardOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Build the grouped board from the tanks in the request body.

    Returns:
        Groups (pinned group first), per-group status counts and a fleet summary
    """
    now = datetime.now(timezone.utc)
    try:
        board = orchestrator.build_board(
            [tank.to_record() for tank in request.tanks],
            sort=SortConfig(request.sort_field, request.sort_direction),
            is_serviced=serviced_on(request.today or now.date()),
            hide_serviced_tanks=request.hide_serviced,
            now=now,
        )
        return board.to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error building tank board: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/board")
def get_board(
    sort_field: str = Query("location", description="Tank field to sort by"),
    sort_direction: SortDirection = Query(SortDirection.ASC),
    hide_serviced: bool = Query(False, description="Hide tanks serviced today"),
    orchestrator: TankBoardOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Build the board from the tanks view."""
    try:
        board = orchestrator.load_board(
            sort=SortConfig(sort_field, sort_direction),
            hide_serviced_tanks=hide_serviced,
        )
        return board.to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (pymysql.MySQLError, RuntimeError) as e:
        logger.warning(f"Tank board unavailable: {e}")
        raise HTTPException(status_code=503, detail="Tank data source unavailable")
    except Exception as e:
        logger.error(f"Error loading tank board: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/classify")
async def classify_tank(
    tank: TankPayload,
    orchestrator: TankBoardOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Classify a single tank."""
    try:
        record = tank.to_record()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return orchestrator.classifier.classify_tank(record).to_dict()


@router.get("/policy")
async def get_policy() -> Dict[str, Any]:
    """Thresholds and display rules currently in force."""
    settings = get_settings().to_dict()
    return {
        "classification": settings["classification"],
        "grouping": settings["grouping"],
        "display_policy": settings["display_policy"],
    }
