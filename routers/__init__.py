"""
API routers.

    tank_board_router   /tankboard/api/board, /classify, /policy
"""

from .tank_board_router import router as tank_board_router

__all__ = [
    "tank_board_router",
]
