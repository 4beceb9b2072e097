"""Repository layer for data access."""

from .tank_repository import TankRepository

__all__ = [
    "TankRepository",
]
