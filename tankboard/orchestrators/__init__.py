"""Orchestrator layer for coordinating services and repositories."""

from .tank_board_orchestrator import OrchestratorConfig, TankBoardOrchestrator

__all__ = [
    "OrchestratorConfig",
    "TankBoardOrchestrator",
]
