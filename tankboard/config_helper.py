"""
Configuration helper for the service layer

Bridges settings.py with the repository/service/orchestrator classes.

Usage:
    from tankboard.config_helper import setup_architecture

    repos, services, orchestrator = setup_architecture()
    board = orchestrator.load_board()
"""

from typing import Any, Dict, Optional

from settings import Settings, get_settings


def get_db_config(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Get MySQL connection config in format expected by repositories.

    Returns:
        Dict with keys: host, port, user, password, database, charset,
        connect_timeout
    """
    settings = settings or get_settings()
    return settings.database.get_connection_dict()


def create_repositories(
    db_config: Optional[Dict[str, Any]] = None, settings: Optional[Settings] = None
):
    """
    Returns:
        Dict with repository instances: {'tank': TankRepository}
    """
    from tankboard.repositories import TankRepository

    settings = settings or get_settings()
    if db_config is None:
        db_config = get_db_config(settings)

    return {
        "tank": TankRepository(db_config, view=settings.database.tanks_view),
    }


def create_services(settings: Optional[Settings] = None):
    """
    Create all service instances from the current settings.

    Returns:
        Dict with service instances:
        {
            'classifier': StatusClassifier,
            'grouping': GroupingEngine,
            'display_policy': SubgroupDisplayPolicy,
            'aggregator': GroupAggregator,
            'sort': SortEngine,
        }
    """
    from tankboard.services import (
        GroupAggregator,
        GroupingEngine,
        SortEngine,
        StatusClassifier,
        SubgroupDisplayPolicy,
    )

    settings = settings or get_settings()
    classifier = StatusClassifier(settings.classification)

    return {
        "classifier": classifier,
        "grouping": GroupingEngine(settings.grouping),
        "display_policy": SubgroupDisplayPolicy(
            settings.display_policy, settings.grouping
        ),
        "aggregator": GroupAggregator(classifier),
        "sort": SortEngine(),
    }


def create_orchestrator(
    services: Dict[str, Any], repositories: Optional[Dict[str, Any]] = None
):
    """
    Create TankBoardOrchestrator with all dependencies.

    Repositories are optional: without them the orchestrator can still build
    boards from records handed in by the caller.
    """
    from tankboard.orchestrators import TankBoardOrchestrator

    return TankBoardOrchestrator(
        classifier=services["classifier"],
        grouping_engine=services["grouping"],
        display_policy=services["display_policy"],
        aggregator=services["aggregator"],
        sort_engine=services["sort"],
        tank_repo=(repositories or {}).get("tank"),
    )


def setup_architecture(settings: Optional[Settings] = None):
    """
    One-liner to set up entire architecture.

    Returns:
        Tuple of (repositories, services, orchestrator)
    """
    settings = settings or get_settings()
    repositories = create_repositories(settings=settings)
    services = create_services(settings)
    orchestrator = create_orchestrator(services, repositories)

    return repositories, services, orchestrator
