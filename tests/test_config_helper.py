"""
Tests for config_helper wiring and the serviced display filter

Run with: pytest tests/test_config_helper.py -v
"""

from datetime import date
from unittest.mock import patch

from settings import get_settings
from tankboard.config_helper import (
    create_orchestrator,
    create_repositories,
    create_services,
    get_db_config,
    setup_architecture,
)
from tankboard.orchestrators import TankBoardOrchestrator
from tankboard.repositories import TankRepository
from tankboard.services.display_filter import hide_serviced, never_serviced, serviced_on
from tests.fixtures.tank_fixtures import make_record


class TestConfigHelper:
    """Factory functions"""

    def test_db_config_keys(self):
        config = get_db_config()
        assert {"host", "port", "user", "password", "database", "charset"} <= set(config)

    def test_create_services_share_classifier(self):
        services = create_services()
        assert services["aggregator"].classifier is services["classifier"]
        assert services["classifier"].config == get_settings().classification

    def test_create_repositories(self, db_config):
        repos = create_repositories(db_config)
        assert isinstance(repos["tank"], TankRepository)
        assert repos["tank"].view == get_settings().database.tanks_view

    def test_orchestrator_without_repositories(self):
        orchestrator = create_orchestrator(create_services())
        assert isinstance(orchestrator, TankBoardOrchestrator)
        assert orchestrator.tank_repo is None

    def test_setup_architecture_does_not_connect(self):
        with patch("tankboard.repositories.tank_repository.pymysql.connect") as mock_connect:
            repos, services, orchestrator = setup_architecture()

        mock_connect.assert_not_called()
        assert orchestrator.tank_repo is repos["tank"]
        assert orchestrator.sort_engine is services["sort"]


class TestServicedFilter:
    """serviced_on / hide_serviced"""

    def test_serviced_on_matches_day(self):
        is_serviced = serviced_on(date(2026, 10, 18))
        assert is_serviced(make_record(serviced_on=date(2026, 10, 18))) is True
        assert is_serviced(make_record(serviced_on=date(2026, 10, 17))) is False
        assert is_serviced(make_record(serviced_on=None)) is False

    def test_never_serviced(self):
        assert never_serviced(make_record(serviced_on=date(2026, 10, 18))) is False

    def test_hide_serviced(self, tank_factory):
        kept = tank_factory(serviced_on=None)
        done = tank_factory(serviced_on=date(2026, 10, 18))

        assert hide_serviced([kept, done], serviced_on(date(2026, 10, 18))) == [kept]
        assert hide_serviced([kept, done]) == [kept, done]
