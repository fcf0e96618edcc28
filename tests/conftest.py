"""
Pytest configuration and fixtures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from problems.config import Settings
from problems.storage.repository import ProblemRepository


def make_cursor(documents):
    """Chainable cursor double: find(...).sort(...).skip(...).limit(...).to_list()"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(documents))
    return cursor


@pytest.fixture
def test_settings():
    """Settings with telemetry and index creation disabled"""
    return Settings(
        otel_enabled=False,
        create_indexes=False,
        analytics_max_records=10000,
        max_page_size=100,
        log_level="WARNING",
    )


@pytest.fixture
def mock_collection():
    """Mock async MongoDB collection"""
    collection = MagicMock()
    collection.find.return_value = make_cursor([])
    collection.count_documents = AsyncMock(return_value=0)
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.distinct = AsyncMock(return_value=[])
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def repository(mock_collection):
    return ProblemRepository(mock_collection)


@pytest.fixture
def scenario_problems():
    """Three problems: open/available/4m, closed/error/45m with a GH Actions success, closed/perf/200m"""
    return [
        {
            "problemId": "P-1",
            "status": "OPEN",
            "impactLevel": "APPLICATION",
            "severityLevel": "AVAILABILITY",
            "startTime": "2024-01-07T08:15:00Z",
            "duration": 4,
            "rootCauseEntity": {"name": "checkout-service"},
            "managementZones": [{"name": "Production"}],
            "affectedEntities": [
                {"name": "checkout-service", "entityId": {"id": "SERVICE-1", "type": "SERVICE"}},
            ],
            "evidenceDetails": {"details": [{"evidenceType": "EVENT", "eventType": "AVAILABILITY_EVENT"}]},
            "recentComments": {"totalCount": 0, "comments": []},
        },
        {
            "problemId": "P-2",
            "status": "CLOSED",
            "impactLevel": "SERVICE",
            "severityLevel": "ERROR",
            "startTime": "2024-01-10T23:59:00Z",
            "duration": 45,
            "rootCauseEntity": None,
            "managementZones": [{"name": "Production"}, {"name": "Payments"}],
            "affectedEntities": [
                {"name": "checkout-service", "entityId": {"id": "SERVICE-1", "type": "SERVICE"}},
                {"name": "payments-db", "entityId": {"id": "DB-1", "type": "DATABASE"}},
            ],
            "evidenceDetails": {"details": [{"evidenceType": "METRIC"}]},
            "recentComments": {
                "totalCount": 1,
                "comments": [{"content": "GitHub Actions deployment success", "author": "ops-bot"}],
            },
        },
        {
            "problemId": "P-3",
            "status": "CLOSED",
            "impactLevel": "SERVICE",
            "severityLevel": "PERFORMANCE",
            "startTime": "2024-02-03T12:00:00Z",
            "duration": 200,
            "managementZones": [{"name": "Staging"}],
            "affectedEntities": [],
            "evidenceDetails": {"details": []},
            "recentComments": {"totalCount": 0, "comments": []},
        },
    ]
