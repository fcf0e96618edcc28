"""
Tests for ProblemService and AnalyticsService
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from problems.analytics.models import Granularity
from problems.analytics.service import AnalyticsService
from problems.errors import ErrorKind, FilterValidationError, ProblemNotFoundError
from problems.models import PaginatedProblems, ProblemStatus
from problems.service import ProblemService
from problems.storage.repository import AnalyticsSnapshot


@pytest.fixture
def mock_repository():
    repository = MagicMock()
    repository.find_all = AsyncMock(return_value=PaginatedProblems())
    repository.find_by_id = AsyncMock(return_value=None)
    repository.update_status = AsyncMock(return_value=None)
    repository.add_comment = AsyncMock(return_value=None)
    repository.get_filter_options = AsyncMock()
    repository.find_for_analytics = AsyncMock(return_value=AnalyticsSnapshot())
    return repository


class TestProblemService:
    @pytest.mark.asyncio
    async def test_get_problems_delegates(self, mock_repository):
        service = ProblemService(mock_repository)

        await service.get_problems(None, page=2, limit=25, sort_by="duration", sort_order="asc")

        mock_repository.find_all.assert_awaited_once_with(None, 2, 25, "duration", "asc")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit,sort_order,field", [
        (0, 10, "desc", "page"),
        (1, 0, "desc", "limit"),
        (1, 101, "desc", "limit"),
        (1, 10, "sideways", "sortOrder"),
    ])
    async def test_get_problems_rejects_bad_paging(self, mock_repository, page, limit, sort_order, field):
        service = ProblemService(mock_repository, max_page_size=100)

        with pytest.raises(FilterValidationError) as exc_info:
            await service.get_problems(None, page=page, limit=limit, sort_order=sort_order)

        assert exc_info.value.field == field
        mock_repository.find_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_problem_not_found(self, mock_repository):
        service = ProblemService(mock_repository)

        with pytest.raises(ProblemNotFoundError) as exc_info:
            await service.get_problem_by_id("P-404")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.status_code == 404
        assert exc_info.value.problem_id == "P-404"

    @pytest.mark.asyncio
    async def test_update_status(self, mock_repository):
        mock_repository.update_status.return_value = {"problemId": "P-1", "status": "CLOSED"}
        service = ProblemService(mock_repository)

        problem = await service.update_problem_status("P-1", ProblemStatus.CLOSED)

        assert problem["status"] == "CLOSED"
        mock_repository.update_status.assert_awaited_once_with("P-1", ProblemStatus.CLOSED)

    @pytest.mark.asyncio
    async def test_update_status_not_found(self, mock_repository):
        service = ProblemService(mock_repository)

        with pytest.raises(ProblemNotFoundError):
            await service.update_problem_status("P-404", ProblemStatus.OPEN)

    @pytest.mark.asyncio
    async def test_add_comment_defaults_to_anonymous(self, mock_repository):
        mock_repository.add_comment.return_value = {"problemId": "P-1"}
        service = ProblemService(mock_repository)

        await service.add_comment("P-1", "looking into it")

        problem_id, comment = mock_repository.add_comment.await_args.args
        assert problem_id == "P-1"
        assert comment["content"] == "looking into it"
        assert comment["author"] == "Anonymous"
        assert comment["id"]
        assert comment["createdAt"]

    @pytest.mark.asyncio
    async def test_add_comment_not_found(self, mock_repository):
        service = ProblemService(mock_repository)

        with pytest.raises(ProblemNotFoundError):
            await service.add_comment("P-404", "hello", "alice")


class TestAnalyticsService:
    @pytest.mark.asyncio
    async def test_kpis_view(self, mock_repository, scenario_problems):
        mock_repository.find_for_analytics.return_value = AnalyticsSnapshot(problems=scenario_problems)
        service = AnalyticsService(mock_repository)

        view = await service.get_kpis(None)

        assert view.data["totalProblems"] == 3
        assert view.data["avgResolutionTime"] == 123
        assert view.record_count == 3
        assert view.meta == {"recordCount": 3, "truncated": False}

    @pytest.mark.asyncio
    async def test_truncation_is_reported(self, mock_repository, scenario_problems):
        mock_repository.find_for_analytics.return_value = AnalyticsSnapshot(
            problems=scenario_problems[:2], truncated=True, limit=2
        )
        service = AnalyticsService(mock_repository)

        view = await service.get_duration_distribution(None)

        assert view.truncated is True
        assert sum(view.data["categories"].values()) == 2

    @pytest.mark.asyncio
    async def test_views_share_filters(self, mock_repository, scenario_problems):
        mock_repository.find_for_analytics.return_value = AnalyticsSnapshot(problems=scenario_problems)
        service = AnalyticsService(mock_repository)
        filters = MagicMock()

        await service.get_time_series(Granularity.WEEK, filters)
        await service.get_top_entities(5, filters)
        await service.get_avg_resolution_time_series(Granularity.MONTH, filters)

        for call in mock_repository.find_for_analytics.await_args_list:
            assert call.args == (filters,)

    @pytest.mark.asyncio
    async def test_every_view_returns_data(self, mock_repository, scenario_problems):
        mock_repository.find_for_analytics.return_value = AnalyticsSnapshot(problems=scenario_problems)
        service = AnalyticsService(mock_repository)

        views = [
            await service.get_kpis(),
            await service.get_time_series(),
            await service.get_impact_severity_matrix(),
            await service.get_top_entities(),
            await service.get_management_zones(),
            await service.get_remediation_funnel(),
            await service.get_duration_distribution(),
            await service.get_evidence_types(),
            await service.get_root_cause_analysis(),
            await service.get_root_cause_distribution(),
            await service.get_impact_distribution(),
            await service.get_severity_distribution(),
            await service.get_has_root_cause_distribution(),
            await service.get_autoremediado_distribution(),
            await service.get_autoremediation_time_series(),
            await service.get_avg_resolution_time_series(),
        ]

        assert len(views) == 16
        assert all(view.data for view in views)
