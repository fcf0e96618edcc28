"""Request-scoped accessors for the services built at startup."""

from fastapi import Request

from problems.analytics.service import AnalyticsService
from problems.filtering.models import ProblemFilters
from problems.filtering.normalizer import parse_filters, query_params_to_mapping
from problems.service import ANONYMOUS_AUTHOR, ProblemService


def get_problem_service(request: Request) -> ProblemService:
    return request.app.state.problem_service


def get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


def get_filters(request: Request) -> ProblemFilters:
    return parse_filters(query_params_to_mapping(request.query_params.multi_items()))


def get_author(request: Request) -> str:
    """Username attached by the upstream auth middleware, if any."""
    user = getattr(request.state, "user", None)
    if isinstance(user, dict):
        username = user.get("username")
    else:
        username = getattr(user, "username", None)
    return username or ANONYMOUS_AUTHOR
