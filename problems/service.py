"""Problem service — listing, lookup and the two narrow mutations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from problems.errors import FilterValidationError, ProblemNotFoundError
from problems.filtering.models import ProblemFilters
from problems.models import FilterOptions, PaginatedProblems, ProblemStatus
from problems.storage.repository import ProblemRepository

logger = logging.getLogger("problems.service")

ANONYMOUS_AUTHOR = "Anonymous"
SORT_ORDERS = ("asc", "desc")


class ProblemService:
    def __init__(self, repository: ProblemRepository, max_page_size: int = 100) -> None:
        self._repository = repository
        self._max_page_size = max_page_size

    async def get_problems(
        self,
        filters: ProblemFilters | None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "startTime",
        sort_order: str = "desc",
    ) -> PaginatedProblems:
        if page < 1:
            raise FilterValidationError("page", "page must be >= 1")
        if not 1 <= limit <= self._max_page_size:
            raise FilterValidationError("limit", f"limit must be between 1 and {self._max_page_size}")
        if sort_order not in SORT_ORDERS:
            raise FilterValidationError("sortOrder", "sortOrder must be 'asc' or 'desc'")

        return await self._repository.find_all(filters, page, limit, sort_by, sort_order)

    async def get_problem_by_id(self, problem_id: str) -> dict[str, Any]:
        problem = await self._repository.find_by_id(problem_id)
        if problem is None:
            raise ProblemNotFoundError(problem_id)
        return problem

    async def update_problem_status(self, problem_id: str, status: ProblemStatus) -> dict[str, Any]:
        problem = await self._repository.update_status(problem_id, status)
        if problem is None:
            raise ProblemNotFoundError(problem_id)
        logger.info("Problem status updated: problem=%s status=%s", problem_id, ProblemStatus(status).value)
        return problem

    async def add_comment(self, problem_id: str, content: str, author: str | None = None) -> dict[str, Any]:
        comment = {
            "id": uuid4().hex[:12],
            "content": content,
            "author": author or ANONYMOUS_AUTHOR,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        problem = await self._repository.add_comment(problem_id, comment)
        if problem is None:
            raise ProblemNotFoundError(problem_id)
        logger.info("Comment added: problem=%s comment=%s author=%s", problem_id, comment["id"], comment["author"])
        return problem

    async def get_filter_options(self) -> FilterOptions:
        return await self._repository.get_filter_options()
