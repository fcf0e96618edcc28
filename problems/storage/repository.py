"""Problem repository — paginated listing, bulk analytics loads and the two narrow mutations."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any

from pymongo import ASCENDING, DESCENDING, TEXT, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from problems.filtering.models import ProblemFilters
from problems.filtering.query_builder import build_query
from problems.models import FilterOptions, PaginatedProblems, ProblemStatus

logger = logging.getLogger("problems.storage")

DEFAULT_ANALYTICS_LIMIT = 10000

_HIDE_ID = {"_id": 0}

# Only the attributes the analytics engine reads.
ANALYTICS_PROJECTION = {
    "_id": 0,
    "problemId": 1,
    "displayId": 1,
    "title": 1,
    "impactLevel": 1,
    "severityLevel": 1,
    "status": 1,
    "startTime": 1,
    "endTime": 1,
    "duration": 1,
    "rootCauseEntity": 1,
    "autoremediado": 1,
    "funcionoAutoRemediacion": 1,
    "managementZones.name": 1,
    "affectedEntities.name": 1,
    "affectedEntities.entityId.id": 1,
    "affectedEntities.entityId.type": 1,
    "evidenceDetails.details.evidenceType": 1,
    "evidenceDetails.details.eventType": 1,
    "recentComments.totalCount": 1,
    "recentComments.comments": 1,
}

TEXT_INDEX_FIELDS = ("title", "displayId", "rootCauseEntity.name", "affectedEntities.name")


@dataclass
class AnalyticsSnapshot:
    """Bulk record set for one analytics request.

    ``truncated`` is set when more records matched than the analytics
    ceiling; aggregates are then computed over the first ``limit`` only.
    """

    problems: list[dict[str, Any]] = field(default_factory=list)
    truncated: bool = False
    limit: int = DEFAULT_ANALYTICS_LIMIT


class ProblemRepository:
    def __init__(self, collection: AsyncCollection, analytics_limit: int = DEFAULT_ANALYTICS_LIMIT) -> None:
        self._collection = collection
        self._analytics_limit = analytics_limit

    async def find_all(
        self,
        filters: ProblemFilters | None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "startTime",
        sort_order: str = "desc",
    ) -> PaginatedProblems:
        """Fetch one page plus the uncapped match count.

        Both reads run concurrently against a store that may be mutated in
        between, so ``total`` and the page are not a consistent snapshot.
        """
        query = build_query(filters)
        skip = (page - 1) * limit
        direction = ASCENDING if sort_order == "asc" else DESCENDING

        cursor = self._collection.find(query, _HIDE_ID).sort(sort_by, direction).skip(skip).limit(limit)
        problems, total = await asyncio.gather(
            cursor.to_list(length=None),
            self._collection.count_documents(query),
        )

        return PaginatedProblems(
            problems=problems,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )

    async def find_by_id(self, problem_id: str) -> dict[str, Any] | None:
        return await self._collection.find_one({"problemId": problem_id}, _HIDE_ID)

    async def count_matching(self, filters: ProblemFilters | None) -> int:
        return await self._collection.count_documents(build_query(filters))

    async def find_all_problems(
        self, filters: ProblemFilters | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Projected bulk load, capped at ``limit`` or the analytics ceiling."""
        query = build_query(filters)
        cursor = self._collection.find(query, ANALYTICS_PROJECTION).limit(limit or self._analytics_limit)
        return await cursor.to_list(length=None)

    async def find_for_analytics(self, filters: ProblemFilters | None) -> AnalyticsSnapshot:
        limit = self._analytics_limit
        problems = await self.find_all_problems(filters, limit=limit + 1)
        truncated = len(problems) > limit
        if truncated:
            problems = problems[:limit]
        return AnalyticsSnapshot(problems=problems, truncated=truncated, limit=limit)

    async def update_status(self, problem_id: str, status: ProblemStatus | str) -> dict[str, Any] | None:
        value = status.value if isinstance(status, ProblemStatus) else status
        return await self._collection.find_one_and_update(
            {"problemId": problem_id},
            {"$set": {"status": value}},
            projection=_HIDE_ID,
            return_document=ReturnDocument.AFTER,
        )

    async def add_comment(self, problem_id: str, comment: dict[str, Any]) -> dict[str, Any] | None:
        """Append a comment and bump totalCount in one atomic update."""
        return await self._collection.find_one_and_update(
            {"problemId": problem_id},
            {
                "$push": {"recentComments.comments": comment},
                "$inc": {"recentComments.totalCount": 1},
            },
            projection=_HIDE_ID,
            return_document=ReturnDocument.AFTER,
        )

    async def get_distinct_values(self, field_path: str) -> list[Any]:
        values = await self._collection.distinct(field_path)
        return [v for v in values if v is not None]

    async def get_filter_options(self) -> FilterOptions:
        (
            impact_levels,
            severity_levels,
            statuses,
            management_zones,
            entity_types,
            evidence_types,
        ) = await asyncio.gather(
            self.get_distinct_values("impactLevel"),
            self.get_distinct_values("severityLevel"),
            self.get_distinct_values("status"),
            self.get_distinct_values("managementZones.name"),
            self.get_distinct_values("affectedEntities.entityId.type"),
            self.get_distinct_values("evidenceDetails.details.evidenceType"),
        )

        documents = await self._collection.find({}, {"_id": 0, "entityTags": 1}).to_list(length=None)
        tags: dict[str, None] = {}
        for doc in documents:
            for tag in doc.get("entityTags") or []:
                representation = tag.get("stringRepresentation") if isinstance(tag, dict) else None
                if representation:
                    tags.setdefault(representation, None)

        return FilterOptions(
            impact_levels=impact_levels,
            severity_levels=severity_levels,
            statuses=statuses,
            management_zones=management_zones,
            entity_types=entity_types,
            evidence_types=evidence_types,
            tags=list(tags),
        )

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([(name, TEXT) for name in TEXT_INDEX_FIELDS], name="problems_text")
        await self._collection.create_index("problemId", name="problems_problem_id")
        await self._collection.create_index([("startTime", DESCENDING)], name="problems_start_time")
        logger.info("Problem collection indexes ensured")
