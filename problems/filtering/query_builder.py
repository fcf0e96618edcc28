"""Translate a ProblemFilters into a MongoDB filter document.

Listing and analytics both go through ``build_query`` so that the problems
shown and the problems counted never diverge for the same filter set.
Every rule is independent; present filters are ANDed together.
"""

from __future__ import annotations

from typing import Any

from problems.filtering.models import ProblemFilters

GITHUB_ACTIONS_PATTERN = "GitHub Actions"

# filter attribute -> stored document path
_MEMBERSHIP_PATHS = (
    ("impact_level", "impactLevel"),
    ("severity_level", "severityLevel"),
    ("status", "status"),
    ("management_zones", "managementZones.name"),
    ("affected_entity_types", "affectedEntities.entityId.type"),
    ("entity_tags", "entityTags.stringRepresentation"),
    ("evidence_type", "evidenceDetails.details.evidenceType"),
)


def _range(lower: Any, upper: Any) -> dict[str, Any]:
    bounds: dict[str, Any] = {}
    if lower is not None:
        bounds["$gte"] = lower
    if upper is not None:
        bounds["$lte"] = upper
    return bounds


def build_query(filters: ProblemFilters | None) -> dict[str, Any]:
    if filters is None:
        return {}

    query: dict[str, Any] = {}

    for attr, path in _MEMBERSHIP_PATHS:
        values = getattr(filters, attr)
        if values:
            query[path] = {"$in": list(values)}

    # Bounds are passed through as given and compare against ISO-8601 string startTime.
    if filters.date_from or filters.date_to:
        query["startTime"] = _range(filters.date_from or None, filters.date_to or None)

    if filters.has_comments is not None:
        if filters.has_comments:
            query["recentComments.totalCount"] = {"$gt": 0}
        else:
            query["recentComments.totalCount"] = 0

    if filters.has_github_actions:
        query["recentComments.comments.content"] = {
            "$regex": GITHUB_ACTIONS_PATTERN,
            "$options": "i",
        }

    if filters.search:
        query["$text"] = {"$search": filters.search}

    if filters.has_root_cause is not None:
        if filters.has_root_cause:
            query["rootCauseEntity"] = {"$ne": None, "$exists": True}
        else:
            query["$or"] = [
                {"rootCauseEntity": None},
                {"rootCauseEntity": {"$exists": False}},
            ]

    if filters.duration_min is not None or filters.duration_max is not None:
        query["duration"] = _range(filters.duration_min, filters.duration_max)

    if filters.autoremediado is not None:
        query["autoremediado"] = filters.autoremediado

    if filters.funciono_auto_remediacion is not None:
        query["funcionoAutoRemediacion"] = filters.funciono_auto_remediacion

    return query
