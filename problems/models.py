"""Record-level models: statuses, mutations and repository result shapes."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ProblemStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class StatusUpdate(BaseModel):
    status: ProblemStatus


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class PaginatedProblems(BaseModel):
    model_config = {"populate_by_name": True}

    problems: list[dict[str, Any]] = []
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = Field(alias="totalPages", default=0)


class FilterOptions(BaseModel):
    """Distinct observed values per filterable dimension."""

    model_config = {"populate_by_name": True}

    impact_levels: list[Any] = Field(alias="impactLevels", default=[])
    severity_levels: list[Any] = Field(alias="severityLevels", default=[])
    statuses: list[Any] = []
    management_zones: list[Any] = Field(alias="managementZones", default=[])
    entity_types: list[Any] = Field(alias="entityTypes", default=[])
    evidence_types: list[Any] = Field(alias="evidenceTypes", default=[])
    tags: list[str] = []
