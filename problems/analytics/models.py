"""Analytics result shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DashboardKPIs(BaseModel):
    model_config = {"populate_by_name": True}

    total_problems: int = Field(alias="totalProblems", default=0)
    open_problems: int = Field(alias="openProblems", default=0)
    closed_problems: int = Field(alias="closedProblems", default=0)
    total_duration: int | float = Field(alias="totalDuration", default=0)
    avg_resolution_time: int = Field(alias="avgResolutionTime", default=0)
    problems_with_comments: int = Field(alias="problemsWithComments", default=0)
    github_action_problems: int = Field(alias="githubActionProblems", default=0)
    critical_problems: int = Field(alias="criticalProblems", default=0)


class FunnelStage(BaseModel):
    name: str
    count: int
    percentage: float


@dataclass
class AnalyticsView:
    """One aggregate plus what it was computed over."""

    data: dict[str, Any]
    record_count: int
    truncated: bool = False

    @property
    def meta(self) -> dict[str, Any]:
        return {"recordCount": self.record_count, "truncated": self.truncated}
