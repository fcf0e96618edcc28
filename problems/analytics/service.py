"""Analytics service — loads one filtered snapshot per call and runs an engine view."""

from __future__ import annotations

import logging
from typing import Any, Callable

from opentelemetry import trace
from pydantic import BaseModel

from problems.analytics import engine
from problems.analytics.models import AnalyticsView, Granularity
from problems.filtering.models import ProblemFilters
from problems.storage.repository import ProblemRepository

logger = logging.getLogger("problems.analytics")
tracer = trace.get_tracer(__name__)


class AnalyticsService:
    """Computes dashboard aggregates over one repository snapshot, capped at the analytics ceiling."""

    def __init__(self, repository: ProblemRepository) -> None:
        self._repository = repository

    async def _compute(
        self,
        view: str,
        filters: ProblemFilters | None,
        compute: Callable[..., Any],
        *args: Any,
    ) -> AnalyticsView:
        with tracer.start_as_current_span(f"analytics.{view}") as span:
            snapshot = await self._repository.find_for_analytics(filters)
            span.set_attribute("analytics.records", len(snapshot.problems))
            span.set_attribute("analytics.truncated", snapshot.truncated)

            if snapshot.truncated:
                logger.warning(
                    "Analytics view=%s truncated at %d records; aggregates are partial",
                    view, snapshot.limit,
                )

            result = compute(snapshot.problems, *args)
            data = result.model_dump(by_alias=True) if isinstance(result, BaseModel) else result
            return AnalyticsView(data=data, record_count=len(snapshot.problems), truncated=snapshot.truncated)

    async def get_kpis(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("kpis", filters, engine.compute_kpis)

    async def get_time_series(
        self, granularity: Granularity = Granularity.DAY, filters: ProblemFilters | None = None
    ) -> AnalyticsView:
        return await self._compute("time_series", filters, engine.compute_time_series, granularity)

    async def get_impact_severity_matrix(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("impact_severity_matrix", filters, engine.compute_impact_severity_matrix)

    async def get_top_entities(self, limit: int = 10, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("top_entities", filters, engine.compute_top_entities, limit)

    async def get_management_zones(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("management_zones", filters, engine.compute_management_zones)

    async def get_remediation_funnel(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("remediation_funnel", filters, engine.compute_remediation_funnel)

    async def get_duration_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("duration_distribution", filters, engine.compute_duration_distribution)

    async def get_evidence_types(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("evidence_types", filters, engine.compute_evidence_types)

    async def get_root_cause_analysis(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("root_cause_analysis", filters, engine.compute_root_cause_analysis)

    async def get_root_cause_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("root_cause_distribution", filters, engine.compute_root_cause_distribution)

    async def get_impact_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("impact_distribution", filters, engine.compute_impact_distribution)

    async def get_severity_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute("severity_distribution", filters, engine.compute_severity_distribution)

    async def get_has_root_cause_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute(
            "has_root_cause_distribution", filters, engine.compute_has_root_cause_distribution
        )

    async def get_autoremediado_distribution(self, filters: ProblemFilters | None = None) -> AnalyticsView:
        return await self._compute(
            "autoremediado_distribution", filters, engine.compute_autoremediado_distribution
        )

    async def get_autoremediation_time_series(
        self, granularity: Granularity = Granularity.DAY, filters: ProblemFilters | None = None
    ) -> AnalyticsView:
        return await self._compute(
            "autoremediation_time_series", filters, engine.compute_autoremediation_time_series, granularity
        )

    async def get_avg_resolution_time_series(
        self, granularity: Granularity = Granularity.DAY, filters: ProblemFilters | None = None
    ) -> AnalyticsView:
        return await self._compute(
            "avg_resolution_time_series", filters, engine.compute_avg_resolution_time_series, granularity
        )
