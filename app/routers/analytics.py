"""Dashboard analytics endpoints; every view shares the listing filters."""

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_analytics_service, get_filters
from app.responses import success
from app.telemetry.metrics import analytics_records_scanned, analytics_truncated_total
from problems.analytics.models import AnalyticsView, Granularity
from problems.analytics.service import AnalyticsService
from problems.filtering.models import ProblemFilters

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def _respond(view_name: str, view: AnalyticsView) -> dict:
    analytics_records_scanned.labels(view=view_name).observe(view.record_count)
    if view.truncated:
        analytics_truncated_total.labels(view=view_name).inc()
    return success(view.data, meta=view.meta)


@router.get("/kpis")
async def kpis(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("kpis", await service.get_kpis(filters))


@router.get("/time-series")
async def time_series(
    granularity: Granularity = Granularity.DAY,
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("time_series", await service.get_time_series(granularity, filters))


@router.get("/impact-severity-matrix")
async def impact_severity_matrix(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("impact_severity_matrix", await service.get_impact_severity_matrix(filters))


@router.get("/top-entities")
async def top_entities(
    limit: int = Query(10, ge=1),
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("top_entities", await service.get_top_entities(limit, filters))


@router.get("/management-zones")
async def management_zones(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("management_zones", await service.get_management_zones(filters))


@router.get("/remediation-funnel")
async def remediation_funnel(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("remediation_funnel", await service.get_remediation_funnel(filters))


@router.get("/duration-distribution")
async def duration_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("duration_distribution", await service.get_duration_distribution(filters))


@router.get("/evidence-types")
async def evidence_types(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("evidence_types", await service.get_evidence_types(filters))


@router.get("/root-cause-analysis")
async def root_cause_analysis(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("root_cause_analysis", await service.get_root_cause_analysis(filters))


@router.get("/root-cause-distribution")
async def root_cause_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("root_cause_distribution", await service.get_root_cause_distribution(filters))


@router.get("/impact-distribution")
async def impact_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("impact_distribution", await service.get_impact_distribution(filters))


@router.get("/severity-distribution")
async def severity_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("severity_distribution", await service.get_severity_distribution(filters))


@router.get("/has-root-cause-distribution")
async def has_root_cause_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("has_root_cause_distribution", await service.get_has_root_cause_distribution(filters))


@router.get("/autoremediado-distribution")
async def autoremediado_distribution(
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond("autoremediado_distribution", await service.get_autoremediado_distribution(filters))


@router.get("/autoremediation-time-series")
async def autoremediation_time_series(
    granularity: Granularity = Granularity.DAY,
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond(
        "autoremediation_time_series", await service.get_autoremediation_time_series(granularity, filters)
    )


@router.get("/avg-resolution-time-series")
async def avg_resolution_time_series(
    granularity: Granularity = Granularity.DAY,
    filters: ProblemFilters = Depends(get_filters),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _respond(
        "avg_resolution_time_series", await service.get_avg_resolution_time_series(granularity, filters)
    )
