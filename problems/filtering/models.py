"""Canonical filter set shared by the listing and analytics paths."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemFilters(BaseModel):
    """Sparse set of optional predicates, one instance per request.

    Tri-state fields distinguish three states: ``True``, ``False`` and an
    explicit ``None`` ("unknown"). An explicit ``None`` shows up in
    ``model_fields_set``; an omitted key does not. Neither emits a predicate.
    """

    model_config = {"populate_by_name": True}

    impact_level: list[str] | None = Field(alias="impactLevel", default=None)
    severity_level: list[str] | None = Field(alias="severityLevel", default=None)
    status: list[str] | None = None
    management_zones: list[str] | None = Field(alias="managementZones", default=None)
    affected_entity_types: list[str] | None = Field(alias="affectedEntityTypes", default=None)
    entity_tags: list[str] | None = Field(alias="entityTags", default=None)
    evidence_type: list[str] | None = Field(alias="evidenceType", default=None)

    date_from: str | None = Field(alias="dateFrom", default=None)
    date_to: str | None = Field(alias="dateTo", default=None)
    search: str | None = None

    duration_min: float | None = Field(alias="durationMin", default=None)
    duration_max: float | None = Field(alias="durationMax", default=None)

    has_comments: bool | None = Field(alias="hasComments", default=None)
    has_github_actions: bool | None = Field(alias="hasGitHubActions", default=None)

    has_root_cause: bool | None = Field(alias="hasRootCause", default=None)
    autoremediado: bool | None = None
    funciono_auto_remediacion: bool | None = Field(alias="funcionoAutoRemediacion", default=None)

    def is_explicit(self, field: str) -> bool:
        """True when the field was supplied, even if its value is ``None``."""
        return field in self.model_fields_set
