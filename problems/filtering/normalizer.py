"""Normalize loosely-typed request parameters into a canonical ProblemFilters."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from problems.errors import FilterValidationError
from problems.filtering.models import ProblemFilters

logger = logging.getLogger("problems.filtering")

ARRAY_FILTERS = (
    "impactLevel",
    "severityLevel",
    "status",
    "managementZones",
    "affectedEntityTypes",
    "entityTags",
    "evidenceType",
)
STRING_FILTERS = ("dateFrom", "dateTo", "search")
NUMBER_FILTERS = ("durationMin", "durationMax")
FLAG_FILTERS = ("hasComments", "hasGitHubActions")
TRI_STATE_FILTERS = ("hasRootCause", "autoremediado", "funcionoAutoRemediacion")


def query_params_to_mapping(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Collapse multi-valued query parameters into a loose mapping.

    ``a=1&a=2`` and ``a[]=1&a[]=2`` both become ``{"a": ["1", "2"]}``; a key
    seen once keeps its scalar value unless it was written with ``[]``.
    """
    mapping: dict[str, Any] = {}
    for key, value in items:
        bracketed = key.endswith("[]")
        if bracketed:
            key = key[:-2]
        if key in mapping:
            current = mapping[key]
            if isinstance(current, list):
                current.append(value)
            else:
                mapping[key] = [current, value]
        else:
            mapping[key] = [value] if bracketed else value
    return mapping


def _is_true(raw: Any) -> bool:
    return raw is True or raw == "true"


def _is_false(raw: Any) -> bool:
    return raw is False or raw == "false"


def _parse_number(field: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise FilterValidationError(field, f"{field} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise FilterValidationError(field, f"{field} must be a finite number, got {raw!r}")
    return value


def parse_filters(query: Mapping[str, Any]) -> ProblemFilters:
    """Build a ProblemFilters from request parameters.

    Unknown keys (pagination, granularity, ...) are ignored. Only keys that
    carry a value are passed to the model, so ``model_fields_set`` reflects
    what the caller actually supplied.
    """
    values: dict[str, Any] = {}

    for name in ARRAY_FILTERS:
        raw = query.get(name)
        if raw:
            values[name] = [str(v) for v in raw] if isinstance(raw, (list, tuple)) else [str(raw)]

    for name in STRING_FILTERS:
        raw = query.get(name)
        if raw:
            values[name] = str(raw)

    # A falsy raw value (numeric 0, empty string) counts as "not provided".
    for name in NUMBER_FILTERS:
        raw = query.get(name)
        if raw:
            values[name] = _parse_number(name, raw)

    for name in FLAG_FILTERS:
        if name in query and query[name] is not None:
            values[name] = _is_true(query[name])

    for name in TRI_STATE_FILTERS:
        if name in query and query[name] is not None:
            raw = query[name]
            if _is_true(raw):
                values[name] = True
            elif _is_false(raw):
                values[name] = False
            else:
                values[name] = None

    filters = ProblemFilters.model_validate(values)
    if values:
        logger.debug("Parsed filters: %s", sorted(values))
    return filters
