"""In-memory aggregation over an already-filtered set of problem records.

Every function takes the same record list and returns one chart-ready
shape. Records are raw store documents, so nested containers may be
missing and are treated as empty.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Sequence

from problems.analytics.models import DashboardKPIs, FunnelStage, Granularity

logger = logging.getLogger("problems.analytics")

Problem = Mapping[str, Any]

CRITICAL_SEVERITIES = frozenset({"AVAILABILITY", "ERROR"})

SEVERITY_WEIGHTS = {
    "AVAILABILITY": 5,
    "ERROR": 4,
    "PERFORMANCE": 3,
    "RESOURCE_CONTENTION": 2,
    "CUSTOM_ALERT": 1,
}

# (label, upper bound in minutes, exclusive)
DURATION_BUCKETS = (
    ("less_than_5", 5),
    ("5_to_10", 10),
    ("10_to_30", 30),
    ("30_to_180", 180),
    ("more_than_180", math.inf),
)

GITHUB_ACTIONS = "github actions"
SUCCESS_TERMS = ("success", "completed")
UNKNOWN_EVENT_TYPE = "UNKNOWN"


# ── record helpers ────────────────────────────────────────────────


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (122.5 -> 123)."""
    return math.floor(value + 0.5)


def round2(value: float) -> float:
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _comments(problem: Problem) -> list[Mapping[str, Any]]:
    recent = problem.get("recentComments") or {}
    return recent.get("comments") or []


def comment_count(problem: Problem) -> int:
    recent = problem.get("recentComments") or {}
    return recent.get("totalCount") or 0


def mentions(problem: Problem, *terms: str) -> bool:
    """Case-insensitive substring match of any term against any comment."""
    for comment in _comments(problem):
        content = (comment.get("content") or "").lower()
        if any(term in content for term in terms):
            return True
    return False


def mentions_github_actions(problem: Problem) -> bool:
    return mentions(problem, GITHUB_ACTIONS)


def duration_of(problem: Problem) -> float:
    """Stored duration in minutes; missing, non-numeric or non-finite values count as 0."""
    value = problem.get("duration")
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return value
    return 0


def is_closed(problem: Problem) -> bool:
    return problem.get("status") == "CLOSED"


def parse_start_time(value: Any) -> datetime | None:
    """Accept BSON datetimes, epoch milliseconds or ISO-8601 strings; return UTC."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed.replace(tzinfo=timezone.utc) if parsed.tzinfo is None else parsed.astimezone(timezone.utc)
    return None


def bucket_key(moment: datetime, granularity: Granularity | str) -> str:
    """Bucket key that sorts chronologically as a plain string.

    Weeks start on the preceding (or same) Sunday.
    """
    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return moment.date().isoformat()
    if granularity is Granularity.WEEK:
        days_since_sunday = (moment.weekday() + 1) % 7
        return (moment - timedelta(days=days_since_sunday)).date().isoformat()
    return f"{moment.year:04d}-{moment.month:02d}"


def _bucketed(problems: Iterable[Problem], granularity: Granularity | str) -> Iterable[tuple[str, Problem]]:
    for problem in problems:
        moment = parse_start_time(problem.get("startTime"))
        if moment is None:
            logger.debug("Skipping problem=%s with unparseable startTime", problem.get("problemId"))
            continue
        yield bucket_key(moment, granularity), problem


def _counts_by(problems: Iterable[Problem], key: str) -> dict[Any, int]:
    counts: dict[Any, int] = {}
    for problem in problems:
        value = problem.get(key)
        counts[value] = counts.get(value, 0) + 1
    return counts


def _as_series(counts: Mapping[Any, int]) -> list[dict[str, Any]]:
    return [{"name": name, "value": value} for name, value in counts.items()]


def _percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round2(count / total * 100)


# ── views ─────────────────────────────────────────────────────────


def compute_kpis(problems: Sequence[Problem]) -> DashboardKPIs:
    total_duration = 0
    resolution_times = []
    for problem in problems:
        duration = duration_of(problem)
        total_duration += duration
        if is_closed(problem):
            resolution_times.append(duration)

    avg_resolution_time = (
        round_half_up(sum(resolution_times) / len(resolution_times)) if resolution_times else 0
    )

    return DashboardKPIs(
        total_problems=len(problems),
        open_problems=sum(1 for p in problems if p.get("status") == "OPEN"),
        closed_problems=len(resolution_times),
        total_duration=total_duration,
        avg_resolution_time=avg_resolution_time,
        problems_with_comments=sum(1 for p in problems if comment_count(p) > 0),
        github_action_problems=sum(1 for p in problems if mentions_github_actions(p)),
        critical_problems=sum(1 for p in problems if p.get("severityLevel") in CRITICAL_SEVERITIES),
    )


def compute_time_series(problems: Sequence[Problem], granularity: Granularity | str = Granularity.DAY) -> dict:
    buckets: dict[str, dict[str, int]] = {}
    for key, problem in _bucketed(problems, granularity):
        breakdown = buckets.setdefault(key, {})
        severity = problem.get("severityLevel")
        breakdown[severity] = breakdown.get(severity, 0) + 1

    data = [
        {"timestamp": key, "severityBreakdown": breakdown}
        for key, breakdown in sorted(buckets.items())
    ]
    return {"data": data}


def compute_impact_severity_matrix(problems: Sequence[Problem]) -> dict:
    matrix: dict[str, dict[str, int]] = {}
    for problem in problems:
        row = matrix.setdefault(problem.get("impactLevel"), {})
        severity = problem.get("severityLevel")
        row[severity] = row.get(severity, 0) + 1
    return {"matrix": matrix}


def compute_top_entities(problems: Sequence[Problem], limit: int = 10) -> dict:
    """Rank affected entities by occurrence count.

    An entity listed twice in one record's list counts twice.
    """
    entities: dict[Any, dict[str, Any]] = {}
    for problem in problems:
        for entity in problem.get("affectedEntities") or []:
            entity_id = entity.get("entityId") or {}
            key = entity_id.get("id")
            if key in entities:
                entities[key]["problemCount"] += 1
            else:
                entities[key] = {
                    "name": entity.get("name"),
                    "type": entity_id.get("type"),
                    "problemCount": 1,
                }

    ranked = sorted(entities.values(), key=lambda e: e["problemCount"], reverse=True)
    return {"entities": ranked[:limit]}


def compute_management_zones(problems: Sequence[Problem]) -> dict:
    zones: dict[str, list[int]] = {}
    for problem in problems:
        weight = SEVERITY_WEIGHTS.get(problem.get("severityLevel"), 0)
        for zone in problem.get("managementZones") or []:
            zones.setdefault(zone.get("name"), []).append(weight)

    return {
        "zones": [
            {
                "name": name,
                "problemCount": len(weights),
                "avgSeverity": round2(sum(weights) / len(weights)),
            }
            for name, weights in zones.items()
        ]
    }


def compute_remediation_funnel(problems: Sequence[Problem]) -> dict:
    """Five stages; the first four narrow, ``Closed`` is counted on its own."""
    total = len(problems)
    with_comments = [p for p in problems if comment_count(p) > 0]
    with_github_actions = [p for p in with_comments if mentions_github_actions(p)]
    with_success = [p for p in with_github_actions if mentions(p, *SUCCESS_TERMS)]
    closed = sum(1 for p in problems if is_closed(p))

    stages = [
        FunnelStage(name="Total Problems", count=total, percentage=100 if total else 0),
        FunnelStage(name="With Comments", count=len(with_comments), percentage=_percentage(len(with_comments), total)),
        FunnelStage(
            name="GitHub Actions Initiated",
            count=len(with_github_actions),
            percentage=_percentage(len(with_github_actions), total),
        ),
        FunnelStage(
            name="Remediation Successful",
            count=len(with_success),
            percentage=_percentage(len(with_success), total),
        ),
        FunnelStage(name="Closed", count=closed, percentage=_percentage(closed, total)),
    ]
    return {"stages": [stage.model_dump() for stage in stages]}


def compute_duration_distribution(problems: Sequence[Problem]) -> dict:
    categories = {label: 0 for label, _ in DURATION_BUCKETS}
    for problem in problems:
        duration = duration_of(problem)
        for label, upper in DURATION_BUCKETS:
            if duration < upper:
                categories[label] += 1
                break
    return {"categories": categories}


def compute_evidence_types(problems: Sequence[Problem]) -> dict:
    evidence: dict[str, dict[str, int]] = {}
    for problem in problems:
        details = (problem.get("evidenceDetails") or {}).get("details") or []
        for item in details:
            event_types = evidence.setdefault(item.get("evidenceType"), {})
            event_type = item.get("eventType") or UNKNOWN_EVENT_TYPE
            event_types[event_type] = event_types.get(event_type, 0) + 1

    breakdown = [
        {"name": evidence_type, "children": _as_series(event_types)}
        for evidence_type, event_types in evidence.items()
    ]
    return {"breakdown": breakdown}


def compute_root_cause_analysis(problems: Sequence[Problem]) -> dict:
    counts: dict[str, int] = {}
    for problem in problems:
        root_cause = problem.get("rootCauseEntity")
        if isinstance(root_cause, Mapping) and root_cause.get("name"):
            name = root_cause["name"]
            counts[name] = counts.get(name, 0) + 1

    data = sorted(_as_series(counts), key=lambda item: item["value"], reverse=True)
    return {"data": data}


def compute_root_cause_distribution(problems: Sequence[Problem]) -> dict:
    with_root_cause = sum(1 for p in problems if p.get("rootCauseEntity") is not None)
    return {
        "data": [
            {"name": "With Root Cause", "value": with_root_cause},
            {"name": "Without Root Cause", "value": len(problems) - with_root_cause},
        ]
    }


def compute_impact_distribution(problems: Sequence[Problem]) -> dict:
    return {"data": _as_series(_counts_by(problems, "impactLevel"))}


def compute_severity_distribution(problems: Sequence[Problem]) -> dict:
    return {"data": _as_series(_counts_by(problems, "severityLevel"))}


def compute_has_root_cause_distribution(problems: Sequence[Problem]) -> dict:
    """Stricter than the list filter: an empty root-cause object counts as "No"."""
    with_root_cause = sum(1 for p in problems if p.get("rootCauseEntity"))
    return {
        "data": [
            {"name": "Sí", "value": with_root_cause},
            {"name": "No", "value": len(problems) - with_root_cause},
        ]
    }


def compute_autoremediado_distribution(problems: Sequence[Problem]) -> dict:
    """Auto-remediated here means a comment mentions GitHub Actions.

    This is not the stored ``autoremediado`` field the list filter uses.
    """
    autoremediated = sum(1 for p in problems if mentions_github_actions(p))
    return {
        "data": [
            {"name": "Sí", "value": autoremediated},
            {"name": "No", "value": len(problems) - autoremediated},
        ]
    }


def compute_autoremediation_time_series(
    problems: Sequence[Problem], granularity: Granularity | str = Granularity.DAY
) -> dict:
    counts: dict[str, int] = {}
    autoremediated = (p for p in problems if mentions_github_actions(p))
    for key, _ in _bucketed(autoremediated, granularity):
        counts[key] = counts.get(key, 0) + 1

    return {"data": [{"timestamp": key, "count": count} for key, count in sorted(counts.items())]}


def compute_avg_resolution_time_series(
    problems: Sequence[Problem], granularity: Granularity | str = Granularity.DAY
) -> dict:
    durations: dict[str, list[float]] = {}
    closed = (p for p in problems if is_closed(p))
    for key, problem in _bucketed(closed, granularity):
        durations.setdefault(key, []).append(duration_of(problem))

    data = [
        {"timestamp": key, "avgResolutionTime": round_half_up(sum(values) / len(values))}
        for key, values in sorted(durations.items())
    ]
    return {"data": data}
