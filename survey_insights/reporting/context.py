"""Context dataclasses for rendering survey reports.

This module turns aggregated series into `ReportContext`, a typed container
holding every value the Jinja2 template `templates/report.md.j2` expects.

Keeping context building apart from template rendering lets the ordering,
percentage and color logic be unit-tested without touching template strings.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from survey_insights.aggregation.colors import compute_color_for_label, hash_salt_from
from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.filters import submissions_by_day, today_count
from survey_insights.models import SurveyConfig, SurveyResponse
from survey_insights.reporting import config

__all__ = [
    "Stats",
    "ValueRow",
    "SeriesSummary",
    "ReportContext",
    "order_series",
    "build_report_context",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Stats:
    """Response volume figures displayed at the top of the report."""

    total_responses: int
    filtered_responses: int
    today: int = 0
    range_label: str = "All time"
    daily: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` representation suitable for Jinja."""
        return asdict(self)


@dataclass(slots=True)
class ValueRow:
    value: str
    count: int
    percent: float
    color: str
    bar: str


@dataclass(slots=True)
class SeriesSummary:
    """One field's rows, already in display order."""

    field_id: str
    label: str
    section: Optional[str]
    kind: str
    total: int
    neutral_mode: bool = False
    rows: List[ValueRow] = field(default_factory=list)
    hidden_values: int = 0


@dataclass(slots=True)
class ReportContext:
    """Container with all fields used by the markdown report template."""

    title: str
    date: str  # ISO-8601 date string (UTC)
    stats: Stats
    series: List[SeriesSummary] = field(default_factory=list)
    version: str = "1"

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    __call__ = to_dict


# ---------------------------------------------------------------------------
# Ordering helpers
# ---------------------------------------------------------------------------
def _config_positions(survey: Optional[SurveyConfig]) -> Dict[str, int]:
    """Field id → display position: sections by ``order``, fields before subsections."""
    positions: Dict[str, int] = {}
    if survey is None:
        return positions
    for section in sorted(survey.sections, key=lambda s: s.order or 0):
        for fld in section.fields:
            positions.setdefault(fld.id, len(positions))
        for subsection in sorted(section.subsections, key=lambda s: s.order or 0):
            for fld in subsection.fields:
                positions.setdefault(fld.id, len(positions))
    return positions


def order_series(
    series: Sequence[AggregatedSeries], survey: Optional[SurveyConfig]
) -> List[AggregatedSeries]:
    """Order *series* as the survey form shows them; unknown fields go last."""
    positions = _config_positions(survey)
    tail = len(positions)
    return sorted(series, key=lambda s: positions.get(s.field_id, tail))


def _display_values(s: AggregatedSeries) -> List[str]:
    if s.is_histogram():
        return list(s.counts)
    authored = list(s.ordered_values or [])
    seen = set(authored)
    extras = sorted(
        (v for v in s.counts if v not in seen), key=lambda v: (-s.counts[v], v)
    )
    return authored + extras


def _text_bar(count: int, peak: int, width: int) -> str:
    if not peak or not count:
        return ""
    return "█" * max(1, round(count / peak * width))


def summarize_series(s: AggregatedSeries) -> SeriesSummary:
    values = _display_values(s)
    shown = values[: config.MAX_VALUES_PER_SERIES]
    peak = max(s.counts.values(), default=0)
    salt = hash_salt_from(s.field_id)
    total = s.total or 1

    rows = [
        ValueRow(
            value=value,
            count=s.counts.get(value, 0),
            percent=round(s.counts.get(value, 0) / total * 100, 1),
            color=compute_color_for_label(
                value, s.colors, neutral_mode=bool(s.neutral_mode), salt=salt
            ),
            bar=_text_bar(s.counts.get(value, 0), peak, config.BAR_WIDTH),
        )
        for value in shown
    ]
    return SeriesSummary(
        field_id=s.field_id,
        label=s.label,
        section=s.section,
        kind=s.type,
        total=s.total,
        neutral_mode=bool(s.neutral_mode),
        rows=rows,
        hidden_values=len(values) - len(shown),
    )


def _range_label(start_date: str, end_date: str) -> str:
    if not start_date and not end_date:
        return "All time"
    return f"{start_date or '…'} → {end_date or '…'}"


# ---------------------------------------------------------------------------
# Conversion helper
# ---------------------------------------------------------------------------
def build_report_context(
    series: Sequence[AggregatedSeries],
    *,
    survey: Optional[SurveyConfig] = None,
    responses: Optional[Sequence[SurveyResponse]] = None,
    filtered: Optional[Sequence[SurveyResponse]] = None,
    title: Optional[str] = None,
    start_date: str = "",
    end_date: str = "",
    today: Optional[date] = None,
) -> ReportContext:
    """Convert aggregated *series* into :class:`ReportContext`.

    *responses* is the full response set, *filtered* the subset that was
    aggregated (defaults to *responses*).  The function is *pure*.
    """
    all_responses = list(responses or [])
    in_range = list(filtered) if filtered is not None else all_responses

    ordered = order_series(series, survey)
    if len(ordered) > config.MAX_SERIES:
        logger.warning(
            "Report truncated to %d of %d series", config.MAX_SERIES, len(ordered)
        )
        ordered = ordered[: config.MAX_SERIES]

    report_day = today or datetime.now(timezone.utc).date()
    stats = Stats(
        total_responses=len(all_responses),
        filtered_responses=len(in_range),
        today=today_count(in_range, today=report_day),
        range_label=_range_label(start_date, end_date),
        daily=submissions_by_day(in_range),
    )

    return ReportContext(
        title=title or (survey.title if survey and survey.title else "Survey report"),
        date=report_day.isoformat(),
        stats=stats,
        series=[summarize_series(s) for s in ordered],
    )
