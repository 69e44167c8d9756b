"""Response pre-filtering and search helpers used before and after aggregation.

Aggregation cost grows with the number of responses, so callers narrow the
input to a date range first.  All dates are calendar days in UTC.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.models import SurveyResponse

logger = logging.getLogger(__name__)

QUICK_RANGES = ("all", "7d", "30d", "month", "custom")


def _parse_day(raw: str) -> Optional[date]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring invalid date bound '%s'; expected YYYY-MM-DD", raw)
        return None


def filter_by_date_range(
    responses: Sequence[SurveyResponse], start_date: str = "", end_date: str = ""
) -> List[SurveyResponse]:
    """Return responses submitted between *start_date* and *end_date* inclusive.

    Bounds are ``YYYY-MM-DD`` strings; an empty bound is open.  Responses
    without a timestamp are dropped once any bound is set.
    """
    start_day = _parse_day(start_date)
    end_day = _parse_day(end_date)
    if start_day is None and end_day is None:
        return list(responses)

    start = datetime.combine(start_day, time.min, tzinfo=timezone.utc) if start_day else None
    end = datetime.combine(end_day, time.max, tzinfo=timezone.utc) if end_day else None

    kept: List[SurveyResponse] = []
    for response in responses:
        submitted = response.submitted_at
        if submitted is None:
            continue
        if start and submitted < start:
            continue
        if end and submitted > end:
            continue
        kept.append(response)
    return kept


def submissions_by_day(responses: Sequence[SurveyResponse]) -> List[Tuple[str, int]]:
    """Return ``(YYYY-MM-DD, count)`` pairs sorted by day."""
    counts: Counter[str] = Counter(
        r.submitted_at.astimezone(timezone.utc).date().isoformat()
        for r in responses
        if r.submitted_at is not None
    )
    return sorted(counts.items())


def today_count(
    responses: Sequence[SurveyResponse], today: Optional[date] = None
) -> int:
    key = (today or datetime.now(timezone.utc).date()).isoformat()
    return dict(submissions_by_day(responses)).get(key, 0)


def quick_range(name: str, today: Optional[date] = None) -> Tuple[str, str]:
    """Translate a quick-range name into ``(start_date, end_date)`` strings.

    ``all``, ``custom`` and unknown names give an open range.
    """
    end = today or datetime.now(timezone.utc).date()
    if name == "7d":
        start = end - timedelta(days=6)
    elif name == "30d":
        start = end - timedelta(days=29)
    elif name == "month":
        start = end.replace(day=1)
    else:
        return "", ""
    return start.isoformat(), end.isoformat()


def series_matches_search(
    series: AggregatedSeries,
    term: str,
    section: Optional[str] = None,
    subsection: Optional[str] = None,
) -> bool:
    """Case-insensitive match of *term* against a series' labels and values."""
    needle = (term or "").strip().lower()
    if not needle:
        return True

    haystacks = [series.label, series.field_id, section, subsection, *series.counts]
    return any(h and needle in str(h).lower() for h in haystacks)
