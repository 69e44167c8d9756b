import logging
from datetime import date, datetime, timezone

from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.filters import (
    filter_by_date_range,
    quick_range,
    series_matches_search,
    submissions_by_day,
    today_count,
)
from survey_insights.models import SurveyResponse


def _resp(rid, ts):
    submitted = None if ts is None else datetime.fromisoformat(ts).replace(tzinfo=timezone.utc)
    return SurveyResponse(id=rid, responses={}, submitted_at=submitted)


RESPONSES = [
    _resp("a", "2025-06-01T00:00:00"),
    _resp("b", "2025-06-05T12:00:00"),
    _resp("c", "2025-06-10T23:59:59"),
    _resp("d", None),
]


def test_open_range_keeps_everything():
    assert filter_by_date_range(RESPONSES) == RESPONSES


def test_bounds_are_inclusive_calendar_days():
    kept = filter_by_date_range(RESPONSES, "2025-06-01", "2025-06-10")
    assert [r.id for r in kept] == ["a", "b", "c"]

    kept = filter_by_date_range(RESPONSES, "2025-06-02", "")
    assert [r.id for r in kept] == ["b", "c"]

    kept = filter_by_date_range(RESPONSES, "", "2025-06-05")
    assert [r.id for r in kept] == ["a", "b"]


def test_invalid_bound_is_ignored(caplog):
    with caplog.at_level(logging.WARNING, logger="survey_insights.filters"):
        kept = filter_by_date_range(RESPONSES, "06/01/2025", "2025-06-05")

    assert [r.id for r in kept] == ["a", "b"]
    assert "Ignoring invalid date bound" in caplog.text


def test_submissions_by_day_and_today():
    daily = submissions_by_day(RESPONSES + [_resp("e", "2025-06-05T01:00:00")])

    assert daily == [("2025-06-01", 1), ("2025-06-05", 2), ("2025-06-10", 1)]
    assert today_count(RESPONSES, today=date(2025, 6, 10)) == 1
    assert today_count(RESPONSES, today=date(2025, 6, 11)) == 0


def test_quick_ranges():
    today = date(2025, 6, 12)

    assert quick_range("7d", today) == ("2025-06-06", "2025-06-12")
    assert quick_range("30d", today) == ("2025-05-14", "2025-06-12")
    assert quick_range("month", today) == ("2025-06-01", "2025-06-12")
    assert quick_range("all", today) == ("", "")
    assert quick_range("custom", today) == ("", "")


def test_series_search():
    series = AggregatedSeries(
        field_id="q_team",
        label="Team size",
        section="About you",
        counts={"Engineering": 3},
        total=3,
    )

    assert series_matches_search(series, "")
    assert series_matches_search(series, "TEAM")
    assert series_matches_search(series, "engineer")
    assert series_matches_search(series, "about", section=series.section)
    assert not series_matches_search(series, "budget")
