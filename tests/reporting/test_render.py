from __future__ import annotations

import json
from datetime import date

from survey_insights.aggregation import aggregate, build_option_catalog
from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.models import Field, Section, SurveyConfig, SurveyResponse
from survey_insights.reporting.render import render_report, series_to_json


def _survey() -> SurveyConfig:
    return SurveyConfig(
        title="Quarterly pulse",
        sections=[
            Section(
                id="s1",
                title="General",
                fields=[
                    Field(id="q1", label="R&D budget", type="radio"),
                    Field(id="n", label="Headcount", type="number"),
                ],
            )
        ],
    )


def _series():
    responses = [
        SurveyResponse(id="1", responses={"q1": "A", "n": 1}),
        SurveyResponse(id="2", responses={"q1": "A", "n": 5}),
        SurveyResponse(id="3", responses={"q1": "", "n": 9}),
    ]
    return aggregate(responses, _survey(), build_option_catalog())


def test_render_report_markdown():
    text = render_report(_series(), survey=_survey(), today=date(2025, 6, 12))

    assert text.startswith("# Quarterly pulse")
    assert "_Generated 2025-06-12" in text
    assert "## General" in text
    assert "### R&D budget" in text
    assert "| A | 2 | 66.7 |" in text
    assert "| (blank) | 1 | 33.3 |" in text
    assert "### Headcount (histogram)" in text


def test_render_report_without_series():
    text = render_report([], today=date(2025, 6, 12))

    assert "# Survey report" in text
    assert "_No answered questions in this range._" in text


def test_hidden_values_note(monkeypatch):
    monkeypatch.setattr("survey_insights.reporting.config.MAX_VALUES_PER_SERIES", 1)
    series = [
        AggregatedSeries(
            field_id="q", label="Q", section=None, counts={"a": 2, "b": 1, "c": 1}, total=4
        )
    ]

    text = render_report(series, today=date(2025, 6, 12))

    assert "## Other" in text
    assert "and 2 more values" in text


def test_series_to_json():
    payload = json.loads(series_to_json(_series()))

    assert [p["fieldId"] for p in payload] == ["q1", "n"]
    assert payload[0]["counts"] == {"A": 2, "": 1}
    assert payload[1]["type"] == "histogram"
    assert "colors" not in payload[1]
