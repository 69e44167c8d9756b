import json

import pytest

from survey_insights.main import build_parser, run

CONFIG = {
    "title": "Team pulse",
    "sections": [
        {
            "id": "s1",
            "title": "General",
            "fields": [
                {"id": "q1", "label": "Preferred option", "type": "radio", "radioOptionSetId": "rs1"},
                {"id": "q2", "label": "Years on team", "type": "number"},
            ],
        }
    ],
}

OPTION_SETS = {
    "radioOptionSets": [
        {"id": "rs1", "name": "Letters", "options": [{"value": "B", "order": 0}, {"value": "A", "order": 1}]}
    ]
}

RESPONSES = [
    {"id": "1", "submittedAt": "2025-06-01T10:00:00Z", "responses": {"q1": "A", "q2": 1}},
    {"id": "2", "submittedAt": "2025-06-05T10:00:00Z", "responses": {"q1": "B", "q2": 4}},
    {"id": "3", "submittedAt": "2025-06-09T10:00:00Z", "responses": {"general_preferred_option": "A"}},
]


@pytest.fixture()
def exports(tmp_path):
    paths = {}
    for name, payload in (("config", CONFIG), ("responses", RESPONSES), ("sets", OPTION_SETS)):
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        paths[name] = str(path)
    return paths


def _args(exports, *extra):
    return [
        "--config",
        exports["config"],
        "--responses",
        exports["responses"],
        "--option-sets",
        exports["sets"],
        *extra,
    ]


def test_json_output(exports, capsys):
    assert run(_args(exports, "--json")) == 0

    payload = json.loads(capsys.readouterr().out)
    bar, histogram = payload
    assert bar["fieldId"] == "q1"
    assert bar["counts"] == {"A": 2, "B": 1}
    assert bar["orderedValues"] == ["B", "A"]
    assert histogram["type"] == "histogram"
    assert sum(histogram["counts"].values()) == 2


def test_date_filter(exports, capsys):
    assert run(_args(exports, "--json", "--start", "2025-06-02", "--end", "2025-06-05")) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["counts"] == {"B": 1}


def test_search_filter(exports, capsys):
    assert run(_args(exports, "--json", "--search", "years")) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [s["fieldId"] for s in payload] == ["q2"]


def test_markdown_report(exports, capsys):
    assert run(_args(exports, "--title", "June pulse")) == 0

    out = capsys.readouterr().out
    assert out.startswith("# June pulse")
    assert "### Preferred option" in out


def test_missing_file_returns_error(tmp_path, capsys):
    code = run(["--config", str(tmp_path / "missing.json"), "--responses", str(tmp_path / "r.json")])

    assert code == 1
    assert capsys.readouterr().out == ""


def test_parser_rejects_unknown_range():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--config", "c", "--responses", "r", "--range", "year"])
