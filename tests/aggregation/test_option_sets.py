"""Unit tests for aggregation.options (catalog indexing and ordering)."""
from __future__ import annotations

from survey_insights.aggregation.colors import ColorMap
from survey_insights.aggregation.options import (
    build_option_catalog,
    find_option_set,
    resolve_options,
)
from survey_insights.models import Field, FieldOption, OptionSet


def _set(set_id: str, name: str, *values: str, colors: dict | None = None) -> OptionSet:
    colors = colors or {}
    return OptionSet(
        id=set_id,
        name=name,
        options=[
            FieldOption(value=v, label=v, color=colors.get(v), order=i)
            for i, v in enumerate(values)
        ],
    )


def test_catalog_indexes_by_id_and_lowercase_name():
    scale = _set("rs1", "Agreement Scale", "Disagree", "Agree")
    catalog = build_option_catalog(rating_scales=[scale])

    assert catalog.rating_scales_by_id["rs1"] is scale
    assert catalog.rating_scales_by_name["agreement scale"] is scale
    assert catalog.radio_sets_by_id == {}


def test_rating_field_falls_back_to_name_lookup():
    scale = _set("rs1", "Agreement Scale", "Disagree", "Agree")
    catalog = build_option_catalog(rating_scales=[scale])
    fld = Field(
        id="q", type="rating", rating_scale_id="stale-id", rating_scale_name=" AGREEMENT scale"
    )

    assert find_option_set(fld, catalog) is scale


def test_radio_takes_precedence_over_select():
    radio = _set("r1", "Levels", "Low", "High")
    select = _set("s1", "Levels", "High", "Low")
    catalog = build_option_catalog(radio_sets=[radio], select_sets=[select])

    fld = Field(id="q", type="select", radio_option_set_id="r1", select_option_set_id="s1")
    assert find_option_set(fld, catalog) is radio

    only_select = Field(id="q", type="select", select_option_set_name="levels")
    assert find_option_set(only_select, catalog) is select


def test_multiselect_lookup():
    multi = _set("m1", "Channels", "Email", "Phone")
    catalog = build_option_catalog(multi_sets=[multi])
    fld = Field(id="q", type="multiselectdropdown", multi_select_option_set_id="m1")

    assert find_option_set(fld, catalog) is multi


def test_resolve_options_sorts_stably_and_registers_colors():
    option_set = OptionSet(
        id="r1",
        name="Risk",
        options=[
            FieldOption(value="Medium", label="Medium", order=2),
            FieldOption(value="High Risk", label="High Risk", color="#ff0000", order=3),
            FieldOption(value="Low", label="Low", order=1),
            FieldOption(value="Unknown", label="Unknown"),
            FieldOption(value="Other", label="Other", order=2),
        ],
    )
    catalog = build_option_catalog(radio_sets=[option_set])
    fld = Field(id="q", type="radio", radio_option_set_id="r1")
    colors = ColorMap()

    ordered = resolve_options(fld, catalog, colors)

    assert ordered == ["Unknown", "Low", "Medium", "Other", "High Risk"]
    assert colors["high risk"] == "#ff0000"
    assert colors["high-risk"] == "#ff0000"
    assert colors["High Risk"] == "#ff0000"
    assert "Medium" not in colors


def test_inline_options_used_for_untyped_fields():
    fld = Field(
        id="q",
        type="checkbox",
        inline_options=[
            FieldOption(value="b", label="Bee", order=2),
            FieldOption(value="a", label="Ay", color="#123456", order=1),
        ],
    )
    colors = ColorMap()

    assert resolve_options(fld, build_option_catalog(), colors) == ["a", "b"]
    assert colors["Ay"] == "#123456"


def test_unresolvable_set_returns_none():
    fld = Field(id="q", type="rating", rating_scale_id="missing")
    assert resolve_options(fld, build_option_catalog(), ColorMap()) is None

    plain = Field(id="q", type="text")
    assert resolve_options(plain, build_option_catalog(), ColorMap()) is None
