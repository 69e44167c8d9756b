"""Option-set catalog and per-field ordering/color resolution."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from survey_insights.aggregation.colors import ColorMap, normalize_key
from survey_insights.models import Field, FieldOption, OptionSet

__all__ = [
    "OptionSetCatalog",
    "build_option_catalog",
    "find_option_set",
    "resolve_options",
]

_CHOICE_TYPES = ("radio", "select")
_MULTI_TYPES = ("multiselect", "multiselectdropdown")


@dataclass(slots=True)
class OptionSetCatalog:
    """Option sets of each family indexed by id and by lowercased name."""

    rating_scales_by_id: Dict[str, OptionSet] = field(default_factory=dict)
    rating_scales_by_name: Dict[str, OptionSet] = field(default_factory=dict)
    radio_sets_by_id: Dict[str, OptionSet] = field(default_factory=dict)
    radio_sets_by_name: Dict[str, OptionSet] = field(default_factory=dict)
    select_sets_by_id: Dict[str, OptionSet] = field(default_factory=dict)
    select_sets_by_name: Dict[str, OptionSet] = field(default_factory=dict)
    multi_sets_by_id: Dict[str, OptionSet] = field(default_factory=dict)
    multi_sets_by_name: Dict[str, OptionSet] = field(default_factory=dict)


def _index(
    sets: Iterable[OptionSet], by_id: Dict[str, OptionSet], by_name: Dict[str, OptionSet]
) -> None:
    for option_set in sets:
        by_id[option_set.id] = option_set
        by_name[normalize_key(option_set.name)] = option_set


def build_option_catalog(
    rating_scales: Iterable[OptionSet] = (),
    radio_sets: Iterable[OptionSet] = (),
    select_sets: Iterable[OptionSet] = (),
    multi_sets: Iterable[OptionSet] = (),
) -> OptionSetCatalog:
    """Build both indexes for each of the four option-set collections."""
    catalog = OptionSetCatalog()
    _index(rating_scales, catalog.rating_scales_by_id, catalog.rating_scales_by_name)
    _index(radio_sets, catalog.radio_sets_by_id, catalog.radio_sets_by_name)
    _index(select_sets, catalog.select_sets_by_id, catalog.select_sets_by_name)
    _index(multi_sets, catalog.multi_sets_by_id, catalog.multi_sets_by_name)
    return catalog


def _lookup(
    set_id: Optional[str],
    set_name: Optional[str],
    by_id: Dict[str, OptionSet],
    by_name: Dict[str, OptionSet],
) -> Optional[OptionSet]:
    if set_id and set_id in by_id:
        return by_id[set_id]
    if set_name:
        return by_name.get(normalize_key(set_name))
    return None


def find_option_set(fld: Field, catalog: OptionSetCatalog) -> Optional[OptionSet]:
    """Return the catalog set *fld* references, according to its type."""
    if fld.type == "rating":
        return _lookup(
            fld.rating_scale_id,
            fld.rating_scale_name,
            catalog.rating_scales_by_id,
            catalog.rating_scales_by_name,
        )
    if fld.type in _CHOICE_TYPES:
        return _lookup(
            fld.radio_option_set_id,
            fld.radio_option_set_name,
            catalog.radio_sets_by_id,
            catalog.radio_sets_by_name,
        ) or _lookup(
            fld.select_option_set_id,
            fld.select_option_set_name,
            catalog.select_sets_by_id,
            catalog.select_sets_by_name,
        )
    if fld.type in _MULTI_TYPES:
        return _lookup(
            fld.multi_select_option_set_id,
            fld.multi_select_option_set_name,
            catalog.multi_sets_by_id,
            catalog.multi_sets_by_name,
        )
    return None


def _sorted_options(options: Sequence[FieldOption]) -> List[FieldOption]:
    # sorted() is stable, ties keep authored order
    return sorted(options, key=lambda o: o.order or 0)


def resolve_options(
    fld: Field, catalog: OptionSetCatalog, colors: ColorMap
) -> Optional[List[str]]:
    """Return *fld*'s authored value order and register option colors.

    Returns *None* when neither a catalog set nor inline options apply.
    """
    if fld.type == "rating" or fld.type in _CHOICE_TYPES or fld.type in _MULTI_TYPES:
        option_set = find_option_set(fld, catalog)
        if option_set is None:
            return None
        options = _sorted_options(option_set.options)
    elif fld.inline_options:
        options = _sorted_options(fld.inline_options)
    else:
        return None

    for option in options:
        colors.register(option.value, option.label, option.color)
    return [option.value for option in options]
