"""Aggregate raw survey responses into per-field :class:`AggregatedSeries`."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from survey_insights.aggregation.colors import ColorMap, default_color_for_value
from survey_insights.aggregation.histogram import create_histogram_buckets
from survey_insights.aggregation.keys import FieldMetadata, build_field_metadata
from survey_insights.aggregation.models import BAR, HISTOGRAM, AggregatedSeries
from survey_insights.aggregation.neutral import should_use_neutral_mode
from survey_insights.aggregation.options import OptionSetCatalog, resolve_options
from survey_insights.models import SurveyConfig, SurveyResponse

logger = logging.getLogger(__name__)

_MISSING = object()


def stringify(value: Any) -> str:
    """Render an answer the way it appears in exported JSON payloads."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


def _find_value(
    payload: Mapping[str, Any], keys: List[str], field_id: str, response_id: Optional[str]
) -> Any:
    """Return the value under the first candidate key present in *payload*.

    Later candidates holding a different non-blank value are reported but
    never override the first match.
    """
    found: Any = _MISSING
    found_key = ""
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if found is _MISSING:
            found, found_key = value, key
        elif not _is_blank(value) and not _is_blank(found) and value != found:
            logger.warning(
                "ambiguous_response_key",
                extra={
                    "field_id": field_id,
                    "response_id": response_id,
                    "used_key": found_key,
                    "ignored_key": key,
                },
            )
            break
    return found


def _tally(
    responses: Iterable[SurveyResponse], meta: FieldMetadata
) -> Dict[str, Counter]:
    field_counts: Dict[str, Counter] = {fid: Counter() for fid in meta.field_ids()}

    for response in responses:
        payload = response.responses or {}
        for fid, counts in field_counts.items():
            value = _find_value(payload, meta.keys_for(fid), fid, response.id)
            if value is _MISSING:
                continue
            if isinstance(value, (list, tuple)):
                for item in value:
                    counts[stringify(item)] += 1
            else:
                counts[stringify(value)] += 1
    return field_counts


def _apply_default_colors(counts: Mapping[str, int], colors: ColorMap) -> None:
    for value in counts:
        if value in colors:
            continue
        fallback = default_color_for_value(value)
        if fallback:
            colors[value] = fallback


def aggregate(
    responses: Iterable[SurveyResponse],
    config: Optional[SurveyConfig],
    option_sets: Optional[OptionSetCatalog] = None,
) -> List[AggregatedSeries]:
    """Build one series per answered field, in survey order.

    The function is pure; it does not mutate *responses*, *config* or
    *option_sets*.  Fields nobody answered produce no series.
    """
    catalog = option_sets or OptionSetCatalog()
    meta = build_field_metadata(config)
    field_counts = _tally(responses, meta)

    series: List[AggregatedSeries] = []
    for fid, counter in field_counts.items():
        counts = dict(counter)
        total = sum(counts.values())
        if total == 0:
            continue

        fld = meta.fields[fid]
        label = meta.labels.get(fid) or fid
        section = meta.sections.get(fid)

        if fld.type == "number":
            buckets = create_histogram_buckets(counts)
            if buckets is not None:
                series.append(
                    AggregatedSeries(
                        field_id=fid,
                        label=label,
                        section=section,
                        counts=buckets,
                        total=sum(buckets.values()),
                        type=HISTOGRAM,
                    )
                )
                continue

        colors = ColorMap()
        ordered_values = resolve_options(fld, catalog, colors)
        _apply_default_colors(counts, colors)
        neutral_mode = should_use_neutral_mode(
            fid, fld.type, meta.labels.get(fid, ""), ordered_values, len(counts)
        )

        series.append(
            AggregatedSeries(
                field_id=fid,
                label=label,
                section=section,
                counts=counts,
                total=total,
                type=BAR,
                ordered_values=ordered_values,
                colors=colors,
                neutral_mode=neutral_mode,
            )
        )

    logger.debug(
        "Aggregated %d series from %d known fields", len(series), len(field_counts)
    )
    return series
