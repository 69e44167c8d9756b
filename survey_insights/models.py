"""Domain models for survey configurations, option sets and responses.

Documents arrive either in the camelCase shape used by the survey builder
(``ratingScaleId``, ``submittedAt``) or as snake_case database rows
(``rating_scale_id``, ``submitted_at``).  The ``from_dict`` constructors
accept both so callers never have to care which provider produced a row.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "FieldOption",
    "LabelChange",
    "Field",
    "Subsection",
    "Section",
    "SurveyConfig",
    "OptionSet",
    "SurveyResponse",
    "parse_timestamp",
]


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-``None`` value found under any of *keys*."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _as_order(value: Any) -> Optional[float]:
    """Coerce a sort position to ``float``; unparseable positions become *None*."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric order %r", value)
        return None
    return parsed if math.isfinite(parsed) else None


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC ``datetime``.

    Naive timestamps are assumed to be UTC.  Unparseable input yields *None*.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        try:
            parsed = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Ignoring unparseable timestamp %r", raw)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(slots=True)
class FieldOption:
    """One selectable value of an option set or of a field's inline options."""

    value: str
    label: str = ""
    color: Optional[str] = None
    order: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldOption":
        value = _as_str(data.get("value"))
        label = _as_str(data.get("label"))
        return cls(
            value=value if value is not None else (label or ""),
            label=label if label is not None else (value or ""),
            color=data.get("color") or None,
            order=_as_order(data.get("order")),
        )


@dataclass(slots=True)
class LabelChange:
    """A previous label of a field, kept so renamed fields still match old rows."""

    label: Optional[str]
    changed_at: Optional[str] = None
    changed_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LabelChange":
        return cls(
            label=data.get("label"),
            changed_at=_pick(data, "changedAt", "changed_at"),
            changed_by=_pick(data, "changedBy", "changed_by"),
        )


@dataclass(slots=True)
class Field:
    """A single survey question."""

    id: str
    label: str = ""
    type: str = ""
    rating_scale_id: Optional[str] = None
    rating_scale_name: Optional[str] = None
    radio_option_set_id: Optional[str] = None
    radio_option_set_name: Optional[str] = None
    select_option_set_id: Optional[str] = None
    select_option_set_name: Optional[str] = None
    multi_select_option_set_id: Optional[str] = None
    multi_select_option_set_name: Optional[str] = None
    inline_options: List[FieldOption] = field(default_factory=list)
    label_history: List[LabelChange] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Field":
        return cls(
            id=str(data.get("id") or ""),
            label=str(data.get("label") or ""),
            type=str(_pick(data, "type", "fieldType", "field_type", default="")),
            rating_scale_id=_pick(data, "ratingScaleId", "rating_scale_id"),
            rating_scale_name=_pick(data, "ratingScaleName", "rating_scale_name"),
            radio_option_set_id=_pick(data, "radioOptionSetId", "radio_option_set_id"),
            radio_option_set_name=_pick(
                data, "radioOptionSetName", "radio_option_set_name"
            ),
            select_option_set_id=_pick(
                data, "selectOptionSetId", "select_option_set_id"
            ),
            select_option_set_name=_pick(
                data, "selectOptionSetName", "select_option_set_name"
            ),
            multi_select_option_set_id=_pick(
                data, "multiSelectOptionSetId", "multi_select_option_set_id"
            ),
            multi_select_option_set_name=_pick(
                data, "multiSelectOptionSetName", "multi_select_option_set_name"
            ),
            inline_options=[
                FieldOption.from_dict(o)
                for o in _pick(data, "options", "inlineOptions", "inline_options", default=[])
                if isinstance(o, Mapping)
            ],
            label_history=[
                LabelChange.from_dict(h)
                for h in _pick(data, "labelHistory", "label_history", default=[])
                if isinstance(h, Mapping)
            ],
        )


@dataclass(slots=True)
class Subsection:
    id: str
    title: str = ""
    order: float = 0
    fields: List[Field] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Subsection":
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            order=_as_order(_pick(data, "order", "orderIndex", "order_index")) or 0,
            fields=[Field.from_dict(f) for f in data.get("fields") or []],
        )


@dataclass(slots=True)
class Section:
    id: str
    title: str = ""
    order: float = 0
    fields: List[Field] = field(default_factory=list)
    subsections: List[Subsection] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Section":
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            order=_as_order(_pick(data, "order", "orderIndex", "order_index")) or 0,
            fields=[Field.from_dict(f) for f in data.get("fields") or []],
            subsections=[Subsection.from_dict(s) for s in data.get("subsections") or []],
        )


@dataclass(slots=True)
class SurveyConfig:
    """Authored definition of a survey: sections, subsections and fields."""

    sections: List[Section] = field(default_factory=list)
    id: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SurveyConfig":
        return cls(
            sections=[Section.from_dict(s) for s in data.get("sections") or []],
            id=_as_str(data.get("id")),
            title=_as_str(_pick(data, "title", "name")),
        )


@dataclass(slots=True)
class OptionSet:
    """A rating scale or a radio/select/multi-select option set."""

    id: str
    name: str = ""
    options: List[FieldOption] = field(default_factory=list)
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptionSet":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            options=[
                FieldOption.from_dict(o)
                for o in data.get("options") or []
                if isinstance(o, Mapping)
            ],
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
        )


@dataclass(slots=True)
class SurveyResponse:
    """One submission; ``responses`` keys are not guaranteed to be field ids."""

    responses: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    survey_instance_id: Optional[str] = None
    session_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SurveyResponse":
        payload = data.get("responses")
        return cls(
            responses=dict(payload) if isinstance(payload, Mapping) else {},
            id=_as_str(data.get("id")),
            survey_instance_id=_as_str(
                _pick(data, "surveyInstanceId", "survey_instance_id")
            ),
            session_id=_as_str(_pick(data, "sessionId", "session_id")),
            submitted_at=parse_timestamp(_pick(data, "submittedAt", "submitted_at")),
            metadata=dict(data.get("metadata") or {}),
        )
