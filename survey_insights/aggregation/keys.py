"""Field metadata and response-key resolution.

Survey authors rename fields and export formats change, so an answer to a
field may be stored under its id, under a slug of "section + label", under a
pretty "Section - Label" header, or under any of those built from a label the
field had in the past.  :func:`resolve_keys` enumerates those candidates in a
fixed order; the aggregation pass takes the first one present in a response.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from survey_insights.models import Field, Section, SurveyConfig

logger = logging.getLogger(__name__)

__all__ = [
    "FieldMetadata",
    "slugify",
    "create_descriptive_field_id",
    "resolve_keys",
    "build_field_metadata",
]

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase *text* and replace non-alphanumeric runs with ``_``."""
    return _SLUG_RE.sub("_", text.lower())


def create_descriptive_field_id(section_title: str, label: str) -> str:
    """Return the ``section_label`` slug the form layer stores answers under."""
    return f"{slugify(section_title)}_{slugify(label)}"


def _label_keys(section_title: str, label: str) -> List[str]:
    """Pretty and slug-variant keys for one (section, label) pair."""
    section_slug = slugify(section_title)
    field_slug = slugify(label)
    return [
        f"{section_title} {label}",
        f"{section_title} - {label}",
        f"{section_slug}_{field_slug}",
        f"{section_slug}-{field_slug}",
        f"{section_slug} {field_slug}",
    ]


def resolve_keys(fld: Field, section: Section) -> List[str]:
    """Return every response key that may hold *fld*'s answer, in lookup order.

    The list is de-duplicated, starts with ``fld.id`` and never raises: a
    candidate that cannot be built is left out.
    """
    possible: List[str] = [fld.id]

    try:
        possible.append(create_descriptive_field_id(section.title, fld.label))
    except (AttributeError, TypeError, ValueError) as exc:
        logger.debug("No descriptive id for field %s: %s", fld.id, exc)

    try:
        possible.extend(_label_keys(section.title, fld.label))
    except (AttributeError, TypeError, ValueError) as exc:
        logger.debug("No label keys for field %s: %s", fld.id, exc)

    for change in fld.label_history:
        try:
            possible.append(create_descriptive_field_id(section.title, change.label))
            possible.extend(_label_keys(section.title, change.label))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.debug(
                "Skipping label history entry %r of field %s: %s",
                change.label,
                fld.id,
                exc,
            )

    return list(dict.fromkeys(possible))


@dataclass(slots=True)
class FieldMetadata:
    """Per-field lookups derived from a :class:`SurveyConfig`.

    All dicts are keyed by field id and iterate in config order.
    """

    labels: Dict[str, str] = field(default_factory=dict)
    sections: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, Field] = field(default_factory=dict)
    descriptive_ids: Dict[str, str] = field(default_factory=dict)
    possible_keys: Dict[str, List[str]] = field(default_factory=dict)

    def field_ids(self) -> List[str]:
        return list(self.labels)

    def keys_for(self, field_id: str) -> List[str]:
        keys = self.possible_keys.get(field_id)
        if keys:
            return keys
        return [k for k in (field_id, self.descriptive_ids.get(field_id)) if k]


def _add_field(meta: FieldMetadata, fld: Field, section: Section) -> None:
    meta.labels[fld.id] = fld.label
    meta.sections[fld.id] = section.title
    meta.fields[fld.id] = fld
    try:
        meta.descriptive_ids[fld.id] = create_descriptive_field_id(
            section.title, fld.label
        )
    except (AttributeError, TypeError, ValueError):
        pass
    meta.possible_keys[fld.id] = resolve_keys(fld, section)


def build_field_metadata(config: Optional[SurveyConfig]) -> FieldMetadata:
    """Walk *config* (sections, then their subsections) and index every field.

    Subsection fields are attributed to the enclosing section's title.
    """
    meta = FieldMetadata()
    if config is None:
        return meta

    for section in config.sections:
        for fld in section.fields:
            _add_field(meta, fld, section)
        for subsection in section.subsections:
            for fld in subsection.fields:
                _add_field(meta, fld, section)

    logger.debug("Indexed %d survey fields", len(meta.labels))
    return meta
