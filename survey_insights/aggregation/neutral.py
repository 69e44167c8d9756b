"""Free-text detection: fields whose answers should not be color-coded."""
from __future__ import annotations

from typing import Optional, Sequence

from survey_insights.aggregation import config


def _hinted(text: str) -> bool:
    return any(pattern.search(text) for pattern in config.FREE_TEXT_PATTERNS)


def should_use_neutral_mode(
    field_id: str,
    field_type: str,
    label: str,
    ordered_values: Optional[Sequence[str]] = None,
    unique_count: int = 0,
) -> bool:
    """Return *True* when the field looks like free text.

    Type, label and id hints are checked first; failing those, a field with no
    authored options, not numeric, with more than
    ``FREE_TEXT_UNIQUE_THRESHOLD`` distinct answers counts as free text.
    """
    type_lower = (field_type or "").lower()

    if type_lower in config.FREE_TEXT_FIELD_TYPES:
        return True
    if _hinted((label or "").lower()) or _hinted((field_id or "").lower()):
        return True

    return (
        not ordered_values
        and type_lower != "number"
        and unique_count > config.FREE_TEXT_UNIQUE_THRESHOLD
    )
