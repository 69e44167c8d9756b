"""Data structures produced by the aggregation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from survey_insights.aggregation.colors import ColorMap

BAR = "bar"
HISTOGRAM = "histogram"


@dataclass(slots=True)
class AggregatedSeries:
    """One field's count distribution, ready for charting."""

    field_id: str
    label: str
    section: Optional[str]
    counts: Dict[str, int]
    total: int
    type: str = BAR
    ordered_values: Optional[List[str]] = None
    colors: Optional[ColorMap] = None
    neutral_mode: Optional[bool] = None

    def is_histogram(self) -> bool:
        return self.type == HISTOGRAM

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase payload consumed by chart front ends."""
        out: Dict[str, Any] = {
            "fieldId": self.field_id,
            "label": self.label,
            "section": self.section,
            "counts": dict(self.counts),
            "total": self.total,
            "type": self.type,
        }
        if self.type == BAR:
            out["orderedValues"] = (
                list(self.ordered_values) if self.ordered_values is not None else None
            )
            out["colors"] = self.colors.expanded() if self.colors is not None else {}
            out["neutralMode"] = bool(self.neutral_mode)
        return out
