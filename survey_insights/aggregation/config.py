"""Configuration constants for the aggregation engine."""
from __future__ import annotations

import os
import re

# Histograms always render a fixed number of bars
HISTOGRAM_BUCKET_COUNT: int = 10

# Distinct answers above which an un-typed field without options is treated as free text
FREE_TEXT_UNIQUE_THRESHOLD: int = int(
    os.getenv("SURVEY_FREE_TEXT_UNIQUE_THRESHOLD", "8")
)

# Field types whose answers are free text by construction
FREE_TEXT_FIELD_TYPES: tuple[str, ...] = (
    "text",
    "textarea",
    "email",
    "name",
    "phone",
    "url",
)

# Label / id hints that a field collects free text
FREE_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(name|email|e-mail|phone|title|company|organization|org|dept|"
        r"department|address|city|state|country)",
        re.IGNORECASE,
    ),
)

# Fallback colors for common categorical answers (keys are lowercased)
DEFAULT_SEMANTIC_COLORS: dict[str, str] = {
    "high": "#ef4444",
    "very high": "#ef4444",
    "critical": "#ef4444",
    "medium": "#f59e0b",
    "moderate": "#f59e0b",
    "low": "#16a34a",
    "very low": "#16a34a",
    "not important": "#6b7280",
    "not-important": "#6b7280",
    "none": "#6b7280",
    "n/a": "#6b7280",
    "yes": "#16a34a",
    "true": "#16a34a",
    "no": "#ef4444",
    "false": "#ef4444",
    "both": "#0ea5e9",
    "mixed": "#0ea5e9",
}

# Used for free-text fields in neutral mode
NEUTRAL_GRAY: str = "#9ca3af"

CHART_PALETTE: tuple[str, ...] = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#14b8a6",
    "#f97316",
    "#0ea5e9",
    "#84cc16",
    "#a855f7",
)

# Named colors stored by the survey builder
NAMED_COLOR_MAP: dict[str, str] = {
    "green-light": "#10b981",
    "blue-light": "#3b82f6",
    "yellow-light": "#f59e0b",
    "red-light": "#ef4444",
    "purple-light": "#8b5cf6",
    "orange-light": "#f97316",
    "pink-light": "#ec4899",
    "cyan-light": "#06b6d4",
    "lime-light": "#84cc16",
    "indigo-light": "#6366f1",
}
