"""Configuration constants for the reporting pipeline."""
from __future__ import annotations

import os

# Maximum value rows listed per series (authored options always come first)
MAX_VALUES_PER_SERIES: int = int(os.getenv("REPORT_MAX_VALUES_PER_SERIES", "10"))

# Width in characters of the text bar drawn next to each value
BAR_WIDTH: int = int(os.getenv("REPORT_BAR_WIDTH", "20"))

# Maximum number of series included in one report (safety cap)
MAX_SERIES: int = int(os.getenv("REPORT_MAX_SERIES", "200"))
