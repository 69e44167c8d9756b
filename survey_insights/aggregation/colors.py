"""Color lookup for aggregated values.

Option colors are registered under a value *and* its label, and consumers
look them up with whatever spelling they hold ("High Risk", "high risk",
"high-risk").  :class:`ColorMap` indexes every write under the exact,
lowercase and strict spellings and resolves reads from the most exact tier
that matches.
"""
from __future__ import annotations

import re
from collections.abc import MutableMapping
from typing import Dict, Iterator, Mapping, Optional

from survey_insights.aggregation import config

__all__ = [
    "ColorMap",
    "normalize_key",
    "normalize_strict",
    "default_color_for_value",
    "compute_color_for_label",
    "hash_salt_from",
]

_STRICT_RE = re.compile(r"[^a-z0-9]+")
_HEX4_RE = re.compile(r"^#[0-9a-f]{4}$")
_HEX8_RE = re.compile(r"^#[0-9a-f]{8}$")
_ALPHA_FUNC_RE = re.compile(r"^(rgba|hsla)\((.*)\)$")


def normalize_key(value: object) -> str:
    """Lowercase and trim *value*."""
    return ("" if value is None else str(value)).lower().strip()


def normalize_strict(value: object) -> str:
    """Lowercase, trim and collapse every non-alphanumeric run into ``-``."""
    return _STRICT_RE.sub("-", normalize_key(value))


class ColorMap(MutableMapping):
    """Mapping from value spellings to colors.

    Colors are stored under the exact spelling written, its lowercase form
    and its strict form.  Lookups try those tiers in that order, so an exact
    spelling always gets its own color even when two values share a strict
    form ("<1 year" and ">1 year").  Within the lowercase and strict tiers
    the latest write wins.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._raw: Dict[str, str] = {}
        self._lower: Dict[str, str] = {}
        self._strict: Dict[str, str] = {}
        if initial:
            self.update(initial)

    def __getitem__(self, key: str) -> str:
        raw = str(key)
        if raw in self._raw:
            return self._raw[raw]
        lower = normalize_key(key)
        if lower in self._lower:
            return self._lower[lower]
        return self._strict[normalize_strict(key)]

    def __setitem__(self, key: str, color: str) -> None:
        self._raw[str(key)] = color
        self._lower[normalize_key(key)] = color
        self._strict[normalize_strict(key)] = color

    def __delitem__(self, key: str) -> None:
        """Remove the exact spelling, or every spelling *key* normalizes to."""
        raw = str(key)
        if raw in self._raw:
            doomed = [raw]
        else:
            lower = normalize_key(key)
            doomed = [k for k in self._raw if normalize_key(k) == lower]
            if not doomed:
                strict = normalize_strict(key)
                doomed = [k for k in self._raw if normalize_strict(k) == strict]
        if not doomed:
            raise KeyError(key)
        for k in doomed:
            del self._raw[k]
        self._reindex()

    def _reindex(self) -> None:
        self._lower = {}
        self._strict = {}
        for raw, color in self._raw.items():
            self._lower[normalize_key(raw)] = color
            self._strict[normalize_strict(raw)] = color

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def __repr__(self) -> str:
        return f"ColorMap({self._raw!r})"

    def expanded(self) -> Dict[str, str]:
        """Return a plain dict keyed by every raw, lowercase and strict spelling.

        Where spellings coincide the more exact tier wins.
        """
        out: Dict[str, str] = dict(self._strict)
        out.update(self._lower)
        out.update(self._raw)
        return out

    def register(
        self, value: Optional[str], label: Optional[str], color: Optional[str]
    ) -> None:
        """Register *color* for both the option *value* and its *label*."""
        if not color:
            return
        for entry in (value, label):
            if entry:
                self[entry] = color


def default_color_for_value(raw: object) -> Optional[str]:
    """Return the semantic fallback color for common answers like "Yes"/"High"."""
    return config.DEFAULT_SEMANTIC_COLORS.get(normalize_key(raw))


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _js_hash(text: str) -> int:
    """31-multiplier string hash with signed 32-bit wraparound."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def hash_salt_from(text: str) -> int:
    """Stable per-field salt so palette colors differ between charts."""
    return abs(_js_hash(text))


def palette_color_for(label: str, salt: int = 0) -> str:
    return config.CHART_PALETTE[abs(_js_hash(label) + salt) % len(config.CHART_PALETTE)]


def _is_transparent(value: Optional[str]) -> bool:
    if not value:
        return True
    v = value.strip().lower()
    if v in ("", "transparent", "none", "inherit", "#0000"):
        return True
    if _HEX4_RE.match(v) and v[-1] == "0":
        return True
    if _HEX8_RE.match(v) and v[-2:] == "00":
        return True
    match = _ALPHA_FUNC_RE.match(v)
    if match:
        try:
            return float(match.group(2).split(",")[-1].strip()) <= 0
        except ValueError:
            return False
    return False


def effective_color(candidate: Optional[str]) -> Optional[str]:
    """Resolve named colors and drop invisible ones."""
    if not candidate:
        return None
    c = candidate.strip()
    c = config.NAMED_COLOR_MAP.get(c, c)
    return None if _is_transparent(c) else c


def compute_color_for_label(
    label: str,
    colors: Optional[Mapping[str, str]] = None,
    *,
    neutral_mode: bool = False,
    salt: int = 0,
) -> str:
    """Pick the display color for *label*.

    Explicit option color first, then the semantic default, then neutral gray
    for free-text fields, finally a deterministic palette color.
    """
    candidate = effective_color(colors.get(label)) if colors else None
    if candidate:
        return candidate
    semantic = default_color_for_value(label)
    if semantic:
        return semantic
    if neutral_mode:
        return config.NEUTRAL_GRAY
    return palette_color_for(label, salt)
