"""Load survey configs, responses and option sets from JSON exports."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Union

from survey_insights.aggregation.options import OptionSetCatalog, build_option_catalog
from survey_insights.exceptions import ConfigLoadError
from survey_insights.models import OptionSet, SurveyConfig, SurveyResponse

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# (camelCase, snake_case) collection names in option-set exports
_OPTION_COLLECTIONS = {
    "rating_scales": ("ratingScales", "rating_scales"),
    "radio_sets": ("radioOptionSets", "radio_option_sets"),
    "select_sets": ("selectOptionSets", "select_option_sets"),
    "multi_sets": ("multiSelectOptionSets", "multi_select_option_sets"),
}


def load_json(path: PathLike) -> Any:
    """Read and decode a JSON file, wrapping failures in :class:`ConfigLoadError`."""
    p = Path(path)
    try:
        with p.open(encoding="utf-8") as fh:
            return json.load(fh)
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read {p}: {exc}", str(p)) from exc
    except json.JSONDecodeError as exc:
        raise ConfigLoadError(f"Invalid JSON in {p}: {exc}", str(p)) from exc


def load_config(path: PathLike) -> SurveyConfig:
    data = load_json(path)
    if not isinstance(data, Mapping):
        raise ConfigLoadError(f"Survey config in {path} must be a JSON object", str(path))
    config = SurveyConfig.from_dict(data)
    logger.info("Loaded survey config with %d sections from %s", len(config.sections), path)
    return config


def load_responses(path: PathLike) -> List[SurveyResponse]:
    """Load responses from a JSON array or an object with a ``responses`` array."""
    data = load_json(path)
    if isinstance(data, Mapping):
        data = data.get("responses")
    if not isinstance(data, list):
        raise ConfigLoadError(f"Expected a list of responses in {path}", str(path))

    responses = [SurveyResponse.from_dict(row) for row in data if isinstance(row, Mapping)]
    skipped = len(data) - len(responses)
    if skipped:
        logger.warning("Skipped %d malformed response rows in %s", skipped, path)
    logger.info("Loaded %d responses from %s", len(responses), path)
    return responses


def catalog_from_dict(data: Mapping[str, Any]) -> OptionSetCatalog:
    """Build an :class:`OptionSetCatalog` from an export holding the four collections."""
    collections = {}
    for target, names in _OPTION_COLLECTIONS.items():
        rows = next((data[n] for n in names if isinstance(data.get(n), list)), [])
        collections[target] = [
            OptionSet.from_dict(row) for row in rows if isinstance(row, Mapping)
        ]
    return build_option_catalog(**collections)


def load_option_catalog(path: PathLike) -> OptionSetCatalog:
    data = load_json(path)
    if not isinstance(data, Mapping):
        raise ConfigLoadError(f"Option sets in {path} must be a JSON object", str(path))
    return catalog_from_dict(data)
