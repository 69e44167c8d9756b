"""Response aggregation engine."""

from survey_insights.aggregation.engine import aggregate
from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.aggregation.options import OptionSetCatalog, build_option_catalog

__all__ = [
    "AggregatedSeries",
    "OptionSetCatalog",
    "aggregate",
    "build_option_catalog",
]
