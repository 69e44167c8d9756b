"""Command-line entry point for Survey Insights.

Loads a survey config, its responses and the option-set catalog from JSON
exports, narrows the responses to a date range, aggregates them and prints a
markdown report (or the raw series as JSON with ``--json``).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from survey_insights.aggregation import aggregate
from survey_insights.aggregation.options import OptionSetCatalog
from survey_insights.exceptions import ConfigLoadError
from survey_insights.filters import (
    QUICK_RANGES,
    filter_by_date_range,
    quick_range,
    series_matches_search,
)
from survey_insights.loader import load_config, load_option_catalog, load_responses
from survey_insights.reporting.render import render_report, series_to_json

logger = logging.getLogger("survey_insights")


def _configure_logging() -> None:
    logging_level = os.environ.get("SURVEY_INSIGHTS_LOG_LEVEL", "INFO")
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging_level,
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survey-insights",
        description="Aggregate survey responses and print a per-question report.",
    )
    parser.add_argument("--config", required=True, help="Survey config JSON export")
    parser.add_argument("--responses", required=True, help="Survey responses JSON export")
    parser.add_argument(
        "--option-sets",
        help="JSON with ratingScales / radioOptionSets / selectOptionSets / multiSelectOptionSets",
    )
    parser.add_argument("--start", default="", help="First day to include (YYYY-MM-DD)")
    parser.add_argument("--end", default="", help="Last day to include (YYYY-MM-DD)")
    parser.add_argument(
        "--range",
        choices=QUICK_RANGES,
        help="Quick date range; overrides --start/--end",
    )
    parser.add_argument("--search", default="", help="Only keep questions matching TEXT")
    parser.add_argument("--title", help="Report title (defaults to the survey title)")
    parser.add_argument(
        "--json", action="store_true", help="Print aggregated series as JSON"
    )
    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Execute the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        survey = load_config(args.config)
        responses = load_responses(args.responses)
        catalog = (
            load_option_catalog(args.option_sets) if args.option_sets else OptionSetCatalog()
        )
    except ConfigLoadError as exc:
        logger.error("%s", exc)
        return 1

    start, end = args.start, args.end
    if args.range and args.range != "custom":
        start, end = quick_range(args.range)

    filtered = filter_by_date_range(responses, start, end)
    logger.info("Aggregating %d of %d responses", len(filtered), len(responses))

    series = aggregate(filtered, survey, catalog)
    if args.search:
        series = [
            s for s in series if series_matches_search(s, args.search, section=s.section)
        ]

    if args.json:
        print(series_to_json(series))
    else:
        print(
            render_report(
                series,
                survey=survey,
                responses=responses,
                filtered=filtered,
                title=args.title,
                start_date=start,
                end_date=end,
            )
        )
    return 0


def main() -> None:  # pragma: no cover - console script
    load_dotenv()
    _configure_logging()
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover
    main()
