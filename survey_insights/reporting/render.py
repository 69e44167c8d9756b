"""Render survey reports using Jinja2 templates."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from jinja2 import Environment, FileSystemLoader

from survey_insights.aggregation.models import AggregatedSeries
from survey_insights.reporting.context import ReportContext, build_report_context

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown output doesn't need HTML escaping; it would mangle labels like "R&D".
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_context(context: ReportContext) -> str:
    """Render an already-built :class:`ReportContext` as markdown."""
    template = _env.get_template("report.md.j2")
    return template.render(**context.to_dict())


def render_report(series: Sequence[AggregatedSeries], **context_kwargs: Any) -> str:
    """Render a markdown report for *series*.

    Keyword arguments are forwarded to
    :func:`~survey_insights.reporting.context.build_report_context`.
    """
    context = build_report_context(series, **context_kwargs)
    text = render_context(context)
    logger.debug(
        "Report rendered: series=%d len=%d", len(context.series), len(text)
    )
    return text


def series_to_json(series: Sequence[AggregatedSeries], *, indent: int = 2) -> str:
    """Serialize *series* in the camelCase shape chart front ends consume."""
    payload: List[Dict[str, Any]] = [s.to_dict() for s in series]
    return json.dumps(payload, indent=indent, ensure_ascii=False)
