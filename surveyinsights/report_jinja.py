"""Jinja-based Markdown companion of the analytics report."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader

from .pdf_report import KEYWORD_TABLE_LIMIT, REPORT_TITLE
from .report_model import ReportModel
from .timeseries import TimeBucket

TEMPLATE_DIR = Path(__file__).parent / "report_templates"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_markdown_report(
    model: ReportModel,
    *,
    title: str = REPORT_TITLE,
    time_series: Optional[List[TimeBucket]] = None,
    keyword_limit: int = KEYWORD_TABLE_LIMIT,
) -> str:
    """Render the report sections as Markdown tables."""

    template = _environment().get_template("report.md.j2")
    return template.render(
        title=title,
        generated=model.generated_at.strftime("%Y-%m-%d"),
        stats=model.stats,
        question_scores=model.question_scores,
        themes=model.themes,
        keywords=model.keywords[:keyword_limit],
        client_types=model.client_types,
        time_series=time_series or [],
    )


def write_markdown_report(text: str, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text, encoding="utf-8")


__all__ = ["render_markdown_report", "write_markdown_report"]
