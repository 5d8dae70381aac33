"""Survey insights: analytics and reporting over survey responses."""

from . import (
    config,
    pdf_report,
    report_jinja,
    report_model,
    responses,
    scoring,
    stats,
    text_analysis,
    timeseries,
    validate_data,
)

__all__ = [
    "config",
    "pdf_report",
    "report_jinja",
    "report_model",
    "responses",
    "scoring",
    "stats",
    "text_analysis",
    "timeseries",
    "validate_data",
]
