"""Command-line entrypoint for the survey insights reporting pipeline."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from surveyinsights.config import PipelineConfig, load_config
from surveyinsights.pdf_report import ReportRenderError, render_pdf_report
from surveyinsights.report_jinja import render_markdown_report, write_markdown_report
from surveyinsights.report_model import ReportModel, build_report_model, save_model_json
from surveyinsights.responses import frame_to_responses, partition_frame, read_response_frame
from surveyinsights.text_analysis import word_cloud_frequencies
from surveyinsights.timeseries import Granularity, TimeBucket, bucket_responses
from surveyinsights.validate_data import (
    ValidationError,
    response_schema,
    save_summary as save_validation_summary,
    validate_responses,
)


class AuditLogger:
    """Minimal JSONL audit logger."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, level: str = "INFO", **fields: Any) -> None:
        record = {"ts": time.time(), "level": level, **fields}
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, sort_keys=True, default=str) + "\n")


def ensure_outputs(out_dir: Path) -> None:
    for sub in ("charts", "audit"):
        (out_dir / sub).mkdir(parents=True, exist_ok=True)


def write_chart_datasets(
    out_dir: Path,
    model: ReportModel,
    series: List[TimeBucket],
    granularity: Granularity,
    word_cloud: Dict[str, int],
) -> List[Path]:
    """Write the plain data shapes consumed by the charting front end."""

    datasets: Dict[str, Any] = {
        f"responses_by_{granularity.value}": [bucket.as_dict() for bucket in series],
        "question_scores": [score.as_dict() for score in model.question_scores],
        "client_types": [{"name": d.label, "value": d.count} for d in model.client_types],
        "satisfaction_distribution": [{"rating": d.label, "count": d.count} for d in model.satisfaction_distribution],
        "themes": [{"theme": t.theme, "count": t.count} for t in model.themes],
        "keywords": [{"word": k.word, "count": k.count} for k in model.keywords],
        "word_cloud": word_cloud,
    }
    written: List[Path] = []
    for name, payload in datasets.items():
        path = out_dir / "charts" / f"{name}.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        written.append(path)
    return written


def _apply_overrides(cfg: PipelineConfig, namespace: argparse.Namespace) -> PipelineConfig:
    if namespace.granularity:
        cfg = replace(cfg, granularity=Granularity.parse(namespace.granularity))
    if namespace.now:
        cfg = replace(cfg, now=datetime.fromisoformat(namespace.now))
    return cfg


def main(args: List[str] | None = None) -> Path:
    parser = argparse.ArgumentParser(description="Build the survey analytics report")
    parser.add_argument("config", type=Path, help="Path to the pipeline config YAML")
    parser.add_argument("--granularity", choices=[g.value for g in Granularity], help="Override the trend window size")
    parser.add_argument("--now", help="ISO timestamp used as the end of the trend windows")
    namespace = parser.parse_args(args=args)

    cfg = _apply_overrides(load_config(namespace.config), namespace)
    out_dir = cfg.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    ensure_outputs(out_dir)

    audit = AuditLogger(out_dir / "audit.jsonl")
    audit.log(event="pipeline_start", config=str(namespace.config), granularity=cfg.granularity.value)

    df = read_response_frame(cfg.input_path)
    audit.log(event="data_loaded", rows=len(df), path=str(cfg.input_path))

    try:
        validation_report = validate_responses(
            df,
            response_schema(cfg.allowed_values),
            log_path=out_dir / "audit" / "validation.jsonl",
            halt_on_error=cfg.halt_on_error,
        )
    except ValidationError as exc:
        audit.log(level="ERROR", event="data_validation_failed", message=str(exc))
        raise
    save_validation_summary(validation_report, out_dir / "audit" / "validation_summary.json")
    audit.log(
        event="data_validated",
        data_signature=validation_report.data_signature,
        errors=len(validation_report.errors),
        warnings=len(validation_report.warnings),
    )

    if cfg.halt_on_error:
        try:
            responses = frame_to_responses(df)
        except ValueError as exc:
            audit.log(level="ERROR", event="response_conversion_failed", message=str(exc))
            raise
    else:
        responses, rejected = partition_frame(df)
        if rejected:
            audit.log(
                level="WARN",
                event="rows_skipped",
                count=len(rejected),
                rows=[row.as_dict() for row in rejected],
            )

    generated_at = datetime.now()
    model = build_report_model(responses, generated_at=generated_at, keyword_limit=cfg.keyword_limit)
    series = bucket_responses(responses, cfg.granularity, now=cfg.now or generated_at)
    audit.log(
        event="analysis_complete",
        responses=model.stats.total_responses,
        themes=len(model.themes),
        keywords=len(model.keywords),
        buckets=len(series),
    )

    save_model_json(model, out_dir / "report_model.json")
    charts = write_chart_datasets(out_dir, model, series, cfg.granularity, word_cloud_frequencies(responses))
    audit.log(event="chart_data_written", files=[p.name for p in charts])

    markdown = render_markdown_report(
        model, title=cfg.title, time_series=series, keyword_limit=cfg.keyword_table_limit
    )
    write_markdown_report(markdown, out_dir / "report.md")
    audit.log(event="markdown_rendered", path=str(out_dir / "report.md"))

    try:
        rendered = render_pdf_report(
            model, generated_at, title=cfg.title, keyword_limit=cfg.keyword_table_limit
        )
    except ReportRenderError as exc:
        audit.log(level="ERROR", event="pdf_render_failed", message=str(exc))
        raise
    pdf_path = rendered.save(out_dir)
    audit.log(event="pdf_rendered", path=str(pdf_path), pages=rendered.page_count)

    audit.log(event="pipeline_complete")
    return out_dir


if __name__ == "__main__":  # pragma: no cover
    main()
