import json
from pathlib import Path

import pytest

pd = pytest.importorskip("pandas")
yaml = pytest.importorskip("yaml")
pytest.importorskip("reportlab")

import cli
from surveyinsights.pdf_report import ReportRenderError
from surveyinsights.validate_data import ValidationError


def _write_inputs(tmp_path: Path, sqd0=(5, 3, "na"), halt_on_error: bool = True) -> Path:
    pd.DataFrame(
        {
            "id": ["1", "2", "3"],
            "client_type": ["Citizen", "Business", "Citizen"],
            "service_availed": ["Permit", "Cedula", "Permit"],
            "created_at": ["2026-10-18T09:00:00", "2026-10-12T09:00:00", "garbled"],
            "sqd0": list(sqd0),
            "cc1": ["great service, thank you", None, "long wait"],
            "suggestions": [None, "more staff please", None],
        }
    ).to_csv(tmp_path / "responses.csv", index=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "data": {"input": "responses.csv"},
                "validation": {"halt_on_error": halt_on_error},
                "timeseries": {"granularity": "day", "now": "2026-10-19T12:00:00"},
                "report": {"title": "Citizen Satisfaction"},
                "outputs": {"dir": "out"},
            }
        ),
        encoding="utf-8",
    )
    return config_path


def _events(out_dir: Path) -> list:
    lines = (out_dir / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_pipeline_writes_all_artefacts(tmp_path: Path) -> None:
    config_path = _write_inputs(tmp_path)
    out_dir = cli.main([str(config_path), "--granularity", "week"])

    assert out_dir == tmp_path / "out"
    pdfs = list(out_dir.glob("survey-analytics-*.pdf"))
    assert len(pdfs) == 1
    assert pdfs[0].read_bytes().startswith(b"%PDF")
    assert (out_dir / "report.md").read_text(encoding="utf-8").startswith("# Citizen Satisfaction")

    model = json.loads((out_dir / "report_model.json").read_text(encoding="utf-8"))
    assert model["stats"]["total_responses"] == 3
    assert model["stats"]["average_satisfaction"] == 4.0

    weekly = json.loads((out_dir / "charts" / "responses_by_week.json").read_text(encoding="utf-8"))
    assert len(weekly) == 8
    assert [b["count"] for b in weekly][-2:] == [1, 1]

    events = [e["event"] for e in _events(out_dir)]
    assert events[0] == "pipeline_start"
    assert "pdf_rendered" in events
    assert "rows_skipped" not in events
    assert events[-1] == "pipeline_complete"


def test_pipeline_halts_on_invalid_ratings(tmp_path: Path) -> None:
    config_path = _write_inputs(tmp_path, sqd0=(5, 9, 4))
    with pytest.raises(ValidationError):
        cli.main([str(config_path)])
    events = _events(tmp_path / "out")
    assert events[-1]["event"] == "data_validation_failed"
    assert events[-1]["level"] == "ERROR"


def test_pipeline_skips_invalid_rows_when_errors_are_tolerated(tmp_path: Path) -> None:
    config_path = _write_inputs(tmp_path, sqd0=(5, 9, 4), halt_on_error=False)
    out_dir = cli.main([str(config_path)])

    events = _events(out_dir)
    validated = next(e for e in events if e["event"] == "data_validated")
    assert validated["errors"] == 1
    skipped = next(e for e in events if e["event"] == "rows_skipped")
    assert skipped["level"] == "WARN"
    assert skipped["count"] == 1
    assert skipped["rows"][0]["id"] == "2"
    assert "9" in skipped["rows"][0]["reason"]
    assert events[-1]["event"] == "pipeline_complete"

    model = json.loads((out_dir / "report_model.json").read_text(encoding="utf-8"))
    assert model["stats"]["total_responses"] == 2
    assert model["stats"]["average_satisfaction"] == 4.5
    assert list(out_dir.glob("survey-analytics-*.pdf"))


def test_pipeline_audits_pdf_render_failure(tmp_path: Path, monkeypatch) -> None:
    def _fail(*args, **kwargs):
        raise ReportRenderError("Unable to render report: disk full")

    monkeypatch.setattr(cli, "render_pdf_report", _fail)
    config_path = _write_inputs(tmp_path)
    with pytest.raises(ReportRenderError):
        cli.main([str(config_path)])

    out_dir = tmp_path / "out"
    events = _events(out_dir)
    assert events[-1]["event"] == "pdf_render_failed"
    assert events[-1]["level"] == "ERROR"
    assert "disk full" in events[-1]["message"]
    assert (out_dir / "report.md").exists()
    assert not list(out_dir.glob("survey-analytics-*.pdf"))
