"""Pipeline configuration loaded from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

try:  # Optional dependency
    import yaml as _yaml
except ModuleNotFoundError:  # pragma: no cover
    _yaml = None

from .pdf_report import KEYWORD_TABLE_LIMIT, REPORT_TITLE
from .report_model import KEYWORD_LIMIT
from .timeseries import Granularity


@dataclass
class PipelineConfig:
    input_path: Path
    output_dir: Path = Path("outputs")
    granularity: Granularity = Granularity.WEEK
    now: Optional[datetime] = None
    title: str = REPORT_TITLE
    keyword_limit: int = KEYWORD_LIMIT
    keyword_table_limit: int = KEYWORD_TABLE_LIMIT
    halt_on_error: bool = True
    allowed_values: Dict[str, List[Any]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "PipelineConfig":
        data = mapping.get("data") or {}
        validation = mapping.get("validation") or {}
        timeseries = mapping.get("timeseries") or {}
        report = mapping.get("report") or {}
        outputs = mapping.get("outputs") or {}

        if not data.get("input"):
            raise ValueError("Configuration must define data.input")
        now = timeseries.get("now")
        if isinstance(now, str):
            now = datetime.fromisoformat(now)
        elif isinstance(now, date) and not isinstance(now, datetime):
            now = datetime.combine(now, time())

        return cls(
            input_path=Path(data["input"]),
            output_dir=Path(outputs.get("dir", "outputs")),
            granularity=Granularity.parse(timeseries.get("granularity", Granularity.WEEK)),
            now=now,
            title=report.get("title", REPORT_TITLE),
            keyword_limit=int(report.get("keyword_limit", KEYWORD_LIMIT)),
            keyword_table_limit=int(report.get("keyword_table_limit", KEYWORD_TABLE_LIMIT)),
            halt_on_error=bool(validation.get("halt_on_error", True)),
            allowed_values=dict(validation.get("allowed_values") or {}),
        )


def load_config(path: Path) -> PipelineConfig:
    """Read a YAML pipeline config; relative paths resolve against its directory."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if _yaml is None:
        raise RuntimeError("PyYAML is required to load configuration files.")
    with path.open("r", encoding="utf-8") as fh:
        cfg = PipelineConfig.from_mapping(_yaml.safe_load(fh) or {})
    base = path.parent
    if not cfg.input_path.is_absolute():
        cfg.input_path = base / cfg.input_path
    if not cfg.output_dir.is_absolute():
        cfg.output_dir = base / cfg.output_dir
    return cfg


__all__ = ["PipelineConfig", "load_config"]
