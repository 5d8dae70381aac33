"""Validation of response-store exports before they enter the pipeline."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .responses import FEEDBACK_KEYS, NOT_APPLICABLE, RATING_KEYS, RATING_MAX, RATING_MIN


class ValidationError(RuntimeError):
    """Raised when validation detects blocking issues."""


@dataclass
class ColumnSchema:
    """Expected column in a response export."""

    name: str
    kind: str = "text"
    required: bool = True
    nullable: bool = True
    allowed_values: Optional[Sequence[Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "required": self.required,
            "nullable": self.nullable,
            "allowed_values": list(self.allowed_values) if self.allowed_values else None,
        }


@dataclass
class SchemaDefinition:
    columns: List[ColumnSchema]
    version: Optional[str] = None


def response_schema(allowed_values: Optional[Dict[str, Sequence[Any]]] = None) -> SchemaDefinition:
    """Schema of a response-store export, optionally restricting categorical columns."""

    allowed_values = allowed_values or {}
    unknown = set(allowed_values) - {"client_type", "service_availed", "region", "sex"}
    if unknown:
        raise ValueError(f"Allowed values can only restrict categorical columns, got: {sorted(unknown)}")
    schema = SchemaDefinition(
        version="1",
        columns=[
            ColumnSchema("id", nullable=False),
            ColumnSchema("client_type", nullable=False),
            ColumnSchema("service_availed", nullable=False),
            ColumnSchema("created_at", kind="timestamp", nullable=False),
            ColumnSchema("date_of_transaction", required=False),
            ColumnSchema("region", required=False),
            ColumnSchema("sex", required=False),
            ColumnSchema("age", kind="number", required=False),
            ColumnSchema("email", required=False),
            *[ColumnSchema(key, required=False) for key in FEEDBACK_KEYS],
            *[ColumnSchema(key, kind="rating", required=False) for key in RATING_KEYS],
        ],
    )
    for column in schema.columns:
        if column.name in allowed_values:
            column.allowed_values = list(allowed_values[column.name])
    return schema


RESPONSE_SCHEMA = response_schema()


@dataclass
class ValidationIssue:
    level: str
    column: Optional[str]
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "column": self.column,
            "message": self.message,
            "context": self.context,
        }


@dataclass
class ValidationReport:
    issues: List[ValidationIssue]
    data_signature: str
    row_count: int
    schema_version: Optional[str] = None
    validated_at: datetime = field(default_factory=datetime.now)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == "ERROR"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == "WARN"]

    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [issue.as_dict() for issue in self.issues],
            "data_signature": self.data_signature,
            "row_count": self.row_count,
            "schema_version": self.schema_version,
            "validated_at": self.validated_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# Column checks
# ---------------------------------------------------------------------------


def _present(series: pd.Series) -> pd.Series:
    """Values that are neither null nor a not-applicable token."""

    values = series.dropna()
    tokens = values.astype(str).str.strip().str.lower()
    return values[~tokens.isin(NOT_APPLICABLE)]


def _check_rating(name: str, series: pd.Series) -> Optional[ValidationIssue]:
    present = _present(series)
    numeric = pd.to_numeric(present, errors="coerce")
    # zero is read as "no rating"
    out_of_range = numeric.isna() | ((numeric != 0) & ((numeric < RATING_MIN) | (numeric > RATING_MAX)))
    out_of_range |= numeric.notna() & (numeric % 1 != 0)
    if out_of_range.any():
        return ValidationIssue(
            level="ERROR",
            column=name,
            message=f"Ratings must be {RATING_MIN}-{RATING_MAX} or not applicable",
            context={"count": int(out_of_range.sum()), "examples": present[out_of_range].astype(str).head(5).tolist()},
        )
    return None


def _check_timestamp(name: str, series: pd.Series) -> Optional[ValidationIssue]:
    present = series.dropna()
    parsed = pd.to_datetime(present.astype(object), errors="coerce", utc=True, format="ISO8601")
    bad = parsed.isna()
    if bad.any():
        return ValidationIssue(
            level="WARN",
            column=name,
            message="Unparseable timestamps are excluded from trends",
            context={"count": int(bad.sum())},
        )
    return None


def _check_number(name: str, series: pd.Series) -> Optional[ValidationIssue]:
    present = _present(series)
    bad = pd.to_numeric(present, errors="coerce").isna()
    if bad.any():
        return ValidationIssue(
            level="ERROR",
            column=name,
            message="Non-numeric values",
            context={"count": int(bad.sum())},
        )
    return None


_KIND_CHECKS = {
    "rating": _check_rating,
    "timestamp": _check_timestamp,
    "number": _check_number,
}


def _hash_dataframe(df: pd.DataFrame) -> str:
    csv_bytes = df.to_csv(index=False).encode("utf-8")
    return hashlib.sha256(csv_bytes).hexdigest()


def validate_responses(
    df: pd.DataFrame,
    schema: SchemaDefinition = RESPONSE_SCHEMA,
    *,
    log_path: Optional[Path] = None,
    halt_on_error: bool = True,
) -> ValidationReport:
    """Validate a response export frame against *schema*."""

    issues: List[ValidationIssue] = []
    present_columns = set(df.columns)

    for col_schema in schema.columns:
        name = col_schema.name
        if name not in df.columns:
            issues.append(
                ValidationIssue(
                    level="ERROR" if col_schema.required else "WARN",
                    column=name,
                    message="Missing required column" if col_schema.required else "Optional column missing",
                )
            )
            continue
        present_columns.discard(name)

        series = df[name]
        if not col_schema.nullable and series.isna().any():
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    column=name,
                    message="Null values not permitted",
                    context={"null_count": int(series.isna().sum())},
                )
            )

        check = _KIND_CHECKS.get(col_schema.kind)
        if check is not None:
            issue = check(name, series)
            if issue is not None:
                issues.append(issue)

        if col_schema.allowed_values is not None:
            invalid_values = sorted(set(series.dropna().astype(str)) - {str(v) for v in col_schema.allowed_values})
            if invalid_values:
                issues.append(
                    ValidationIssue(
                        level="ERROR",
                        column=name,
                        message="Values outside allowed set",
                        context={"invalid_values": invalid_values},
                    )
                )

    for extra in sorted(present_columns):
        issues.append(ValidationIssue(level="WARN", column=extra, message="Unexpected column present"))

    report = ValidationReport(
        issues=issues,
        data_signature=_hash_dataframe(df),
        row_count=len(df),
        schema_version=schema.version,
    )

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps({"ts": datetime.now().isoformat(), **report.to_dict()}, default=str) + "\n")

    if halt_on_error and report.has_errors():
        raise ValidationError(f"Validation failed with {len(report.errors)} error(s)")

    return report


def save_summary(report: ValidationReport, destination: Path) -> None:
    """Persist a human-readable audit summary."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    summary = {
        "validated_at": report.validated_at.isoformat(),
        "schema_version": report.schema_version,
        "data_signature": report.data_signature,
        "row_count": report.row_count,
        "error_count": len(report.errors),
        "warning_count": len(report.warnings),
        "issues": [issue.as_dict() for issue in report.issues],
    }
    destination.write_text(json.dumps(summary, indent=2, default=str), encoding="utf-8")


__all__ = [
    "RESPONSE_SCHEMA",
    "response_schema",
    "ColumnSchema",
    "SchemaDefinition",
    "ValidationError",
    "ValidationIssue",
    "ValidationReport",
    "validate_responses",
    "save_summary",
]
