"""Survey response records as delivered by the response store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

RATING_KEYS: Tuple[str, ...] = tuple(f"sqd{i}" for i in range(9))
FEEDBACK_KEYS: Tuple[str, ...] = ("suggestions", "cc1", "cc2", "cc3")
NOT_APPLICABLE = {"", "na", "n/a", "none", "-"}
RATING_MIN = 1
RATING_MAX = 5


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in NOT_APPLICABLE
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def parse_rating(value: Any) -> Optional[int]:
    """Return a 1–5 rating, or ``None`` for absent / not applicable / zero."""

    if _is_missing(value):
        return None
    rating = float(value)
    if rating == 0:
        return None
    if not rating.is_integer() or not RATING_MIN <= rating <= RATING_MAX:
        raise ValueError(f"Rating outside {RATING_MIN}-{RATING_MAX}: {value!r}")
    return int(rating)


def _parse_age(value: Any) -> Optional[int]:
    if _is_missing(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Age is not a number: {value!r}") from None


@dataclass(frozen=True)
class SurveyResponse:
    """One immutable survey submission."""

    id: str
    client_type: str
    service_availed: str
    created_at: str | datetime
    region: Optional[str] = None
    sex: Optional[str] = None
    age: Optional[int] = None
    date_of_transaction: Optional[str] = None
    cc1: Optional[str] = None
    cc2: Optional[str] = None
    cc3: Optional[str] = None
    sqd0: Optional[int] = None
    sqd1: Optional[int] = None
    sqd2: Optional[int] = None
    sqd3: Optional[int] = None
    sqd4: Optional[int] = None
    sqd5: Optional[int] = None
    sqd6: Optional[int] = None
    sqd7: Optional[int] = None
    sqd8: Optional[int] = None
    suggestions: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SurveyResponse":
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in mapping.items():
            if key not in known:
                continue
            if key in RATING_KEYS:
                values[key] = parse_rating(raw)
            elif key == "age":
                values[key] = _parse_age(raw)
            elif key == "created_at" and isinstance(raw, datetime):
                values[key] = raw
            else:
                values[key] = _text(raw)
        for required in ("id", "client_type", "service_availed", "created_at"):
            if values.get(required) is None:
                raise ValueError(f"Response is missing required field '{required}'")
        return cls(**values)

    def ratings(self) -> Tuple[Optional[int], ...]:
        return (
            self.sqd0,
            self.sqd1,
            self.sqd2,
            self.sqd3,
            self.sqd4,
            self.sqd5,
            self.sqd6,
            self.sqd7,
            self.sqd8,
        )

    def feedback_fields(self) -> List[str]:
        """Non-empty free-text slots, suggestions first."""

        slots = (self.suggestions, self.cc1, self.cc2, self.cc3)
        return [slot for slot in slots if slot and slot.strip()]

    def has_feedback(self) -> bool:
        return bool(self.feedback_fields())


def frame_to_responses(df: pd.DataFrame) -> List[SurveyResponse]:
    """Convert a response-store frame into records, preserving row order."""

    return [SurveyResponse.from_mapping(row) for row in df.to_dict(orient="records")]


@dataclass(frozen=True)
class RejectedRow:
    """A frame row that could not be turned into a response."""

    index: int
    id: Optional[str]
    reason: str

    def as_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "id": self.id, "reason": self.reason}


def partition_frame(df: pd.DataFrame) -> Tuple[List[SurveyResponse], List[RejectedRow]]:
    """Convert the rows that parse and set aside the ones that do not.

    Used when validation errors are tolerated: rows carrying an out-of-scale
    rating, a non-numeric age or a missing identity field are returned as
    :class:`RejectedRow` entries instead of aborting the whole conversion.
    """

    responses: List[SurveyResponse] = []
    rejected: List[RejectedRow] = []
    for position, row in enumerate(df.to_dict(orient="records")):
        try:
            responses.append(SurveyResponse.from_mapping(row))
        except ValueError as exc:
            rejected.append(RejectedRow(index=position, id=_text(row.get("id")), reason=str(exc)))
    return responses, rejected


def read_response_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Response file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype={"id": str})
    if suffix == ".json":
        return pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    raise ValueError(f"Unsupported response file type: {path.suffix}")


def load_responses(path: Path) -> List[SurveyResponse]:
    """Load responses from a CSV or JSON export of the store."""

    return frame_to_responses(read_response_frame(path))


def responses_to_frame(responses: Iterable[SurveyResponse]) -> pd.DataFrame:
    rows = [asdict(r) for r in responses]
    return pd.DataFrame(rows, columns=[f.name for f in fields(SurveyResponse)])


__all__ = [
    "FEEDBACK_KEYS",
    "RATING_KEYS",
    "SurveyResponse",
    "parse_rating",
    "frame_to_responses",
    "partition_frame",
    "RejectedRow",
    "read_response_frame",
    "load_responses",
    "responses_to_frame",
]
