"""Fixed-window response counts for the trend chart."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .responses import SurveyResponse


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def bucket_count(self) -> int:
        return _BUCKET_COUNTS[self]

    @classmethod
    def parse(cls, value: "Granularity | str") -> "Granularity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(g.value for g in cls)
            raise ValueError(f"Unknown granularity {value!r}; expected one of: {allowed}") from None


_BUCKET_COUNTS: Dict[Granularity, int] = {
    Granularity.DAY: 7,
    Granularity.WEEK: 8,
    Granularity.MONTH: 6,
}


@dataclass(frozen=True)
class TimeBucket:
    label: str
    count: int
    start: date
    end: date

    def as_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "count": self.count,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


def _naive(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is not None:
        return ts.tz_convert("UTC").tz_localize(None)
    return ts


def parse_timestamps(responses: Iterable[SurveyResponse]) -> pd.Series:
    """Parse ``created_at`` values into naive timestamps; malformed ones become NaT."""

    values = [r.created_at.isoformat() if isinstance(r.created_at, datetime) else r.created_at for r in responses]
    raw = pd.Series(values, dtype=object)
    parsed = pd.to_datetime(raw, errors="coerce", utc=True, format="ISO8601")
    return parsed.dt.tz_localize(None)


def _day_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def _week_start(day: date) -> date:
    # weeks begin on Sunday
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_responses(
    responses: Iterable[SurveyResponse],
    granularity: Granularity | str,
    now: Optional[datetime] = None,
) -> List[TimeBucket]:
    """Count responses per window, oldest window first.

    Responses whose timestamps cannot be parsed or that fall outside every
    window are left out of all buckets.
    """

    granularity = Granularity.parse(granularity)
    reference = _naive(pd.Timestamp(now if now is not None else datetime.now()))
    today = reference.date()
    days = parse_timestamps(responses).dt.normalize()
    buckets: List[TimeBucket] = []

    if granularity is Granularity.DAY:
        # aware timestamps were shifted to UTC above, so the matched date is
        # the UTC calendar date, not the date written in the string
        for offset in range(granularity.bucket_count - 1, -1, -1):
            day = today - timedelta(days=offset)
            count = int((days == pd.Timestamp(day)).sum())
            buckets.append(TimeBucket(label=_day_label(day), count=count, start=day, end=day))
    elif granularity is Granularity.WEEK:
        for offset in range(granularity.bucket_count - 1, -1, -1):
            start = _week_start(today - timedelta(weeks=offset))
            end = start + timedelta(days=6)
            in_window = days.between(pd.Timestamp(start), pd.Timestamp(end))
            buckets.append(
                TimeBucket(label=_day_label(start), count=int(in_window.sum()), start=start, end=end)
            )
    else:
        months = days.dt.to_period("M")
        current = reference.to_period("M")
        for offset in range(granularity.bucket_count - 1, -1, -1):
            period = current - offset
            first = period.start_time.date()
            count = int((months == period).sum())
            buckets.append(
                TimeBucket(label=f"{first:%b %Y}", count=count, start=first, end=period.end_time.date())
            )

    return buckets


__all__ = ["Granularity", "TimeBucket", "bucket_responses", "parse_timestamps"]
