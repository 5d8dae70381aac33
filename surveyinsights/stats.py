"""Whole-collection summary metrics."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List

from .responses import RATING_MAX, RATING_MIN, SurveyResponse

NOT_APPLICABLE_LABEL = "N/A"


@dataclass(frozen=True)
class SummaryStats:
    total_responses: int
    average_satisfaction: float
    unique_services: int
    with_feedback: int
    feedback_rate: float

    @property
    def average_satisfaction_display(self) -> str:
        return f"{self.average_satisfaction:.2f}"

    @property
    def feedback_rate_display(self) -> str:
        if self.total_responses == 0:
            return "0"
        return f"{self.feedback_rate:.1f}"

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = asdict(self)
        payload["average_satisfaction_display"] = self.average_satisfaction_display
        payload["feedback_rate_display"] = self.feedback_rate_display
        return payload


@dataclass(frozen=True)
class Distribution:
    label: str
    count: int


def _mean(values: List[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def summary_stats(responses: Iterable[SurveyResponse]) -> SummaryStats:
    """Compute totals, overall satisfaction and feedback coverage."""

    snapshot = list(responses)
    total = len(snapshot)
    overall = [r.sqd0 for r in snapshot if r.sqd0]
    with_feedback = sum(1 for r in snapshot if r.has_feedback())
    rate = round(with_feedback / total * 100, 1) if total else 0.0
    return SummaryStats(
        total_responses=total,
        average_satisfaction=round(_mean(overall), 2),
        unique_services=len({r.service_availed for r in snapshot}),
        with_feedback=with_feedback,
        feedback_rate=rate,
    )


def client_type_distribution(responses: Iterable[SurveyResponse]) -> List[Distribution]:
    """Responses per client type, in first-seen order."""

    counts = Counter(r.client_type for r in responses)
    return [Distribution(label=label, count=count) for label, count in counts.items()]


def satisfaction_distribution(responses: Iterable[SurveyResponse]) -> List[Distribution]:
    """Overall-satisfaction rating histogram.

    The ``N/A`` bucket counts every response without an ``sqd0`` rating. An
    explicit not-applicable token and a blank cell both parse to ``None``, so
    they are counted together.
    """

    counts: Counter[str] = Counter()
    for r in responses:
        counts[str(r.sqd0) if r.sqd0 else NOT_APPLICABLE_LABEL] += 1
    labels = [str(value) for value in range(RATING_MIN, RATING_MAX + 1)] + [NOT_APPLICABLE_LABEL]
    return [Distribution(label=label, count=counts[label]) for label in labels]


__all__ = [
    "Distribution",
    "SummaryStats",
    "summary_stats",
    "client_type_distribution",
    "satisfaction_distribution",
]
