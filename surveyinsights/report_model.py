"""Assemble every analysis output into one report structure."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .responses import SurveyResponse, responses_to_frame
from .scoring import QuestionScore, score_questions
from .stats import (
    Distribution,
    SummaryStats,
    client_type_distribution,
    satisfaction_distribution,
    summary_stats,
)
from .text_analysis import Keyword, Theme, classify_themes, keyword_counts

LOGGER = logging.getLogger(__name__)

KEYWORD_LIMIT = 15


@dataclass
class ReportModel:
    stats: SummaryStats
    question_scores: List[QuestionScore]
    themes: List[Theme]
    keywords: List[Keyword]
    generated_at: datetime
    client_types: List[Distribution] = field(default_factory=list)
    satisfaction_distribution: List[Distribution] = field(default_factory=list)
    data_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "data_signature": self.data_signature,
            "stats": self.stats.as_dict(),
            "question_scores": [score.as_dict() for score in self.question_scores],
            "themes": [asdict(theme) for theme in self.themes],
            "keywords": [asdict(keyword) for keyword in self.keywords],
            "client_types": [asdict(item) for item in self.client_types],
            "satisfaction_distribution": [asdict(item) for item in self.satisfaction_distribution],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def response_signature(responses: Iterable[SurveyResponse]) -> str:
    """SHA-256 content identity of a response snapshot."""

    csv_bytes = responses_to_frame(responses).to_csv(index=False).encode("utf-8")
    return hashlib.sha256(csv_bytes).hexdigest()


def build_report_model(
    responses: Iterable[SurveyResponse],
    *,
    generated_at: Optional[datetime] = None,
    keyword_limit: int = KEYWORD_LIMIT,
) -> ReportModel:
    """Run every analysis over the same snapshot and package the results."""

    snapshot = tuple(responses)
    model = ReportModel(
        stats=summary_stats(snapshot),
        question_scores=score_questions(snapshot),
        themes=classify_themes(snapshot),
        keywords=keyword_counts(snapshot, top_n=keyword_limit),
        generated_at=generated_at or datetime.now(),
        client_types=client_type_distribution(snapshot),
        satisfaction_distribution=satisfaction_distribution(snapshot),
        data_signature=response_signature(snapshot),
    )
    LOGGER.debug(
        "Report model built: responses=%d themes=%d keywords=%d",
        model.stats.total_responses,
        len(model.themes),
        len(model.keywords),
    )
    return model


def save_model_json(model: ReportModel, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(model.to_json(), encoding="utf-8")


__all__ = [
    "KEYWORD_LIMIT",
    "ReportModel",
    "build_report_model",
    "response_signature",
    "save_model_json",
]
