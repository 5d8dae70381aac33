"""Per-question satisfaction averages, ranked."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .responses import SurveyResponse


@dataclass(frozen=True)
class Question:
    key: str
    label: str
    accessor: Callable[[SurveyResponse], Optional[int]]


QUESTIONS: Sequence[Question] = (
    Question("sqd0", "Overall Satisfaction", lambda r: r.sqd0),
    Question("sqd1", "Staff Responsiveness", lambda r: r.sqd1),
    Question("sqd2", "Service Speed", lambda r: r.sqd2),
    Question("sqd3", "Information Clarity", lambda r: r.sqd3),
    Question("sqd4", "Facility Comfort", lambda r: r.sqd4),
    Question("sqd5", "Process Efficiency", lambda r: r.sqd5),
    Question("sqd6", "Communication", lambda r: r.sqd6),
    Question("sqd7", "Problem Resolution", lambda r: r.sqd7),
    Question("sqd8", "Overall Experience", lambda r: r.sqd8),
)


@dataclass(frozen=True)
class QuestionScore:
    key: str
    question: str
    score: float
    responses: int

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def score_question(responses: Iterable[SurveyResponse], question: Question) -> QuestionScore:
    values = [value for value in map(question.accessor, responses) if value]
    score = round(sum(values) / len(values), 2) if values else 0.0
    return QuestionScore(key=question.key, question=question.label, score=score, responses=len(values))


def score_questions(
    responses: Iterable[SurveyResponse],
    questions: Sequence[Question] = QUESTIONS,
) -> List[QuestionScore]:
    """Average every question and rank highest first.

    ``sorted`` is stable, so equal scores keep the order of *questions*.
    Questions nobody answered stay in the result with a score of 0.
    """

    snapshot = list(responses)
    scores = [score_question(snapshot, question) for question in questions]
    return sorted(scores, key=lambda item: item.score, reverse=True)


__all__ = ["QUESTIONS", "Question", "QuestionScore", "score_question", "score_questions"]
