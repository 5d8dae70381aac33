"""Keyword and theme mining for open-ended survey feedback."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .responses import SurveyResponse

WORD_PATTERN = re.compile(r"(?<![a-z])[a-z]{4,}(?![a-z])")

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "is", "was", "are", "were", "been", "be", "have", "has", "had", "do",
        "does", "did", "will", "would", "could", "should", "may", "might", "can",
        "very", "too", "much", "more", "most", "some", "any", "no", "not", "only",
        "just", "about", "from", "by", "as", "this", "that", "these", "those", "it",
        "its", "their", "there", "they", "them", "i", "my", "me", "we", "our", "you",
        "your",
    }
)

THEMES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Service Quality", ("quality", "service", "excellent", "poor", "good", "bad", "better", "improve")),
    ("Staff Attitude", ("staff", "employee", "rude", "helpful", "friendly", "courteous", "professional")),
    ("Waiting Time", ("wait", "waiting", "long", "slow", "quick", "fast", "time", "delay")),
    ("Facility Issues", ("facility", "clean", "dirty", "comfort", "space", "room", "building")),
    ("Process Problems", ("process", "procedure", "confusing", "complicated", "easy", "difficult", "system")),
    ("Positive Experience", ("thank", "thanks", "great", "amazing", "wonderful", "satisfied", "happy")),
)


@dataclass(frozen=True)
class Keyword:
    word: str
    count: int


@dataclass(frozen=True)
class Theme:
    theme: str
    count: int


def feedback_text(response: SurveyResponse) -> str:
    """All free-text slots of *response*, space-joined and lower-cased."""

    return " ".join(response.feedback_fields()).lower()


def tokenize(text: str) -> List[str]:
    return WORD_PATTERN.findall(text.lower())


def keyword_counts(responses: Iterable[SurveyResponse], top_n: int = 15) -> List[Keyword]:
    """Most frequent non-stopword terms across every response's feedback.

    Ties keep first-seen order in the corpus.
    """

    corpus = " ".join(text for text in map(feedback_text, responses) if text)
    counter: Counter[str] = Counter()
    counter.update(token for token in tokenize(corpus) if token not in STOPWORDS)
    return [Keyword(word=word, count=count) for word, count in counter.most_common(top_n)]


def word_cloud_frequencies(responses: Iterable[SurveyResponse]) -> Dict[str, int]:
    return {keyword.word: keyword.count for keyword in keyword_counts(responses, top_n=200)}


def classify_themes(
    responses: Iterable[SurveyResponse],
    themes: Sequence[Tuple[str, Tuple[str, ...]]] = THEMES,
) -> List[Theme]:
    """Count responses mentioning each theme; unmentioned themes are dropped."""

    counts = {label: 0 for label, _ in themes}
    for response in responses:
        text = feedback_text(response)
        if not text:
            continue
        for label, keywords in themes:
            if any(keyword in text for keyword in keywords):
                counts[label] += 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [Theme(theme=label, count=count) for label, count in ranked if count > 0]


__all__ = [
    "STOPWORDS",
    "THEMES",
    "Keyword",
    "Theme",
    "feedback_text",
    "tokenize",
    "keyword_counts",
    "word_cloud_frequencies",
    "classify_themes",
]
