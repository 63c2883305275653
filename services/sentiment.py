"""
sentiment.py
-------------

Rule-based sentiment scoring. Text is lowercased, split on whitespace,
stripped of punctuation and matched against small multilingual word
lists. The share of positive matches becomes a confidence score in
``[0.1, 0.9]`` which is mapped to a category and a short explanation.

A crude language guess is made independently by looking for common
Portuguese and Spanish words anywhere in the text. English is assumed
unless the evidence for another language is strong.

Everything here is deterministic and free of I/O, so the scorer doubles
as the fallback when the hosted language model is not configured.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Tuple

Sentiment = Literal["positive", "neutral", "negative"]

POSITIVE_WORDS = frozenset(
    [
        "good",
        "great",
        "excellent",
        "amazing",
        "wonderful",
        "fantastic",
        "terrific",
        "outstanding",
        "superb",
        "brilliant",
        "awesome",
        "happy",
        "joy",
        "love",
        "like",
        "beautiful",
        "best",
        "better",
        "perfect",
        "nice",
        "pleasant",
        "delightful",
        "bom",
        "ótimo",
        "excelente",
        "maravilhoso",
        "fantástico",
        "feliz",
        "alegria",
        "amor",
        "bonito",
        "perfeito",
        "agradável",
        "delicioso",
        "bueno",
        "genial",
        "maravilloso",
    ]
)

NEGATIVE_WORDS = frozenset(
    [
        "bad",
        "terrible",
        "horrible",
        "awful",
        "poor",
        "disappointing",
        "sad",
        "hate",
        "dislike",
        "worst",
        "failure",
        "negative",
        "ugly",
        "wrong",
        "annoying",
        "angry",
        "ruim",
        "terrível",
        "horrível",
        "péssimo",
        "decepcionante",
        "triste",
        "ódio",
        "feio",
        "errado",
        "irritante",
        "raiva",
        "malo",
    ]
)

DEFAULT_LANGUAGE = "english"

# Checked as substrings of the whole text, not as tokens.
LANGUAGE_MARKERS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "portuguese": (
            "não",
            "sim",
            "muito",
            "obrigado",
            "como",
            "está",
            "bem",
            "eu",
            "você",
            "para",
        ),
        "spanish": (
            "no",
            "sí",
            "muy",
            "gracias",
            "cómo",
            "está",
            "bien",
            "yo",
            "tú",
            "para",
        ),
    }
)

# Minimum marker hits before a non-English language is reported.
LANGUAGE_MARKER_THRESHOLD = 2

PUNCTUATION = ".,/#!$%^&*;:{}=-_`~()"
_PUNCTUATION_TABLE = str.maketrans("", "", PUNCTUATION)

NEUTRAL_SCORE = 0.5
MIN_SCORE = 0.1
MAX_SCORE = 0.9
POSITIVE_THRESHOLD = 0.6
NEGATIVE_THRESHOLD = 0.4
MIN_TOKENS = 3


@dataclass(frozen=True)
class SentimentResult:
    """Outcome of a single analysis."""

    sentiment: Sentiment
    score: float
    explanation: str
    language: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def tokenize(text: str) -> List[str]:
    """Lowercase ``text`` and split it on runs of whitespace."""
    return text.lower().split()


def clean_token(token: str) -> str:
    """Remove every punctuation character in ``PUNCTUATION`` from ``token``."""
    return token.translate(_PUNCTUATION_TABLE)


def count_matches(tokens: List[str]) -> Tuple[int, int]:
    """Return ``(positive_count, negative_count)`` for the given raw tokens."""
    positive = 0
    negative = 0
    for token in tokens:
        word = clean_token(token)
        if word in POSITIVE_WORDS:
            positive += 1
        if word in NEGATIVE_WORDS:
            negative += 1
    return positive, negative


def score_counts(positive: int, negative: int, token_count: int) -> Tuple[Sentiment, float, str]:
    """Turn lexicon hit counts into ``(sentiment, score, explanation)``.

    Without any hits the text is neutral at 0.5. Otherwise the score is the
    positive share of all hits, kept within ``[MIN_SCORE, MAX_SCORE]`` so a
    lexicon match never reports absolute certainty. Scores of exactly 0.4
    and 0.6 are neutral.
    """
    total = positive + negative
    if total == 0:
        if token_count < MIN_TOKENS:
            return "neutral", NEUTRAL_SCORE, "The text is too short to analyze sentiment accurately."
        return "neutral", NEUTRAL_SCORE, "The text appears to be neutral."

    score = positive / total
    if score > MAX_SCORE:
        score = MAX_SCORE
    if score < MIN_SCORE:
        score = MIN_SCORE

    if score > POSITIVE_THRESHOLD:
        return (
            "positive",
            score,
            f"The text contains {positive} positive words and {negative} negative words, "
            "indicating an overall positive sentiment.",
        )
    if score < NEGATIVE_THRESHOLD:
        return (
            "negative",
            score,
            f"The text contains {positive} positive words and {negative} negative words, "
            "indicating an overall negative sentiment.",
        )
    return (
        "neutral",
        score,
        f"The text contains a balanced mix of {positive} positive words and {negative} negative words.",
    )


def marker_counts(text: str) -> Dict[str, int]:
    """Count how many markers of each language appear somewhere in ``text``."""
    lowered = text.lower()
    return {
        language: sum(1 for marker in markers if marker in lowered)
        for language, markers in LANGUAGE_MARKERS.items()
    }


def detect_language(text: str) -> str:
    """Guess whether ``text`` is English, Portuguese or Spanish.

    A marker found inside a longer word still counts (``"no"`` matches
    ``"know"``). Ties and weak evidence resolve to English.
    """
    counts = marker_counts(text)
    portuguese = counts["portuguese"]
    spanish = counts["spanish"]

    if portuguese > LANGUAGE_MARKER_THRESHOLD and portuguese > spanish:
        return "portuguese"
    if spanish > LANGUAGE_MARKER_THRESHOLD and spanish > portuguese:
        return "spanish"
    return DEFAULT_LANGUAGE


def analyze(text: str) -> SentimentResult:
    """Score ``text`` and guess its language."""
    tokens = tokenize(text)
    positive, negative = count_matches(tokens)
    sentiment, score, explanation = score_counts(positive, negative, len(tokens))
    return SentimentResult(
        sentiment=sentiment,
        score=score,
        explanation=explanation,
        language=detect_language(text),
    )


class SentimentService:
    """Lexicon-based analyzer exposed as an injectable service."""

    name = "rules"

    def analyze_sentiment(self, text: str) -> SentimentResult:
        return analyze(text)


__all__ = [
    "LANGUAGE_MARKERS",
    "NEGATIVE_WORDS",
    "POSITIVE_WORDS",
    "SentimentResult",
    "SentimentService",
    "analyze",
    "clean_token",
    "count_matches",
    "detect_language",
    "score_counts",
    "tokenize",
]
