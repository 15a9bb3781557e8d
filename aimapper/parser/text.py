"""Text normalization and linguistic heuristics.

All patterns assume English word and sentence conventions. They are crude on
purpose: the readability and keyword metrics built on top of them must stay
stable across runs and releases, so any change here changes scores.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal

# Pictographs, dingbats, flags, variation selectors and joiners
_PICTOGRAPHIC = re.compile(
    "["
    "\U0001F000-\U0001FAFF"
    "\U0001FC00-\U0001FFFD"
    "☀-➿"
    "⬀-⯿"
    "︀-️"
    "‍"
    "⃣"
    "]+"
)
_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"\b[\w'’-]+\b")
_SENTENCE_BREAK = re.compile(r"(?<=[.?!])\s+")
_NEWLINES = re.compile(r"\n+")
_ALPHA_WORD = re.compile(r"\b[a-z]+\b", re.ASCII)
_VOWEL_RUN = re.compile(r"[aeiouy]+")
_TRAILING_E = re.compile(r"e\b", re.ASCII)
_KEYWORD_TOKEN = re.compile(r"\b[a-z]{4,}\b", re.ASCII)

STOP_WORDS = frozenset({
    "with",
    "this",
    "that",
    "from",
    "have",
    "will",
    "about",
    "your",
    "their",
    "news",
    "homepage",
})


def normalize_whitespace(text: str) -> str:
    """Strip pictographic symbols, collapse whitespace runs, trim."""
    if not text:
        return ""
    text = _PICTOGRAPHIC.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def count_words(text: str) -> int:
    if not text:
        return 0
    return len(_WORD.findall(text))


def split_sentences(text: str) -> list[str]:
    """Split on whitespace that follows ``.``, ``?`` or ``!``.

    Text without terminal punctuation comes back as a single sentence.
    """
    if not text:
        return []
    flattened = _NEWLINES.sub(" ", text)
    parts = (part.strip() for part in _SENTENCE_BREAK.split(flattened))
    return [part for part in parts if part]


def count_syllables(word: str) -> int:
    """Estimate syllables: drop one trailing silent ``e``, count vowel runs."""
    cleaned = _TRAILING_E.sub("", word.lower(), count=1)
    return max(len(_VOWEL_RUN.findall(cleaned)), 1)


def total_syllables(text: str) -> int:
    words = _ALPHA_WORD.findall(text.lower())
    return sum(count_syllables(word) for word in words)


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a calculator (half away from zero for positives).

    Works on the exact binary value of ``value`` so results match
    ``Number.prototype.toFixed`` style rounding.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def flesch_reading_ease(words: int, sentences: int, syllables: int) -> float:
    """Flesch reading ease, one decimal. Zero when undefined."""
    if not words or not sentences:
        return 0.0
    score = 206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)
    if not math.isfinite(score):
        return 0.0
    return round_half_up(score, 1)


def dominant_keyword(text: str) -> str:
    """Most frequent 4+ letter token outside ``STOP_WORDS``.

    Ties go to the token seen first.
    """
    tokens = _KEYWORD_TOKEN.findall(text.lower())
    counts = Counter(token for token in tokens if token not in STOP_WORDS)
    if not counts:
        return ""
    return counts.most_common(1)[0][0]


def intro_sample(text: str, limit: int = 100) -> str:
    """First ``limit`` whitespace-separated tokens."""
    return " ".join(text.split()[:limit])
