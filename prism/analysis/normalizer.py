"""Sentence and clause splitting for requirement text.

The normalizer keeps a lowercased copy of the input whose character offsets
line up exactly with the original, so every analyzer can match on lowercase
text and still report spans against what the author wrote.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from prism.errors import InputError

# Sentence ends, blank lines and the line breaks before bullet items. A
# period right after a list number ("1. ") is not a sentence end.
_SENTENCE_BOUNDARY = re.compile(
    r"(?<=[.!?;])(?<!^\d\.)(?<!^\d\d\.)\s+"
    r"|\n\s*\n"
    r"|\n(?=\s*(?:[-*+•]|\d+[.)])\s)",
    re.MULTILINE,
)

_CLAUSE_BOUNDARY = re.compile(r"\s*[,:;]\s+|\s+(?:and then|but|whereas)\s+")
_BULLET_PREFIX = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")
_WORD = re.compile(r"[a-z0-9][a-z0-9'/-]*")


@dataclass(frozen=True)
class Span:
    """A slice of the original text."""

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class Token:
    """A lowercased word and its offset in the original text."""

    word: str
    start: int
    end: int


@dataclass(frozen=True)
class NormalizedText:
    """Original text plus offset-preserving lowercase view and segmentation."""

    original: str
    lowered: str
    sentences: tuple[Span, ...]
    clauses: tuple[Span, ...]
    tokens: tuple[Token, ...]

    @property
    def is_blank(self) -> bool:
        # A lone list marker ("- ", "1. ") leaves no sentence behind.
        return not self.sentences


def lower_preserving_offsets(text: str) -> str:
    """Lowercase *text* character by character without changing its length.

    Characters whose lowercase form has a different length (e.g. ``"İ"``) are
    kept as-is.
    """
    return "".join(
        low if len(low) == 1 else ch
        for ch, low in ((c, c.lower()) for c in text)
    )


def _split(text: str, start: int, end: int, boundary: re.Pattern[str]) -> list[Span]:
    spans: list[Span] = []
    cursor = start
    for match in boundary.finditer(text, start, end):
        spans.append(_trimmed(text, cursor, match.start()))
        cursor = match.end()
    spans.append(_trimmed(text, cursor, end))
    return [s for s in spans if s.text]


def _trimmed(text: str, start: int, end: int) -> Span:
    chunk = text[start:end]
    bullet = _BULLET_PREFIX.match(chunk)
    if bullet:
        start += bullet.end()
        chunk = text[start:end]
    lead = len(chunk) - len(chunk.lstrip())
    trail = len(chunk) - len(chunk.rstrip())
    return Span(start + lead, end - trail, chunk.strip())


def normalize(text: str) -> NormalizedText:
    """Split *text* into sentences, clauses and word tokens.

    Raises:
        InputError: If *text* holds nothing but whitespace or list markers.
            Callers that want to continue anyway can use
            :func:`normalize_lenient`.
    """
    if text is None or not text.strip():
        raise InputError("Requirement text is empty")
    norm = _normalize(text)
    if norm.is_blank:
        raise InputError("Requirement text is empty")
    return norm


def normalize_lenient(text: str) -> NormalizedText:
    """Like :func:`normalize` but returns an empty view for blank input."""
    return _normalize(text or "")


def _normalize(text: str) -> NormalizedText:
    lowered = lower_preserving_offsets(text)
    sentences = _split(text, 0, len(text), _SENTENCE_BOUNDARY)
    clauses: list[Span] = []
    for sentence in sentences:
        clauses.extend(_split(text, sentence.start, sentence.end, _CLAUSE_BOUNDARY))
    tokens = tuple(Token(m.group(0), m.start(), m.end()) for m in _WORD.finditer(lowered))
    return NormalizedText(
        original=text,
        lowered=lowered,
        sentences=tuple(sentences),
        clauses=tuple(clauses),
        tokens=tokens,
    )
