"""Ambiguity detection passes.

Each pass is an independent pattern scan over the lowercased text. Severity
and confidence are static per pass; a pass whose confidence is below the
caller's threshold is skipped entirely.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from .lexicon import DEFAULT_LEXICON, Lexicon
from .models import Ambiguity, Entities
from .normalizer import NormalizedText, normalize_lenient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CONDITIONAL = re.compile(
    r"\bif\b(?!\s+(?:possible|needed|necessary|applicable|any|required)\b)"
)
_ALTERNATIVE = re.compile(r"\b(?:else|otherwise|unless|fails?|failed|failure|errors?)\b")
_MAX_SNIPPET = 80

_REASONS = {
    "missing_actor": "No actor is identified for this requirement",
    "undefined_success_criteria": "Success criteria are left undefined",
    "passive_voice": "Passive voice hides who performs the action",
    "vague_term": "Subjective term without measurable criteria",
    "incomplete_conditional": "Condition has no alternative outcome",
    "vague_quantity": "Quantity is not specified",
}

_SUGGESTIONS = {
    "missing_actor": [
        "Start with 'As a <role>' to name who performs the action",
        "Replace indefinite subjects such as 'someone' with a concrete role",
    ],
    "undefined_success_criteria": [
        "State the observable result that counts as success",
        "Add acceptance criteria in Given/When/Then form",
    ],
    "passive_voice": [
        "Use active voice to specify who performs the action",
        "Clearly identify the actor or system component responsible",
    ],
    "vague_term": [
        "Specify measurable criteria (e.g. 'within 2 seconds' instead of 'quickly')",
        "Define specific metrics or thresholds",
    ],
    "incomplete_conditional": [
        "Describe what happens when the condition is not met",
        "Add an 'otherwise' or error-handling clause",
    ],
    "vague_quantity": [
        "Replace with an exact number or range",
        "Define minimum and maximum limits",
    ],
}


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------

def _snippet(text: str) -> str:
    text = " ".join(text.split())
    return text if len(text) <= _MAX_SNIPPET else text[:_MAX_SNIPPET - 3].rstrip() + "..."


def _finding(category: str, matched_text: str, position: int, lexicon: Lexicon) -> Ambiguity:
    return Ambiguity(
        matched_text=matched_text,
        reason=_REASONS[category],
        suggestions=list(_SUGGESTIONS[category]),
        severity=lexicon.severity_for(category),
        category=category,
        position=position,
    )


def _pattern_pass(category: str, pattern: re.Pattern[str]) -> Callable[..., list[Ambiguity]]:
    def run(norm: NormalizedText, entities: Entities, lexicon: Lexicon) -> list[Ambiguity]:
        return [
            _finding(category, norm.original[m.start():m.end()], m.start(), lexicon)
            for m in pattern.finditer(norm.lowered)
        ]
    run.__name__ = f"_{category}_pass"
    return run


def _missing_actor(norm: NormalizedText, entities: Entities, lexicon: Lexicon) -> list[Ambiguity]:
    if entities.actors or norm.is_blank:
        return []
    for subject in lexicon.indefinite_subjects:
        match = re.search(rf"\b{re.escape(subject)}\b", norm.lowered)
        if match:
            return [_finding("missing_actor", norm.original[match.start():match.end()], match.start(), lexicon)]
    first = norm.sentences[0]
    return [_finding("missing_actor", _snippet(first.text), first.start, lexicon)]


def _incomplete_conditional(
    norm: NormalizedText, entities: Entities, lexicon: Lexicon
) -> list[Ambiguity]:
    findings: list[Ambiguity] = []
    for sentence in norm.sentences:
        lowered = norm.lowered[sentence.start:sentence.end]
        match = _CONDITIONAL.search(lowered)
        if match and not _ALTERNATIVE.search(lowered):
            findings.append(_finding(
                "incomplete_conditional",
                _snippet(norm.original[sentence.start + match.start():sentence.end]),
                sentence.start + match.start(),
                lexicon,
            ))
    return findings


def _passes(lexicon: Lexicon) -> dict[str, Callable[..., list[Ambiguity]]]:
    """Detection passes in reporting order."""
    return {
        "missing_actor": _missing_actor,
        "undefined_success_criteria": _pattern_pass(
            "undefined_success_criteria", lexicon.success_criteria_re
        ),
        "passive_voice": _pattern_pass("passive_voice", lexicon.passive_re),
        "vague_term": _pattern_pass("vague_term", lexicon.vague_term_re),
        "incomplete_conditional": _incomplete_conditional,
        "vague_quantity": _pattern_pass("vague_quantity", lexicon.vague_quantity_re),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sort_ambiguities(ambiguities: list[Ambiguity]) -> list[Ambiguity]:
    """Order by severity (Critical first), then by position in the text."""
    return sorted(
        ambiguities,
        key=lambda a: (a.severity.rank, a.position if a.position >= 0 else float("inf")),
    )


def dedupe_ambiguities(ambiguities: list[Ambiguity]) -> list[Ambiguity]:
    """Drop repeats of ``(matched_text, reason)``, keeping the first."""
    seen: set[tuple[str, str]] = set()
    unique: list[Ambiguity] = []
    for ambiguity in ambiguities:
        if ambiguity.dedup_key not in seen:
            seen.add(ambiguity.dedup_key)
            unique.append(ambiguity)
    return unique


def detect(
    text: str | NormalizedText,
    entities: Entities,
    lexicon: Lexicon = DEFAULT_LEXICON,
    threshold: float = 0.0,
) -> list[Ambiguity]:
    """Run every detection pass whose confidence reaches *threshold*.

    Args:
        text: Raw requirement text or its normalized view.
        entities: Entities extracted from the same text; the missing-actor
            pass only fires when ``entities.actors`` is empty.
        lexicon: Word tables to match against.
        threshold: Minimum pass confidence (0.0 runs every pass).

    Returns:
        De-duplicated ambiguities sorted by severity, then position.
    """
    norm = text if isinstance(text, NormalizedText) else normalize_lenient(text)
    if norm.is_blank:
        return []

    findings: list[Ambiguity] = []
    for category, run in _passes(lexicon).items():
        if lexicon.confidence_for(category) < threshold:
            logger.debug("Skipping %s pass below threshold %.2f", category, threshold)
            continue
        findings.extend(run(norm, entities, lexicon))

    result = sort_ambiguities(dedupe_ambiguities(sorted(findings, key=lambda a: a.position)))
    logger.debug("Detected %d ambiguities", len(result))
    return result
