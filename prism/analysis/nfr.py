"""Non-functional requirement suggestions from domain signals."""

from __future__ import annotations

import logging

from .lexicon import DEFAULT_LEXICON, Lexicon, NfrTemplate, contains_term
from .models import Entities, NfrCategory, NfrSuggestion
from .normalizer import NormalizedText, normalize_lenient

logger = logging.getLogger(__name__)

CATEGORY_ORDER = tuple(NfrCategory)


def _to_suggestion(template: NfrTemplate) -> NfrSuggestion:
    return NfrSuggestion(
        category=template.category,
        requirement=template.requirement,
        priority=template.priority,
        rationale=template.rationale,
        acceptance_criteria=list(template.acceptance_criteria),
    )


def _is_triggered(template: NfrTemplate, signals: str) -> bool:
    return any(contains_term(signals, trigger) for trigger in template.triggers)


def order_suggestions(suggestions: list[NfrSuggestion]) -> list[NfrSuggestion]:
    """Stable sort by the fixed category order, dropping duplicates."""
    seen: set[tuple[NfrCategory, str]] = set()
    unique: list[NfrSuggestion] = []
    for suggestion in sorted(suggestions, key=lambda s: CATEGORY_ORDER.index(s.category)):
        if suggestion.dedup_key not in seen:
            seen.add(suggestion.dedup_key)
            unique.append(suggestion)
    return unique


def suggest(
    text: str | NormalizedText,
    entities: Entities,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> list[NfrSuggestion]:
    """Suggest NFRs for *text*.

    Keyword signals come from the text itself plus the extracted actions and
    objects. Security and Performance always receive a baseline entry for
    non-blank input; blank input yields an empty list.
    """
    norm = text if isinstance(text, NormalizedText) else normalize_lenient(text)
    if norm.is_blank:
        return []

    signals = " ".join([norm.lowered, *entities.actions, *entities.objects])
    triggered = [t for t in lexicon.nfr_templates if _is_triggered(t, signals)]
    suggestions = [_to_suggestion(t) for t in (*triggered, *lexicon.baseline_nfrs)]

    result = order_suggestions(suggestions)
    logger.debug("Suggested %d NFRs (%d triggered)", len(result), len(triggered))
    return result
