"""Completeness scoring over five weighted requirement components."""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from .lexicon import DEFAULT_LEXICON, Lexicon, find_terms
from .models import CompletenessResult, Entities, Gap, GapPriority
from .normalizer import NormalizedText, normalize_lenient

logger = logging.getLogger(__name__)


class Component(NamedTuple):
    name: str
    weight: int
    priority: GapPriority
    description: str
    suggestions: tuple[str, ...]


# Table order is gap order. Weights sum to 100.
COMPONENTS = (
    Component(
        "actor", 30, GapPriority.CRITICAL,
        "No actor or user role is specified",
        (
            "Identify who performs the action (e.g. 'As a customer...')",
            "Name the system component when no human is involved",
        ),
    ),
    Component(
        "acceptance_criteria", 25, GapPriority.HIGH,
        "No acceptance criteria or measurable outcome is defined",
        (
            "Add acceptance criteria in Given/When/Then form",
            "State measurable outcomes (e.g. 'within 2 seconds', '99.9% uptime')",
        ),
    ),
    Component(
        "nfr", 20, GapPriority.MEDIUM,
        "No non-functional requirements are mentioned",
        (
            "Specify performance expectations such as response time",
            "State security, availability or accessibility needs",
        ),
    ),
    Component(
        "error_handling", 15, GapPriority.MEDIUM,
        "Error handling and failure behaviour are not described",
        (
            "Describe what happens on invalid input",
            "Define behaviour when a dependency is unavailable",
        ),
    ),
    Component(
        "business_rules", 10, GapPriority.LOW,
        "No business rules or constraints are stated",
        (
            "List limits, permissions and validation rules",
            "State who may perform the action and under which conditions",
        ),
    ),
)

_GIVEN_WHEN_THEN = re.compile(r"\bgiven\b.*?\bwhen\b.*?\bthen\b", re.DOTALL)
_MEASURABLE = re.compile(
    r"\b\d+(?:[.,]\d+)?\s*(?:%|percent\b|ms\b|milliseconds?\b|seconds?\b|secs?\b|s\b|"
    r"minutes?\b|mins?\b|hours?\b|days?\b|users?\b|requests?\b|records?\b|items?\b|"
    r"mb\b|gb\b|kb\b|characters?\b|attempts?\b|times\b)"
)


# ---------------------------------------------------------------------------
# Component checks
# ---------------------------------------------------------------------------

def _has_acceptance_criteria(lowered: str, lexicon: Lexicon) -> bool:
    return bool(
        find_terms(lowered, lexicon.acceptance_keywords)
        or _GIVEN_WHEN_THEN.search(lowered)
        or _MEASURABLE.search(lowered)
    )


def check_components(
    norm: NormalizedText, entities: Entities, lexicon: Lexicon = DEFAULT_LEXICON
) -> dict[str, bool]:
    """Return which of the five components the text covers."""
    lowered = norm.lowered
    return {
        "actor": bool(entities.actors),
        "acceptance_criteria": _has_acceptance_criteria(lowered, lexicon),
        "nfr": bool(find_terms(lowered, lexicon.nfr_keywords)),
        "error_handling": bool(find_terms(lowered, lexicon.error_keywords)),
        "business_rules": bool(find_terms(lowered, lexicon.business_rule_keywords)),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze(
    text: str | NormalizedText,
    entities: Entities,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> CompletenessResult:
    """Score how complete a requirement is.

    The score starts at 100 and loses each missing component's weight. One
    gap is reported per missing component, in table order.
    """
    norm = text if isinstance(text, NormalizedText) else normalize_lenient(text)
    present = check_components(norm, entities, lexicon)

    gaps = [
        Gap(
            category=component.name,
            description=component.description,
            suggestions=list(component.suggestions),
            priority=component.priority,
        )
        for component in COMPONENTS
        if not present[component.name]
    ]
    missing_weight = sum(c.weight for c in COMPONENTS if not present[c.name])
    score = float(max(0, 100 - missing_weight))

    logger.debug("Completeness %.0f with %d gaps", score, len(gaps))
    return CompletenessResult(score=score, gaps=gaps, components=present)
