"""User story format validation and quality scoring.

Parses the "As a <actor>, I want <goal> so that <reason>" structure and
scores each segment on length, specificity and keyword presence.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from .lexicon import DEFAULT_LEXICON, Lexicon, find_terms
from .models import ComponentQuality, StoryValidation
from .normalizer import NormalizedText, normalize_lenient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class SegmentRule(NamedTuple):
    min_words: int
    max_words: int
    length_weight: float
    specificity_weight: float
    keyword_weight: float


ACTOR_RULE = SegmentRule(1, 5, 40.0, 30.0, 30.0)
GOAL_RULE = SegmentRule(2, 20, 40.0, 30.0, 30.0)
REASON_RULE = SegmentRule(3, 25, 30.0, 20.0, 50.0)

VALID_SEGMENT_SCORE = 60.0
ACTOR_VALUE_WEIGHT = 0.2
GOAL_VALUE_WEIGHT = 0.3
REASON_VALUE_WEIGHT = 0.5

FORMAT_HINT = "Use the format 'As a <role>, I want <goal> so that <benefit>'"

_AS_A = re.compile(r"\bas\s+an?\b")
_I_WANT = re.compile(r"\bi\s+want\b")
_SO_THAT = re.compile(r"\bso\s+that\b")
_SEGMENT_END = re.compile(r"[.!?\n]")
_EDGE_PUNCTUATION = " \t,;:-"


# ---------------------------------------------------------------------------
# Segment scoring
# ---------------------------------------------------------------------------

def _words(segment: str) -> list[str]:
    return re.findall(r"[a-z0-9][a-z0-9'/-]*", segment.lower())


def _has_vague_terms(lowered: str, lexicon: Lexicon) -> bool:
    return bool(
        find_terms(lowered, lexicon.story_vague_terms)
        or lexicon.vague_term_re.search(lowered)
    )


def score_segment(
    segment: str,
    rule: SegmentRule,
    has_keywords: Callable[[str], bool],
    lexicon: Lexicon = DEFAULT_LEXICON,
    label: str = "segment",
) -> ComponentQuality:
    """Score one story segment against *rule*.

    Length earns the full weight inside the expected word range and half of
    it when the segment is non-empty but out of range. Specificity requires a
    non-empty segment without vague wording.
    """
    lowered = segment.lower()
    count = len(_words(segment))
    issues: list[str] = []
    suggestions: list[str] = []
    score = 0.0

    if rule.min_words <= count <= rule.max_words:
        score += rule.length_weight
    elif count > 0:
        score += rule.length_weight / 2
        if count < rule.min_words:
            issues.append(f"The {label} is too short ({count} words)")
            suggestions.append(f"Expand the {label} to at least {rule.min_words} words")
        else:
            issues.append(f"The {label} is too long ({count} words)")
            suggestions.append(f"Shorten the {label} to at most {rule.max_words} words")
    else:
        issues.append(f"The {label} is missing")
        suggestions.append(f"Provide a {label}")

    if count > 0 and not _has_vague_terms(lowered, lexicon):
        score += rule.specificity_weight
    elif count > 0:
        issues.append(f"The {label} uses vague wording")
        suggestions.append(f"Replace vague words in the {label} with specific terms")

    if count > 0 and has_keywords(lowered):
        score += rule.keyword_weight
    elif count > 0:
        issues.append(f"The {label} lacks characteristic keywords")

    score = min(100.0, score)
    return ComponentQuality(
        score=score,
        is_valid=score >= VALID_SEGMENT_SCORE,
        issues=issues,
        suggestions=suggestions,
    )


def _actor_keywords(lexicon: Lexicon) -> Callable[[str], bool]:
    return lambda lowered: lexicon.actor_role_re.search(lowered) is not None


def _goal_keywords(lexicon: Lexicon) -> Callable[[str], bool]:
    def check(lowered: str) -> bool:
        if any(w in lexicon.verb_forms for w in _words(lowered)):
            return True
        return any(phrase in lowered for phrase, _ in lexicon.multiword_actions)
    return check


def _reason_keywords(lexicon: Lexicon) -> Callable[[str], bool]:
    return lambda lowered: bool(find_terms(lowered, lexicon.benefit_keywords))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _locate_markers(lowered: str) -> tuple[re.Match[str], re.Match[str], re.Match[str]] | None:
    as_a = _AS_A.search(lowered)
    if not as_a:
        return None
    i_want = _I_WANT.search(lowered, as_a.end())
    if not i_want:
        return None
    so_that = _SO_THAT.search(lowered, i_want.end())
    if not so_that:
        return None
    return as_a, i_want, so_that


def _strip_segment(segment: str) -> str:
    return " ".join(segment.strip(_EDGE_PUNCTUATION).split())


def _goal_text(segment: str) -> str:
    goal = _strip_segment(segment)
    if goal.lower().startswith("to "):
        goal = goal[3:]
    return goal.strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate(text: str | NormalizedText, lexicon: Lexicon = DEFAULT_LEXICON) -> StoryValidation:
    """Validate the user-story structure of *text* and score its segments.

    All three markers ("as a/an", "i want", "so that") must appear in that
    order. Otherwise the format is invalid and every score is zero.
    """
    norm = text if isinstance(text, NormalizedText) else normalize_lenient(text)
    markers = _locate_markers(norm.lowered)
    if markers is None:
        logger.debug("Story markers not found")
        return StoryValidation(recommendations=[FORMAT_HINT])

    as_a, i_want, so_that = markers
    original = norm.original
    end = _SEGMENT_END.search(norm.lowered, so_that.end())
    actor = _strip_segment(original[as_a.end():i_want.start()])
    goal = _goal_text(original[i_want.end():so_that.start()])
    reason = _strip_segment(original[so_that.end():end.start() if end else len(original)])

    actor_quality = score_segment(actor, ACTOR_RULE, _actor_keywords(lexicon), lexicon, "actor")
    goal_quality = score_segment(goal, GOAL_RULE, _goal_keywords(lexicon), lexicon, "goal")
    reason_quality = score_segment(reason, REASON_RULE, _reason_keywords(lexicon), lexicon, "reason")

    business_value = min(100.0, (
        ACTOR_VALUE_WEIGHT * actor_quality.score
        + GOAL_VALUE_WEIGHT * goal_quality.score
        + REASON_VALUE_WEIGHT * reason_quality.score
    ))

    recommendations: list[str] = []
    for quality in (actor_quality, goal_quality, reason_quality):
        if not quality.is_valid:
            recommendations.extend(s for s in quality.suggestions if s not in recommendations)
    if not reason_quality.is_valid:
        recommendations.append(
            "State the business benefit in measurable terms (time saved, cost, revenue, risk)"
        )

    return StoryValidation(
        is_valid_format=True,
        actor=actor,
        goal=goal,
        reason=reason,
        actor_quality=actor_quality,
        goal_quality=goal_quality,
        reason_quality=reason_quality,
        business_value_score=round(business_value, 2),
        recommendations=recommendations,
    )
