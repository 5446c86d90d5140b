"""Optional AI augmentation of a rule-based analysis.

The adapter wraps an injected completion capability. It asks the model for a
JSON document with additional findings and merges them into the rule-based
result. Rule-based findings are never removed or rewritten. Any failure
(provider error, timeout, malformed JSON, schema mismatch) returns the
original result marked ``degraded=True``.

Typical usage::

    client = LlmClient.from_config(config.llm)
    result = await augment(result, client, config.llm, timeout=30)
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from prism.errors import AugmentationFailure

from .ambiguity import dedupe_ambiguities, sort_ambiguities
from .models import (
    AnalysisResult,
    Ambiguity,
    ComponentQuality,
    Gap,
    GapPriority,
    NfrCategory,
    NfrPriority,
    NfrSuggestion,
    Severity,
)
from .nfr import order_suggestions
from .story import VALID_SEGMENT_SCORE

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


# ---------------------------------------------------------------------------
# Capability protocol
# ---------------------------------------------------------------------------

class CompletionResult(BaseModel):
    """Structured response from a completion provider."""

    text: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model that produced the response")
    duration_ms: float = Field(default=0.0, description="Generation time in ms")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")


@runtime_checkable
class CompletionCapability(Protocol):
    """Anything that can turn a prompt into a :class:`CompletionResult`.

    A plain ``str`` return value is accepted as a successful completion.
    """

    async def complete(self, prompt: str, config: Any = None) -> CompletionResult | str:
        ...


# ---------------------------------------------------------------------------
# Expected payload
# ---------------------------------------------------------------------------

class _AiAmbiguity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    matched_text: str
    reason: str
    suggestions: list[str] = Field(default_factory=list)
    severity: Severity = Severity.MEDIUM


class _AiGap(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: str
    description: str
    suggestions: list[str] = Field(default_factory=list)
    priority: GapPriority = GapPriority.MEDIUM


class _AiNfr(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: NfrCategory
    requirement: str
    priority: NfrPriority = NfrPriority.SHOULD_HAVE
    rationale: str = ""
    acceptance_criteria: list[str] = Field(default_factory=list)


class _AiStoryScores(BaseModel):
    model_config = ConfigDict(extra="ignore")

    actor_score: float | None = None
    goal_score: float | None = None
    reason_score: float | None = None
    business_value_score: float | None = None


class AugmentationPayload(BaseModel):
    """The JSON document the model is asked to return."""
    model_config = ConfigDict(extra="ignore")

    ambiguities: list[_AiAmbiguity] = Field(default_factory=list)
    gaps: list[_AiGap] = Field(default_factory=list)
    nfr_suggestions: list[_AiNfr] = Field(default_factory=list)
    story_scores: _AiStoryScores | None = None
    improved_requirements: str | None = None


# ---------------------------------------------------------------------------
# Prompt and parsing
# ---------------------------------------------------------------------------

_INSTRUCTIONS = """\
You are a senior business analyst reviewing a software requirement.
A rule-based analyzer already produced the findings listed below. Add only
findings it missed. Answer with a single JSON object and nothing else:

{
  "ambiguities": [{"matched_text": str, "reason": str, "suggestions": [str],
                   "severity": "Critical" | "High" | "Medium" | "Low"}],
  "gaps": [{"category": str, "description": str, "suggestions": [str],
            "priority": "Critical" | "High" | "Medium" | "Low"}],
  "nfr_suggestions": [{"category": "Security" | "Performance" | "Usability" |
                       "Reliability" | "Scalability" | "Maintainability" |
                       "Compatibility" | "Accessibility",
                       "requirement": str, "priority": "MustHave" |
                       "ShouldHave" | "CouldHave" | "WontHave",
                       "rationale": str, "acceptance_criteria": [str]}],
  "story_scores": {"actor_score": 0-100, "goal_score": 0-100,
                   "reason_score": 0-100, "business_value_score": 0-100},
  "improved_requirements": str
}
"""


def build_prompt(analysis: AnalysisResult) -> str:
    """Build the single JSON-answer prompt for *analysis*."""
    lines = [_INSTRUCTIONS, "## Requirement", analysis.requirement.text.strip(), ""]
    lines.append("## Existing ambiguities")
    lines.extend(f"- [{a.severity.value}] '{a.matched_text}': {a.reason}" for a in analysis.ambiguities)
    lines.append("")
    lines.append(f"## Completeness score: {analysis.completeness.score:.0f}/100")
    lines.extend(f"- missing {g.category}: {g.description}" for g in analysis.completeness.gaps)
    lines.append("")
    lines.append("## Existing NFR suggestions")
    lines.extend(f"- [{n.category.value}] {n.requirement}" for n in analysis.nfr_suggestions)
    return "\n".join(lines)


def extract_json(raw: str) -> dict:
    """Pull a JSON object out of a model response.

    Tries a fenced ```json block first, then the whole text, then the span
    between the first ``{`` and the last ``}``.

    Raises:
        AugmentationFailure: If no JSON object can be decoded.
    """
    raw = raw.strip()
    if not raw:
        raise AugmentationFailure("Empty response from provider")

    candidates: list[str] = []
    fenced = _FENCED_JSON.search(raw)
    if fenced:
        candidates.append(fenced.group(1))
    candidates.append(raw)
    first_brace, last_brace = raw.find("{"), raw.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        candidates.append(raw[first_brace:last_brace + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    raise AugmentationFailure("Response does not contain a JSON object")


def parse_payload(raw: str) -> AugmentationPayload:
    """Decode and validate a model response.

    Raises:
        AugmentationFailure: On malformed JSON.
        pydantic.ValidationError: On a schema mismatch.
    """
    return AugmentationPayload.model_validate(extract_json(raw))


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def _raised(quality: ComponentQuality, ai_score: float | None) -> ComponentQuality:
    if ai_score is None:
        return quality
    score = max(quality.score, _clamp(ai_score))
    return quality.model_copy(update={"score": score, "is_valid": score >= VALID_SEGMENT_SCORE})


def merge(analysis: AnalysisResult, payload: AugmentationPayload) -> AnalysisResult:
    """Merge AI findings into *analysis* without dropping rule-based ones."""
    lowered = analysis.requirement.text.casefold()

    ai_ambiguities = [
        Ambiguity(
            matched_text=a.matched_text,
            reason=a.reason,
            suggestions=a.suggestions,
            severity=a.severity,
            category="ai",
            position=lowered.find(a.matched_text.casefold()) if a.matched_text else -1,
            origin="ai",
        )
        for a in payload.ambiguities
    ]
    ambiguities = sort_ambiguities(dedupe_ambiguities([*analysis.ambiguities, *ai_ambiguities]))

    ai_nfrs = [NfrSuggestion(**n.model_dump(), origin="ai") for n in payload.nfr_suggestions]
    nfrs = order_suggestions([*analysis.nfr_suggestions, *ai_nfrs])

    known_gaps = {(g.category, g.description) for g in analysis.completeness.gaps}
    new_gaps = [
        Gap(**g.model_dump())
        for g in payload.gaps
        if (g.category, g.description) not in known_gaps
    ]
    completeness = analysis.completeness.model_copy(
        update={"gaps": [*analysis.completeness.gaps, *new_gaps]}
    )

    story = analysis.story_validation
    if story.is_valid_format and payload.story_scores is not None:
        scores = payload.story_scores
        story = story.model_copy(update={
            "actor_quality": _raised(story.actor_quality, scores.actor_score),
            "goal_quality": _raised(story.goal_quality, scores.goal_score),
            "reason_quality": _raised(story.reason_quality, scores.reason_score),
            "business_value_score": (
                story.business_value_score
                if scores.business_value_score is None
                else max(story.business_value_score, _clamp(scores.business_value_score))
            ),
        })

    improved = (payload.improved_requirements or "").strip() or analysis.improved_requirements

    return analysis.model_copy(update={
        "ambiguities": ambiguities,
        "nfr_suggestions": nfrs,
        "completeness": completeness,
        "story_validation": story,
        "improved_requirements": improved,
        "ai_augmented": True,
    })


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def augment(
    analysis: AnalysisResult,
    capability: CompletionCapability,
    config: Any = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AnalysisResult:
    """Enrich *analysis* with AI findings.

    Never raises for provider or parsing problems: the unmodified result is
    returned with ``degraded=True`` instead. Task cancellation propagates.
    """
    prompt = build_prompt(analysis)
    try:
        completion = await asyncio.wait_for(capability.complete(prompt, config), timeout=timeout)
        if isinstance(completion, str):
            completion = CompletionResult(text=completion)
        if not completion.success:
            raise AugmentationFailure(completion.error or "Provider reported failure")
        merged = merge(analysis, parse_payload(completion.text))
    except Exception as exc:  # noqa: BLE001
        logger.warning("AI augmentation failed, keeping rule-based result: %s", exc)
        return analysis.model_copy(update={"degraded": True})

    logger.info(
        "AI augmentation added %d ambiguities and %d NFRs",
        len(merged.ambiguities) - len(analysis.ambiguities),
        len(merged.nfr_suggestions) - len(analysis.nfr_suggestions),
    )
    return merged
