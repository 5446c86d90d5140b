"""PRISM pipeline orchestrator.

Sequences the analysis stages for one requirement text:

1. NORMALIZE  -- split into sentences and clauses, offset-preserving lowercase.
2. EXTRACT    -- actors, actions, objects and attributes.
3. ANALYZE    -- ambiguities, completeness, user-story quality, NFRs.
4. AUGMENT    -- optional AI enrichment; degrades gracefully on failure.
5. GENERATE   -- requested artifacts from the final result.

Usage::

    from prism.pipeline import analyze
    result = analyze("As a user, I want to login quickly", GenerationRequest.parse(["uml"]))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from prism.analysis import ambiguity, completeness, entities, nfr, story
from prism.analysis.augment import DEFAULT_TIMEOUT, CompletionCapability, augment
from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import AnalysisResult, GenerationRequest, RequirementText
from prism.analysis.normalizer import normalize, normalize_lenient
from prism.config import AnalysisConfig
from prism.errors import InputError
from prism.generators import generate_artifacts

logger = logging.getLogger(__name__)


def _as_requirement(requirement: RequirementText | str) -> RequirementText:
    if isinstance(requirement, RequirementText):
        return requirement
    return RequirementText(text=requirement)


class RequirementPipeline:
    """Rule-based analysis plus optional AI augmentation and artifact generation.

    A pipeline holds no per-run state, so one instance can serve many
    concurrent analyses.

    Attributes:
        settings: Analysis tuning knobs.
        lexicon: Word tables, extended with the configured custom terms.
    """

    def __init__(
        self,
        settings: AnalysisConfig | None = None,
        lexicon: Lexicon | None = None,
    ) -> None:
        self.settings = settings or AnalysisConfig()
        self.lexicon = (lexicon or DEFAULT_LEXICON).with_custom_terms(self.settings.custom_terms)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def analyze_rules(self, requirement: RequirementText | str) -> AnalysisResult:
        """Run the deterministic stages and assemble an ``AnalysisResult``.

        Blank text is not an error: analysis proceeds on an empty view and
        the problem is recorded in ``warnings``.
        """
        requirement = _as_requirement(requirement)
        warnings: list[str] = []
        try:
            norm = normalize(requirement.text)
        except InputError as exc:
            logger.warning("%s (source: %s)", exc, requirement.source)
            warnings.append(str(exc))
            norm = normalize_lenient(requirement.text)

        lexicon = self.lexicon
        found = entities.extract(norm, lexicon)
        return AnalysisResult(
            requirement=requirement,
            entities=found,
            ambiguities=ambiguity.detect(norm, found, lexicon, self.settings.ambiguity_threshold),
            completeness=completeness.analyze(norm, found, lexicon),
            story_validation=story.validate(norm, lexicon),
            nfr_suggestions=nfr.suggest(norm, found, lexicon),
            warnings=warnings,
        )

    def with_artifacts(self, result: AnalysisResult, request: GenerationRequest) -> AnalysisResult:
        """Return *result* with the requested artifacts attached."""
        if not request.artifacts:
            return result
        artifacts = generate_artifacts(result, request, self.lexicon)
        return result.model_copy(update={"artifacts": artifacts})

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def analyze(
        self,
        requirement: RequirementText | str,
        request: GenerationRequest | None = None,
    ) -> AnalysisResult:
        """Analyse *requirement* without AI and generate the requested artifacts.

        Raises:
            ConfigurationError: If the request names an unsupported pseudocode style.
        """
        request = request or GenerationRequest()
        request.resolved_style()
        result = self.analyze_rules(requirement)
        return self.with_artifacts(result, request)

    async def analyze_async(
        self,
        requirement: RequirementText | str,
        request: GenerationRequest | None = None,
        capability: CompletionCapability | None = None,
        llm_config: Any = None,
        timeout: float | None = None,
    ) -> AnalysisResult:
        """Analyse *requirement*, optionally augmenting it through *capability*.

        The rule-based stage runs in a worker thread. The AI stage is bounded
        by *timeout* (default: ``llm_config.timeout`` or 30 seconds) and never
        raises; a failure marks the result ``degraded``.

        Raises:
            ConfigurationError: If the request names an unsupported pseudocode style.
        """
        request = request or GenerationRequest()
        request.resolved_style()
        result = await asyncio.to_thread(self.analyze_rules, requirement)

        if capability is not None:
            if timeout is None:
                timeout = float(getattr(llm_config, "timeout", DEFAULT_TIMEOUT))
            result = await augment(result, capability, llm_config, timeout)

        return self.with_artifacts(result, request)


def analyze(
    requirement: RequirementText | str,
    request: GenerationRequest | None = None,
) -> AnalysisResult:
    """Analyse *requirement* with default settings."""
    return RequirementPipeline().analyze(requirement, request)
