"""PRISM rule-based requirement analysis.

Each analyzer is a pure function over the normalized text and the shared
lexicon. The pipeline orchestrator sequences them; they can also be used on
their own.

Usage::

    from prism.analysis import entities, ambiguity, normalize

    norm = normalize("As a user, I want to login quickly")
    found = entities.extract(norm)
    issues = ambiguity.detect(norm, found)
"""

from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import (
    AnalysisResult,
    Ambiguity,
    ArtifactType,
    CompletenessResult,
    ComponentQuality,
    Entities,
    Gap,
    GapPriority,
    GenerationRequest,
    NfrCategory,
    NfrPriority,
    NfrSuggestion,
    PseudocodeStyle,
    RequirementText,
    Severity,
    StoryValidation,
)
from prism.analysis.normalizer import NormalizedText, normalize

__all__ = [
    "DEFAULT_LEXICON",
    "Lexicon",
    "AnalysisResult",
    "Ambiguity",
    "ArtifactType",
    "CompletenessResult",
    "ComponentQuality",
    "Entities",
    "Gap",
    "GapPriority",
    "GenerationRequest",
    "NfrCategory",
    "NfrPriority",
    "NfrSuggestion",
    "PseudocodeStyle",
    "RequirementText",
    "Severity",
    "StoryValidation",
    "NormalizedText",
    "normalize",
]
