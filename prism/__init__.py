"""PRISM requirement analyzer.

Analyses natural-language software requirements for ambiguity,
completeness, user-story quality and non-functional gaps, and generates
design artifacts (PlantUML, pseudocode, test scenarios) from the findings.

Usage::

    from prism import analyze, GenerationRequest

    result = analyze("As a user, I want to login quickly", GenerationRequest.parse(["uml"]))
    print(result.ambiguities)
    print(result.artifacts)
"""

__version__ = "0.1.0"

from prism.analysis.models import (
    AnalysisResult,
    ArtifactType,
    GenerationRequest,
    RequirementText,
)
from prism.config import Config
from prism.errors import AugmentationFailure, ConfigurationError, InputError, PrismError
from prism.pipeline import RequirementPipeline, analyze

__all__ = [
    "__version__",
    "analyze",
    "RequirementPipeline",
    "AnalysisResult",
    "ArtifactType",
    "GenerationRequest",
    "RequirementText",
    "Config",
    "PrismError",
    "InputError",
    "AugmentationFailure",
    "ConfigurationError",
]
