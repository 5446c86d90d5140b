"""PRISM artifact generators.

Stateless, deterministic renderers that turn an ``AnalysisResult`` into
PlantUML diagrams, pseudocode, test scenarios, improved requirements and an
NFR catalogue. Generators never feed back into analysis.

Usage::

    from prism.generators import generate_artifacts

    artifacts = generate_artifacts(result, GenerationRequest.parse(["uml", "tests"]))
    print(artifacts[ArtifactType.UML])
"""

from __future__ import annotations

from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import AnalysisResult, ArtifactType, GenerationRequest

from . import improve, nfr_catalogue, pseudocode, scenarios, uml
from .renderer import TemplateRenderer, default_renderer


def generate_artifact(
    artifact: ArtifactType,
    result: AnalysisResult,
    request: GenerationRequest,
    lexicon: Lexicon = DEFAULT_LEXICON,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render a single artifact.

    Raises:
        ConfigurationError: If the request names an unsupported pseudocode style.
    """
    renderer = renderer or default_renderer()
    if artifact is ArtifactType.UML:
        return uml.generate(result, lexicon, renderer)
    elif artifact is ArtifactType.PSEUDO:
        return pseudocode.generate(result, request.resolved_style(), lexicon, renderer)
    elif artifact is ArtifactType.TESTS:
        return scenarios.generate(result, lexicon, renderer)
    elif artifact is ArtifactType.IMPROVE:
        return improve.generate(result, renderer)
    elif artifact is ArtifactType.NFR:
        return nfr_catalogue.generate(result, renderer)
    raise ValueError(f"Unhandled artifact type: {artifact!r}")


def generate_artifacts(
    result: AnalysisResult,
    request: GenerationRequest,
    lexicon: Lexicon = DEFAULT_LEXICON,
    renderer: TemplateRenderer | None = None,
) -> dict[ArtifactType, str]:
    """Render every requested artifact, in ``ArtifactType`` declaration order."""
    return {
        artifact: generate_artifact(artifact, result, request, lexicon, renderer)
        for artifact in ArtifactType
        if request.wants(artifact)
    }


__all__ = [
    "TemplateRenderer",
    "generate_artifact",
    "generate_artifacts",
]
