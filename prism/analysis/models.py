"""Pydantic v2 models for the PRISM analysis pipeline.

Defines the shared intermediate representation produced by the analyzers
(entities, ambiguities, completeness, story validation, NFR suggestions), the
aggregate ``AnalysisResult`` handed to generators, and the
``GenerationRequest`` that selects which artifacts to produce.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from prism.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    """Ambiguity severity. Declaration order is the reporting order."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """0 for Critical up to 3 for Low."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = list(Severity)


class GapPriority(str, Enum):
    """Priority of a completeness gap."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class NfrCategory(str, Enum):
    """The eight fixed non-functional requirement categories."""
    SECURITY = "Security"
    PERFORMANCE = "Performance"
    USABILITY = "Usability"
    RELIABILITY = "Reliability"
    SCALABILITY = "Scalability"
    MAINTAINABILITY = "Maintainability"
    COMPATIBILITY = "Compatibility"
    ACCESSIBILITY = "Accessibility"


class NfrPriority(str, Enum):
    """MoSCoW priority for an NFR suggestion."""
    MUST_HAVE = "MustHave"
    SHOULD_HAVE = "ShouldHave"
    COULD_HAVE = "CouldHave"
    WONT_HAVE = "WontHave"


class ArtifactType(str, Enum):
    """Artifacts a caller can request from the generators."""
    UML = "uml"
    PSEUDO = "pseudo"
    TESTS = "tests"
    IMPROVE = "improve"
    NFR = "nfr"


class PseudocodeStyle(str, Enum):
    """Supported pseudocode templates."""
    GENERIC = "generic"
    PYTHON = "python"


Origin = Literal["rule", "ai"]


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class RequirementText(BaseModel):
    """A requirement document as handed to the pipeline."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Original, unmodified requirement text")
    source: str = Field(default="inline", description="File path or 'inline'")


class GenerationRequest(BaseModel):
    """Selects which artifacts to generate and how."""
    model_config = ConfigDict(frozen=True)

    artifacts: frozenset[ArtifactType] = Field(
        default_factory=frozenset, description="Artifact types to generate"
    )
    pseudocode_style: str = Field(
        default=PseudocodeStyle.GENERIC.value,
        description="Pseudocode template: 'generic' or 'python'",
    )

    @classmethod
    def parse(
        cls, names: Iterable[str], pseudocode_style: str = "generic"
    ) -> "GenerationRequest":
        """Build a request from raw artifact names such as ``["uml", "tests"]``.

        Raises:
            ConfigurationError: If a name is not a known artifact type.
        """
        artifacts: set[ArtifactType] = set()
        for raw in names:
            name = raw.strip().lower()
            if not name:
                continue
            if name == "all":
                artifacts.update(ArtifactType)
                continue
            try:
                artifacts.add(ArtifactType(name))
            except ValueError:
                known = ", ".join(a.value for a in ArtifactType)
                raise ConfigurationError(
                    f"Unknown artifact type '{raw}'. Expected one of: {known}, all"
                ) from None
        return cls(artifacts=frozenset(artifacts), pseudocode_style=pseudocode_style)

    def resolved_style(self) -> PseudocodeStyle:
        """Return the pseudocode style as an enum member.

        Raises:
            ConfigurationError: If the style is not supported.
        """
        try:
            return PseudocodeStyle(self.pseudocode_style.strip().lower())
        except ValueError:
            known = ", ".join(s.value for s in PseudocodeStyle)
            raise ConfigurationError(
                f"Unsupported pseudocode style '{self.pseudocode_style}'. "
                f"Expected one of: {known}"
            ) from None

    def wants(self, artifact: ArtifactType) -> bool:
        return artifact in self.artifacts


# ---------------------------------------------------------------------------
# Analysis sub-results
# ---------------------------------------------------------------------------

class Entities(BaseModel):
    """Actors, actions and objects in first-occurrence order."""
    model_config = ConfigDict(frozen=True)

    actors: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    objects: list[str] = Field(default_factory=list)
    attributes: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Fields heuristically attached to each object",
    )

    @property
    def is_empty(self) -> bool:
        return not (self.actors or self.actions or self.objects)


class Ambiguity(BaseModel):
    """A phrase or pattern that makes a requirement unclear."""
    model_config = ConfigDict(frozen=True)

    matched_text: str = Field(..., description="The offending text as written")
    reason: str = Field(..., description="Why the text is ambiguous")
    suggestions: list[str] = Field(default_factory=list)
    severity: Severity = Field(default=Severity.MEDIUM)
    category: str = Field(default="", description="Detection pass that produced it")
    position: int = Field(default=-1, description="Offset of first occurrence, -1 if unknown")
    origin: Origin = Field(default="rule")

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.matched_text.casefold(), self.reason)


class Gap(BaseModel):
    """A missing requirement component."""
    model_config = ConfigDict(frozen=True)

    category: str
    description: str
    suggestions: list[str] = Field(default_factory=list)
    priority: GapPriority = Field(default=GapPriority.MEDIUM)


class CompletenessResult(BaseModel):
    """Completeness score plus one gap per missing component."""
    model_config = ConfigDict(frozen=True)

    score: float = Field(default=0.0, ge=0.0, le=100.0)
    gaps: list[Gap] = Field(default_factory=list)
    components: dict[str, bool] = Field(
        default_factory=dict, description="Presence of each checked component"
    )


class ComponentQuality(BaseModel):
    """Quality assessment of one user-story segment."""
    model_config = ConfigDict(frozen=True)

    score: float = Field(default=0.0, ge=0.0, le=100.0)
    is_valid: bool = False
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class StoryValidation(BaseModel):
    """Result of validating the 'As a / I want / so that' structure."""
    model_config = ConfigDict(frozen=True)

    is_valid_format: bool = False
    actor: str = ""
    goal: str = ""
    reason: str = ""
    actor_quality: ComponentQuality = Field(default_factory=ComponentQuality)
    goal_quality: ComponentQuality = Field(default_factory=ComponentQuality)
    reason_quality: ComponentQuality = Field(default_factory=ComponentQuality)
    business_value_score: float = Field(default=0.0, ge=0.0, le=100.0)
    recommendations: list[str] = Field(default_factory=list)


class NfrSuggestion(BaseModel):
    """A candidate non-functional requirement."""
    model_config = ConfigDict(frozen=True)

    category: NfrCategory
    requirement: str
    priority: NfrPriority = Field(default=NfrPriority.SHOULD_HAVE)
    rationale: str = ""
    acceptance_criteria: list[str] = Field(default_factory=list)
    origin: Origin = Field(default="rule")

    @property
    def dedup_key(self) -> tuple[NfrCategory, str]:
        return (self.category, self.requirement.casefold())


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

class AnalysisResult(BaseModel):
    """Everything PRISM knows about one requirement text."""
    model_config = ConfigDict(frozen=True)

    requirement: RequirementText
    entities: Entities = Field(default_factory=Entities)
    ambiguities: list[Ambiguity] = Field(default_factory=list)
    completeness: CompletenessResult = Field(default_factory=CompletenessResult)
    story_validation: StoryValidation = Field(default_factory=StoryValidation)
    nfr_suggestions: list[NfrSuggestion] = Field(default_factory=list)
    artifacts: dict[ArtifactType, str] = Field(
        default_factory=dict, description="Generated artifacts, requested types only"
    )
    improved_requirements: str | None = Field(
        default=None, description="AI rewrite of the requirement, when available"
    )
    degraded: bool = Field(
        default=False, description="AI augmentation was requested but failed"
    )
    ai_augmented: bool = False
    warnings: list[str] = Field(default_factory=list)

    def nfrs_by_category(self, category: NfrCategory) -> list[NfrSuggestion]:
        return [n for n in self.nfr_suggestions if n.category == category]
