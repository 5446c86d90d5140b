"""Test scenario generation: one happy, one negative and one edge case per action."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field

from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import AnalysisResult, Entities

from .renderer import TemplateRenderer, default_renderer

PLACEHOLDER_ACTOR = "user"
PLACEHOLDER_ACTION = "perform action"


class ScenarioKind(str, Enum):
    """Scenario classification, in rendering order."""
    HAPPY_PATH = "happy_path"
    NEGATIVE = "negative"
    EDGE_CASE = "edge_case"


_TITLES = {
    ScenarioKind.HAPPY_PATH: "Happy Path",
    ScenarioKind.NEGATIVE: "Negative Cases",
    ScenarioKind.EDGE_CASE: "Edge Cases",
}


class Scenario(BaseModel):
    """A single test scenario."""
    name: str = Field(..., description="Test scenario name")
    description: str = Field(default="", description="What this test verifies")
    steps: list[str] = Field(default_factory=list, description="Ordered test steps")
    expected_result: str = Field(default="", description="Expected outcome")
    action: str = Field(..., description="Action under test")
    kind: ScenarioKind = Field(default=ScenarioKind.HAPPY_PATH)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _slugify(text: str) -> str:
    """Convert text to a test-friendly slug."""
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower().strip())
    return slug.strip("_")


def _scenarios_for(action: str, actor: str, target: str, auth: bool) -> list[Scenario]:
    slug = _slugify(action)
    subject = f"{action} {target}".strip()
    invalid_input = "invalid credentials" if auth else "invalid input"
    return [
        Scenario(
            name=f"test_{slug}_success",
            description=f"Test successful execution of {action}",
            steps=[
                f"Given an authorised {actor}",
                f"When the {actor} attempts to {subject} with valid data",
                "Then the operation completes without errors",
            ],
            expected_result=f"The {action} operation succeeds and its result is recorded",
            action=action,
            kind=ScenarioKind.HAPPY_PATH,
        ),
        Scenario(
            name=f"test_{slug}_invalid_input",
            description=f"Test {action} with {invalid_input}",
            steps=[
                f"Given an authorised {actor}",
                f"When the {actor} attempts to {subject} with {invalid_input}",
                "Then the request is rejected",
            ],
            expected_result="A descriptive validation error is returned and no state changes",
            action=action,
            kind=ScenarioKind.NEGATIVE,
        ),
        Scenario(
            name=f"test_{slug}_empty_values",
            description=f"Test {action} with empty/null values",
            steps=[
                f"Given an authorised {actor}",
                f"When the {actor} attempts to {subject} with empty or missing fields",
                "Then the system handles the empty values gracefully",
            ],
            expected_result="Required fields are reported as missing and no partial data is stored",
            action=action,
            kind=ScenarioKind.EDGE_CASE,
        ),
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_scenarios(entities: Entities, lexicon: Lexicon = DEFAULT_LEXICON) -> list[Scenario]:
    """Return happy, negative and edge scenarios for every action.

    Sparse entities fall back to a placeholder actor and action so the output
    always contains at least one scenario of each kind.
    """
    actor = entities.actors[0] if entities.actors else PLACEHOLDER_ACTOR
    actions = entities.actions or [PLACEHOLDER_ACTION]
    target = entities.objects[0] if entities.objects else ""
    scenarios: list[Scenario] = []
    for action in actions:
        scenarios.extend(_scenarios_for(action, actor, target, lexicon.is_auth_action(action)))
    return scenarios


def generate(
    result: AnalysisResult,
    lexicon: Lexicon = DEFAULT_LEXICON,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the test scenarios as a markdown checklist grouped by kind."""
    renderer = renderer or default_renderer()
    scenarios = build_scenarios(result.entities, lexicon)
    groups = [
        {"title": _TITLES[kind], "scenarios": [s for s in scenarios if s.kind is kind]}
        for kind in ScenarioKind
    ]
    return renderer.render("report/test_scenarios.md.j2", {"groups": groups})
