"""Shared pytest fixtures for the PRISM test suite.

Provides reusable fixtures for:
- Sample requirement texts (user stories, free-form requirements, blank input)
- Pre-computed analysis results
- Fake completion capabilities for the AI augmentation stage
- Mocked httpx clients
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from prism.analysis.augment import CompletionResult
from prism.analysis.models import AnalysisResult, RequirementText
from prism.pipeline import RequirementPipeline


# ---------------------------------------------------------------------------
# Requirement texts
# ---------------------------------------------------------------------------

LOGIN_STORY = "As a user, I want to login quickly"
SOMEONE_REPORTS = "Someone should be able to create reports"
FULL_STORY = (
    "As a registered customer, I want to upload invoice documents "
    "so that I can reduce errors in monthly accounting."
)


@pytest.fixture
def login_story() -> str:
    return LOGIN_STORY


@pytest.fixture
def someone_reports() -> str:
    return SOMEONE_REPORTS


@pytest.fixture
def full_story() -> str:
    return FULL_STORY


@pytest.fixture
def detailed_requirement() -> str:
    """A multi-sentence requirement that covers every completeness component."""
    return textwrap.dedent("""\
        As an administrator, I want to create a project with title, description and deadline
        so that the team can track delivery dates.
        The response time must stay under 2 seconds for 95% of requests.
        If the title is missing, the system shows an error.
        Only administrators are allowed to delete projects.
    """)


@pytest.fixture
def requirements_dir(tmp_path: Path) -> Path:
    """Directory with three requirement files and one unrelated file."""
    req_dir = tmp_path / "requirements"
    req_dir.mkdir()
    (req_dir / "login.md").write_text(LOGIN_STORY + "\n", encoding="utf-8")
    (req_dir / "reports.txt").write_text(SOMEONE_REPORTS + "\n", encoding="utf-8")
    nested = req_dir / "billing"
    nested.mkdir()
    (nested / "invoices.md").write_text(FULL_STORY + "\n", encoding="utf-8")
    (req_dir / "logo.png").write_bytes(b"\x89PNG\r\n")
    return req_dir


# ---------------------------------------------------------------------------
# Analysis results
# ---------------------------------------------------------------------------

@pytest.fixture
def pipeline() -> RequirementPipeline:
    return RequirementPipeline()


@pytest.fixture
def login_result(pipeline: RequirementPipeline) -> AnalysisResult:
    return pipeline.analyze(RequirementText(text=LOGIN_STORY))


@pytest.fixture
def full_story_result(pipeline: RequirementPipeline) -> AnalysisResult:
    return pipeline.analyze(RequirementText(text=FULL_STORY))


# ---------------------------------------------------------------------------
# Fake completion capabilities
# ---------------------------------------------------------------------------

def make_ai_payload(**overrides: Any) -> dict[str, Any]:
    """Build a realistic augmentation payload."""
    payload: dict[str, Any] = {
        "ambiguities": [
            {
                "matched_text": "login",
                "reason": "Authentication method is not specified",
                "suggestions": ["Name the supported login methods"],
                "severity": "High",
            }
        ],
        "gaps": [
            {
                "category": "session",
                "description": "Session lifetime is not defined",
                "suggestions": ["State the session timeout"],
                "priority": "Medium",
            }
        ],
        "nfr_suggestions": [
            {
                "category": "Usability",
                "requirement": "The login form shall remember the last used username",
                "priority": "CouldHave",
                "rationale": "Returning users log in faster",
                "acceptance_criteria": ["Username pre-filled on return visits"],
            }
        ],
        "story_scores": {
            "actor_score": 90,
            "goal_score": 85,
            "reason_score": 95,
            "business_value_score": 92,
        },
        "improved_requirements": "As a registered user, I want to log in within 2 seconds.",
    }
    payload.update(overrides)
    return payload


def make_capability(text: str | None = None, success: bool = True, error: str | None = None):
    """Return a mock completion capability answering with *text*."""
    capability = MagicMock()
    capability.complete = AsyncMock(return_value=CompletionResult(
        text=json.dumps(make_ai_payload()) if text is None else text,
        model="mock-model",
        duration_ms=12.5,
        success=success,
        error=error,
    ))
    return capability


@pytest.fixture
def ai_capability():
    """Capability returning a valid augmentation payload."""
    return make_capability()


@pytest.fixture
def failing_capability():
    """Capability whose ``complete`` raises."""
    capability = MagicMock()
    capability.complete = AsyncMock(side_effect=RuntimeError("provider exploded"))
    return capability


# ---------------------------------------------------------------------------
# Mock httpx
# ---------------------------------------------------------------------------

def mock_async_client(response: Any = None, side_effect: Any = None, method: str = "post"):
    """Build an ``httpx.AsyncClient`` stand-in usable as an async context manager."""
    client = AsyncMock()
    setattr(client, method, AsyncMock(return_value=response, side_effect=side_effect))
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def mock_json_response(data: dict[str, Any], status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def ai_payload() -> dict[str, Any]:
    return make_ai_payload()


@pytest.fixture
def capability_factory():
    """Factory fixture: ``capability_factory(text, success, error)``."""
    return make_capability


@pytest.fixture
def async_client_factory():
    """Factory fixture: ``async_client_factory(response, side_effect, method)``."""
    return mock_async_client


@pytest.fixture
def json_response_factory():
    """Factory fixture: ``json_response_factory(data, status_code)``."""
    return mock_json_response
