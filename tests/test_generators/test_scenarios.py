"""Unit tests for test scenario generation (prism.generators.scenarios)."""

from __future__ import annotations

import pytest

from prism.analysis.models import AnalysisResult, Entities, RequirementText
from prism.generators import scenarios
from prism.generators.scenarios import ScenarioKind


class TestBuildScenarios:
    @pytest.mark.unit
    def test_three_scenarios_per_action(self):
        built = scenarios.build_scenarios(Entities(actors=["admin"], actions=["create", "delete"]))
        assert len(built) == 6
        assert [s.kind for s in built[:3]] == [
            ScenarioKind.HAPPY_PATH, ScenarioKind.NEGATIVE, ScenarioKind.EDGE_CASE,
        ]

    @pytest.mark.unit
    def test_names_and_descriptions(self, login_result):
        built = scenarios.build_scenarios(login_result.entities)
        assert [s.name for s in built] == [
            "test_login_success",
            "test_login_invalid_input",
            "test_login_empty_values",
        ]
        assert built[0].description == "Test successful execution of login"
        assert built[1].description == "Test login with invalid credentials"
        assert built[2].description == "Test login with empty/null values"

    @pytest.mark.unit
    def test_non_auth_negative_case(self):
        built = scenarios.build_scenarios(Entities(actions=["upload"], objects=["document"]))
        assert built[1].description == "Test upload with invalid input"
        assert "attempts to upload document" in built[0].steps[1]

    @pytest.mark.unit
    def test_placeholders_for_sparse_entities(self):
        built = scenarios.build_scenarios(Entities())
        assert len(built) == 3
        assert built[0].name == "test_perform_action_success"
        assert built[0].steps[0] == "Given an authorised user"

    @pytest.mark.unit
    def test_steps_and_expected_results(self, login_result):
        for scenario in scenarios.build_scenarios(login_result.entities):
            assert len(scenario.steps) == 3
            assert scenario.expected_result


class TestGenerate:
    @pytest.mark.unit
    def test_markdown_layout(self, login_result):
        text = scenarios.generate(login_result)
        assert text.startswith("# Test Scenarios\n")
        assert text.index("## Happy Path") < text.index("## Negative Cases") < text.index("## Edge Cases")
        assert "### test_login_success" in text
        assert "1. Given an authorised user" in text
        assert "Expected: " in text

    @pytest.mark.unit
    def test_sparse_result_still_renders(self):
        text = scenarios.generate(AnalysisResult(requirement=RequirementText(text="xyz")))
        assert "### test_perform_action_invalid_input" in text
