"""Unit tests for the improved-requirements artifact (prism.generators.improve)."""

from __future__ import annotations

import pytest

from prism.analysis.models import (
    AnalysisResult,
    Ambiguity,
    CompletenessResult,
    RequirementText,
    Severity,
)
from prism.generators import improve


class TestImprovementNotes:
    @pytest.mark.unit
    def test_ambiguities_then_gaps(self, login_result):
        notes = improve.improvement_notes(login_result)
        assert notes[0].startswith("[Medium] 'quickly' - Subjective term without measurable criteria.")
        assert notes[1] == "[Gap: acceptance_criteria] No acceptance criteria or measurable outcome is defined"
        assert len(notes) == len(login_result.ambiguities) + len(login_result.completeness.gaps)

    @pytest.mark.unit
    def test_notes_are_comment_safe(self):
        result = AnalysisResult(
            requirement=RequirementText(text="x"),
            ambiguities=[Ambiguity(matched_text="a -- b", reason="line\nbreak", severity=Severity.LOW)],
            completeness=CompletenessResult(score=100.0),
        )
        note = improve.improvement_notes(result)[0]
        assert "--" not in note
        assert "\n" not in note


class TestGenerate:
    @pytest.mark.unit
    def test_original_text_with_notes(self, login_result):
        text = improve.generate(login_result)
        assert text.startswith("As a user, I want to login quickly\n")
        assert "<!-- PRISM IMPROVEMENT NOTES -->" in text
        assert "<!-- Manual improvements recommended: -->" in text
        assert "<!-- 1: [Medium] 'quickly'" in text

    @pytest.mark.unit
    def test_nothing_to_improve(self):
        result = AnalysisResult(
            requirement=RequirementText(text="Perfect requirement."),
            completeness=CompletenessResult(score=100.0),
        )
        text = improve.generate(result)
        assert "<!-- No ambiguities or gaps detected. -->" in text

    @pytest.mark.unit
    def test_ai_rewrite_wins(self, login_result):
        result = login_result.model_copy(update={"improved_requirements": "  Better text.  "})
        assert improve.generate(result) == "Better text.\n"
