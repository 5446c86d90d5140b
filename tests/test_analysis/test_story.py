"""Unit tests for user story validation (prism.analysis.story)."""

from __future__ import annotations

import pytest

from prism.analysis import story


class TestFormat:
    @pytest.mark.unit
    def test_missing_so_that_is_invalid(self, login_story):
        result = story.validate(login_story)
        assert result.is_valid_format is False
        assert result.business_value_score == 0.0
        assert result.actor_quality.score == 0.0
        assert result.recommendations == [story.FORMAT_HINT]

    @pytest.mark.unit
    def test_free_text_is_invalid(self, someone_reports):
        assert story.validate(someone_reports).is_valid_format is False

    @pytest.mark.unit
    def test_markers_must_be_in_order(self):
        result = story.validate("I want to export data so that, as a manager, I can plan.")
        assert result.is_valid_format is False

    @pytest.mark.unit
    def test_segments_are_extracted(self, full_story):
        result = story.validate(full_story)
        assert result.is_valid_format is True
        assert result.actor == "registered customer"
        assert result.goal == "upload invoice documents"
        assert result.reason == "I can reduce errors in monthly accounting"

    @pytest.mark.unit
    def test_case_insensitive_markers(self):
        result = story.validate("AS AN Editor I WANT to publish articles SO THAT readers save time")
        assert result.is_valid_format is True
        assert result.actor == "Editor"
        assert result.reason == "readers save time"


class TestScoring:
    @pytest.mark.unit
    def test_well_formed_story_scores_full_marks(self, full_story):
        result = story.validate(full_story)
        assert result.actor_quality.score == 100.0
        assert result.goal_quality.score == 100.0
        assert result.reason_quality.score == 100.0
        assert result.business_value_score == 100.0
        assert result.recommendations == []

    @pytest.mark.unit
    def test_vague_story(self):
        result = story.validate("As a user, I want to do stuff so that things are better.")
        assert result.actor_quality.score == 100.0
        assert result.goal_quality.score == 40.0
        assert result.goal_quality.is_valid is False
        assert result.reason_quality.score == 30.0
        assert result.business_value_score == 47.0
        assert "The goal uses vague wording" in result.goal_quality.issues
        assert any("measurable" in r for r in result.recommendations)

    @pytest.mark.unit
    def test_business_value_weights(self):
        assert story.ACTOR_VALUE_WEIGHT + story.GOAL_VALUE_WEIGHT + story.REASON_VALUE_WEIGHT == pytest.approx(1.0)


class TestScoreSegment:
    @pytest.mark.unit
    def test_empty_segment(self):
        quality = story.score_segment("", story.GOAL_RULE, lambda s: True, label="goal")
        assert quality.score == 0.0
        assert quality.is_valid is False
        assert quality.issues == ["The goal is missing"]

    @pytest.mark.unit
    def test_too_long_segment_gets_half_length_credit(self):
        quality = story.score_segment(
            "head of the regional sales team", story.ACTOR_RULE, lambda s: False, label="actor"
        )
        assert quality.score == 50.0
        assert quality.issues[0] == "The actor is too long (6 words)"

    @pytest.mark.unit
    def test_valid_threshold(self):
        quality = story.score_segment("upload files", story.GOAL_RULE, lambda s: False)
        assert quality.score == 70.0
        assert quality.is_valid is True
