"""Unit tests for entity extraction (prism.analysis.entities)."""

from __future__ import annotations

import pytest

from prism.analysis import entities
from prism.analysis.models import Entities
from prism.analysis.normalizer import normalize


class TestActors:
    @pytest.mark.unit
    def test_role_phrase(self, login_story):
        assert entities.extract(login_story).actors == ["user"]

    @pytest.mark.unit
    def test_multi_word_role_phrase(self, full_story):
        assert entities.extract(full_story).actors == ["registered customer"]

    @pytest.mark.unit
    def test_role_phrase_after_label(self):
        found = entities.extract("Story 1: As an account owner, I want to reset my password.")
        assert found.actors == ["account owner"]

    @pytest.mark.unit
    def test_plural_roles_are_singularized(self):
        found = entities.extract("Admins create orders. Admins delete orders.")
        assert found.actors == ["admin"]

    @pytest.mark.unit
    def test_roles_in_first_occurrence_order(self):
        found = entities.extract("Guests browse products while members buy them.")
        assert found.actors == ["guest", "member"]

    @pytest.mark.unit
    def test_hyphenated_adjective_is_not_an_actor(self):
        found = entities.extract("The dashboard must be user-friendly.")
        assert found.actors == []
        assert found.objects == ["dashboard"]

    @pytest.mark.unit
    def test_indefinite_subject_is_not_an_actor(self, someone_reports):
        assert entities.extract(someone_reports).actors == []


class TestActions:
    @pytest.mark.unit
    def test_simple_verb(self, login_story):
        assert entities.extract(login_story).actions == ["login"]

    @pytest.mark.unit
    def test_multiword_actions_are_canonical(self):
        found = entities.extract("Customers can sign in and check out their shopping cart.")
        assert found.actions == ["login", "checkout"]

    @pytest.mark.unit
    def test_inflected_forms(self):
        found = entities.extract("The manager approved the invoice and exported it.")
        assert found.actions == ["approve", "export"]

    @pytest.mark.unit
    def test_participle_after_determiner_is_not_an_action(self, full_story):
        assert entities.extract(full_story).actions == ["upload"]

    @pytest.mark.unit
    def test_actions_are_deduplicated(self):
        found = entities.extract("Users create tasks. Admins create projects.")
        assert found.actions == ["create"]


class TestObjects:
    @pytest.mark.unit
    def test_no_object_after_adverb(self, login_story):
        assert entities.extract(login_story).objects == []

    @pytest.mark.unit
    def test_plural_object_is_singularized(self, someone_reports):
        assert entities.extract(someone_reports).objects == ["report"]

    @pytest.mark.unit
    def test_compound_object(self):
        found = entities.extract("Customers can sign in and check out their shopping cart.")
        assert found.objects == ["shopping cart"]

    @pytest.mark.unit
    def test_objects_in_first_occurrence_order(self, full_story):
        assert entities.extract(full_story).objects == ["invoice", "document"]

    @pytest.mark.unit
    def test_object_after_possessive(self):
        found = entities.extract("Story 1: As an account owner, I want to reset my password.")
        assert "password" in found.objects

    @pytest.mark.unit
    def test_actor_roles_are_not_objects(self):
        found = entities.extract("Admins manage users.")
        assert found.actors == ["admin", "user"]
        assert "user" not in found.objects


class TestAttributes:
    @pytest.mark.unit
    def test_with_list_attaches_to_object(self):
        found = entities.extract("Users can create a task with title, description and due date.")
        assert found.objects == ["task"]
        assert found.attributes == {"task": ["title", "description", "due date"]}

    @pytest.mark.unit
    def test_field_nouns_attach_to_nearest_object(self):
        found = entities.extract("Users update the order status and the product price.")
        assert found.attributes["order"] == ["status"]
        assert found.attributes["product"] == ["price"]

    @pytest.mark.unit
    def test_objects_without_fields_have_no_entry(self, someone_reports):
        assert entities.extract(someone_reports).attributes == {}


class TestExtract:
    @pytest.mark.unit
    def test_blank_input_is_empty(self):
        found = entities.extract("   ")
        assert found == Entities()
        assert found.is_empty is True

    @pytest.mark.unit
    def test_accepts_normalized_text(self, full_story):
        assert entities.extract(normalize(full_story)) == entities.extract(full_story)

    @pytest.mark.unit
    def test_deterministic(self, full_story):
        assert entities.extract(full_story) == entities.extract(full_story)
