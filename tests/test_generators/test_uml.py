"""Unit tests for PlantUML generation (prism.generators.uml)."""

from __future__ import annotations

import pytest

from prism.analysis.models import AnalysisResult, Entities, RequirementText
from prism.generators import uml

TASK_STORY = "As an admin, I want to login and create a task with title and priority."


@pytest.fixture
def task_result(pipeline) -> AnalysisResult:
    return pipeline.analyze(TASK_STORY)


class TestHelpers:
    @pytest.mark.unit
    @pytest.mark.parametrize("actor,action,expected", [
        ("admin", "send", True),
        ("admin", "create", True),
        ("system", "send", True),
        ("system", "create", False),
        ("customer", "send", False),
        ("customer", "create", True),
        ("registered customer", "login", True),
    ])
    def test_should_connect(self, actor, action, expected):
        assert uml.should_connect(actor, action) is expected

    @pytest.mark.unit
    @pytest.mark.parametrize("field,expected", [
        ("due date", "Date"),
        ("deadline", "Date"),
        ("price", "Number"),
        ("tags", "List<String>"),
        ("title", "String"),
    ])
    def test_attribute_type(self, field, expected):
        assert uml.attribute_type(field) == expected


class TestGenerate:
    @pytest.mark.unit
    def test_three_diagrams(self, login_result):
        text = uml.generate(login_result)
        assert text.count("@startuml") == 3
        assert text.count("@enduml") == 3
        assert "title Requirements Use Case Diagram" in text
        assert "title Requirements Sequence Diagram" in text
        assert "title Requirements Class Diagram" in text
        assert text.endswith("@enduml\n")

    @pytest.mark.unit
    def test_use_case_diagram(self, login_result):
        text = uml.generate(login_result)
        assert 'actor "user" as user' in text
        assert 'usecase "login" as UC1' in text
        assert "user --> UC1" in text

    @pytest.mark.unit
    def test_sequence_without_objects_has_no_database(self, login_result):
        text = uml.generate(login_result)
        assert "database" not in text
        assert "user -> System : login" in text
        assert "System -> System : Validate credentials" in text
        assert "== Alternative Flow (Authentication Failure) ==" in text
        assert "== Alternative Flow (Error Handling) ==" in text

    @pytest.mark.unit
    def test_class_diagram_without_objects(self, login_result):
        text = uml.generate(login_result)
        assert "class AuthenticationService <<service>> {" in text
        assert "+login(Actor, Map): Result" in text
        assert "enum Status" not in text

    @pytest.mark.unit
    def test_include_and_note(self, task_result):
        text = uml.generate(task_result)
        assert "UC2 ..> UC1 : <<include>>" in text
        assert "note right of admin" in text
        assert "  * task" in text

    @pytest.mark.unit
    def test_database_and_entity_classes(self, task_result):
        text = uml.generate(task_result)
        assert 'database "task\\nDatabase" as DB' in text
        assert "System -> DB : Validate credentials" in text
        assert "class Task {" in text
        assert "  -title: String" in text
        assert "  -priority: Number" in text
        assert "enum Status {" in text
        assert "Task --> Status : has" in text
        assert "DataManagementService ..> Task : processes" in text

    @pytest.mark.unit
    def test_empty_entities(self):
        result = AnalysisResult(requirement=RequirementText(text="xyz"), entities=Entities())
        text = uml.generate(result)
        assert text.count("@startuml") == 3
        assert "Main Flow" not in text
        assert "System Boundary" not in text

    @pytest.mark.unit
    def test_deterministic(self, task_result):
        assert uml.generate(task_result) == uml.generate(task_result)
