"""Unit tests for pseudocode generation (prism.generators.pseudocode)."""

from __future__ import annotations

import pytest

from prism.analysis.models import AnalysisResult, Entities, PseudocodeStyle, RequirementText
from prism.generators import pseudocode

STEPS = [
    "Step 1: Validate preconditions",
    "Step 2: Check permissions",
    "Step 4: Execute business logic",
    "Step 6: Log",
    "Step 7: Handle errors",
]


@pytest.fixture
def task_result(pipeline) -> AnalysisResult:
    return pipeline.analyze(
        "As an admin, I want to login and create a task with title, priority and due date."
    )


class TestGeneric:
    @pytest.mark.unit
    def test_skeleton(self, login_result):
        text = pseudocode.generate(login_result, PseudocodeStyle.GENERIC)
        assert "enum Status {" in text
        assert "class User {" in text
        assert "class AuthenticationService {" in text
        assert "public Result login(Actor actor" in text
        for step in STEPS:
            assert step in text

    @pytest.mark.unit
    def test_entity_fields(self, task_result):
        text = pseudocode.generate(task_result, PseudocodeStyle.GENERIC)
        assert "class Task {" in text
        assert "private String title;" in text
        assert "private Number priority;" in text
        assert "private Date dueDate;" in text

    @pytest.mark.unit
    def test_status_always_present(self):
        result = AnalysisResult(requirement=RequirementText(text="xyz"))
        assert "enum Status {" in pseudocode.generate(result)


class TestPython:
    @pytest.mark.unit
    def test_skeleton(self, login_result):
        text = pseudocode.generate(login_result, PseudocodeStyle.PYTHON)
        assert "class Status(Enum):" in text
        assert "class User:" in text
        assert "def login(actor, target_object=None, **kwargs) -> Dict:" in text
        assert "def _execute_login(actor, target_object, **kwargs):" in text
        for step in STEPS:
            assert step in text

    @pytest.mark.unit
    def test_entity_dataclass(self, task_result):
        text = pseudocode.generate(task_result, PseudocodeStyle.PYTHON)
        assert "@dataclass\nclass Task:" in text
        assert "    title: Optional[str] = None" in text
        assert "    priority: Optional[float] = None" in text
        assert "    due_date: Optional[str] = None" in text

    @pytest.mark.unit
    def test_output_is_valid_python(self, task_result):
        compile(pseudocode.generate(task_result, PseudocodeStyle.PYTHON), "<pseudocode>", "exec")

    @pytest.mark.unit
    def test_keyword_actions_are_renamed(self):
        result = AnalysisResult(
            requirement=RequirementText(text="Import data"),
            entities=Entities(actions=["import"]),
        )
        text = pseudocode.generate(result, PseudocodeStyle.PYTHON)
        assert "def import_action(" in text
        compile(text, "<pseudocode>", "exec")
