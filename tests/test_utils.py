"""Unit tests for shared utilities (prism.utils)."""

from __future__ import annotations

import json
import logging

import pytest

from prism.analysis.models import AnalysisResult, RequirementText
from prism.utils import (
    analysis_summary,
    configure_logging,
    discover_requirement_files,
    format_duration,
    print_ambiguity_table,
    print_summary_table,
    read_requirement_file,
    save_json,
)


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize("seconds,expected", [
        (0, "0.0s"),
        (3.7, "3.7s"),
        (59.9, "59.9s"),
        (65.2, "1m 5s"),
        (3600, "60m 0s"),
        (-1, "0.0s"),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


class TestDiscoverRequirementFiles:
    @pytest.mark.unit
    def test_finds_text_and_markdown_recursively(self, requirements_dir):
        files = discover_requirement_files(requirements_dir)
        names = [p.relative_to(requirements_dir).as_posix() for p in files]
        assert names == ["billing/invoices.md", "login.md", "reports.txt"]

    @pytest.mark.unit
    def test_missing_directory(self, tmp_path):
        assert discover_requirement_files(tmp_path / "nope") == []

    @pytest.mark.unit
    def test_file_instead_of_directory(self, requirements_dir):
        assert discover_requirement_files(requirements_dir / "login.md") == []


class TestReadRequirementFile:
    @pytest.mark.unit
    def test_reads_utf8(self, tmp_path):
        path = tmp_path / "story.md"
        path.write_text("As a café owner, I want to print menus", encoding="utf-8")
        assert read_requirement_file(path) == "As a café owner, I want to print menus"

    @pytest.mark.unit
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_requirement_file(tmp_path / "missing.md")

    @pytest.mark.unit
    def test_binary_file(self, tmp_path):
        path = tmp_path / "bad.md"
        path.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(UnicodeDecodeError):
            read_requirement_file(path)


class TestSaveJson:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_creates_parents(self, tmp_path):
        path = tmp_path / "a" / "b" / "out.json"
        await save_json({"name": "ünïcode", "items": [1, 2]}, path)
        assert json.loads(path.read_text(encoding="utf-8")) == {"name": "ünïcode", "items": [1, 2]}
        assert "ünïcode" in path.read_text(encoding="utf-8")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_payload(self, tmp_path):
        path = tmp_path / "out.json"
        await save_json([{"a": 1}], path)
        assert json.loads(path.read_text(encoding="utf-8")) == [{"a": 1}]


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


class TestAnalysisSummary:
    @pytest.mark.unit
    def test_login_summary(self, login_result):
        summary = analysis_summary(login_result)
        assert summary["Source"] == "inline"
        assert summary["Actors"] == "user"
        assert summary["Objects"] == "-"
        assert summary["Ambiguities"] == "1"
        assert summary["Completeness"] == "30/100"
        assert summary["User story format"] == "invalid"
        assert summary["AI"] == "off"

    @pytest.mark.unit
    def test_ai_status(self, login_result):
        degraded = login_result.model_copy(update={"degraded": True})
        augmented = login_result.model_copy(update={"ai_augmented": True})
        assert analysis_summary(degraded)["AI"] == "degraded"
        assert analysis_summary(augmented)["AI"] == "augmented"


class TestConsoleOutput:
    @pytest.mark.unit
    def test_summary_table_keeps_brackets(self, capsys):
        print_summary_table({"Source": "[draft] story.md"})
        assert "[draft] story.md" in capsys.readouterr().out

    @pytest.mark.unit
    def test_ambiguity_table(self, login_result, capsys):
        print_ambiguity_table(login_result)
        out = capsys.readouterr().out
        assert "quickly" in out
        assert "Medium" in out

    @pytest.mark.unit
    def test_no_ambiguities(self, capsys):
        print_ambiguity_table(AnalysisResult(requirement=RequirementText(text="x")))
        assert "No ambiguities detected" in capsys.readouterr().out


class TestConfigureLogging:
    @pytest.mark.unit
    def test_levels(self):
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        configure_logging()
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
