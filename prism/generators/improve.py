"""Improved-requirements artifact.

Returns the AI rewrite when augmentation produced one. Otherwise the
original text is returned unchanged, followed by numbered improvement notes
built from the detected ambiguities and completeness gaps.
"""

from __future__ import annotations

from prism.analysis.models import AnalysisResult

from .renderer import TemplateRenderer, default_renderer


def _comment_safe(text: str) -> str:
    # "--" is not allowed inside an HTML comment.
    return " ".join(text.replace("--", "-").split())


def improvement_notes(result: AnalysisResult) -> list[str]:
    """One note per ambiguity, then one per completeness gap."""
    notes = [
        f"[{a.severity.value}] '{a.matched_text}' - {a.reason}. {a.suggestions[0]}"
        if a.suggestions
        else f"[{a.severity.value}] '{a.matched_text}' - {a.reason}"
        for a in result.ambiguities
    ]
    notes += [
        f"[Gap: {g.category}] {g.description}"
        for g in result.completeness.gaps
    ]
    return [_comment_safe(n) for n in notes]


def generate(result: AnalysisResult, renderer: TemplateRenderer | None = None) -> str:
    if result.improved_requirements:
        return result.improved_requirements.strip() + "\n"
    renderer = renderer or default_renderer()
    return renderer.render("report/improved.md.j2", {
        "original": result.requirement.text.rstrip(),
        "notes": improvement_notes(result),
    })
