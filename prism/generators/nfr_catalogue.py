"""NFR catalogue artifact grouped by category."""

from __future__ import annotations

from prism.analysis.models import AnalysisResult, NfrCategory

from .renderer import TemplateRenderer, default_renderer


def generate(result: AnalysisResult, renderer: TemplateRenderer | None = None) -> str:
    """Render the NFR suggestions as markdown, one section per category."""
    renderer = renderer or default_renderer()
    sections = []
    for category in NfrCategory:
        items = result.nfrs_by_category(category)
        if items:
            sections.append({
                "category": category.value,
                "items": [
                    {
                        "requirement": n.requirement,
                        "priority": n.priority.value,
                        "rationale": n.rationale,
                        "acceptance_criteria": n.acceptance_criteria,
                        "origin": n.origin,
                    }
                    for n in items
                ],
            })
    return renderer.render("report/nfr_catalogue.md.j2", {"sections": sections})
