"""Pseudocode skeletons for the extracted objects and actions.

One data class per object and one function per action. Every function
follows the same skeleton: validate preconditions, check permissions,
validate input, execute, update state, log, handle errors.
"""

from __future__ import annotations

import keyword
from typing import Any

from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import AnalysisResult, Entities, PseudocodeStyle

from .renderer import TemplateRenderer, camel_case, default_renderer, pascal_case, snake_case
from .uml import attribute_type

_TEMPLATES = {
    PseudocodeStyle.PYTHON: "pseudocode/python.py.j2",
    PseudocodeStyle.GENERIC: "pseudocode/generic.txt.j2",
}
_PYTHON_TYPES = {"Date": "str", "Number": "float", "List<String>": "List[str]", "String": "str"}
_RESERVED_FIELDS = {"id", "status", "created_at", "updated_at"}


def _python_name(value: str) -> str:
    name = snake_case(value) or "action"
    return f"{name}_action" if keyword.iskeyword(name) else name


def _entity_classes(entities: Entities, style: PseudocodeStyle) -> list[dict[str, Any]]:
    classes = []
    for obj in entities.objects:
        attributes = []
        seen: set[str] = set()
        for field in entities.attributes.get(obj, []):
            if snake_case(field) in _RESERVED_FIELDS:
                continue
            name = _python_name(field) if style is PseudocodeStyle.PYTHON else camel_case(field)
            if not name or name in seen:
                continue
            seen.add(name)
            uml_type = attribute_type(field)
            attributes.append({
                "name": name,
                "py_type": _PYTHON_TYPES[uml_type],
                "generic_type": uml_type,
            })
        classes.append({"name": pascal_case(obj), "attributes": attributes})
    return classes


def pseudocode_context(
    entities: Entities,
    style: PseudocodeStyle,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> dict[str, Any]:
    functions = [
        {
            "action": action,
            "name": _python_name(action),
            "method": camel_case(action),
            "pascal": pascal_case(action),
            "group": lexicon.action_group(action),
        }
        for action in entities.actions
    ]
    services: dict[str, list[dict[str, str]]] = {}
    for fn in functions:
        services.setdefault(fn["group"], []).append(fn)

    return {
        "entity_classes": _entity_classes(entities, style),
        "actor_classes": [{"name": pascal_case(a)} for a in entities.actors if pascal_case(a)],
        "functions": functions,
        "services": [{"name": name, "functions": fns} for name, fns in services.items()],
    }


def generate(
    result: AnalysisResult,
    style: PseudocodeStyle = PseudocodeStyle.GENERIC,
    lexicon: Lexicon = DEFAULT_LEXICON,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render pseudocode for *result* in the requested *style*."""
    renderer = renderer or default_renderer()
    context = pseudocode_context(result.entities, style, lexicon)
    return renderer.render(_TEMPLATES[style], context)
