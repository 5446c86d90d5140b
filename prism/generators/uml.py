"""PlantUML use-case, sequence and class diagrams from extracted entities."""

from __future__ import annotations

from typing import Any

from prism.analysis.lexicon import DEFAULT_LEXICON, Lexicon
from prism.analysis.models import AnalysisResult, Entities

from .renderer import TemplateRenderer, camel_case, default_renderer, pascal_case, uml_id


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_MAX_NOTE_OBJECTS = 5
_PLACEHOLDER_ACTOR = "user"

# Actions performed by the system itself rather than by a person.
SYSTEM_ACTIONS = frozenset({
    "process", "validate", "verify", "send", "receive", "generate", "notify",
    "calculate", "monitor", "authorize", "store", "schedule", "track",
})
_ADMIN_ROLES = ("admin", "administrator")
_SYSTEM_ROLES = ("system", "service")
_DATA_CHANGING_ACTIONS = frozenset({"create", "add", "update", "edit", "delete", "remove"})
_AUTH_INCLUDERS = frozenset({"login", "authenticate"})

_NUMERIC_FIELDS = ("price", "amount", "quantity", "rating", "score", "total", "priority")
_DATE_FIELDS = ("date", "deadline")
_LIST_FIELDS = ("tags",)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def should_connect(actor: str, action: str) -> bool:
    """Whether *actor* participates in the *action* use case.

    Administrators take part in everything, system actors only in
    system-level actions, and every other role in the user-facing ones.
    """
    words = actor.lower().split()
    if any(role in words for role in _ADMIN_ROLES):
        return True
    if any(role in words for role in _SYSTEM_ROLES):
        return action in SYSTEM_ACTIONS
    return action not in SYSTEM_ACTIONS


def attribute_type(field: str) -> str:
    """PlantUML type name for a heuristically extracted field."""
    lowered = field.lower()
    if any(word in lowered for word in _DATE_FIELDS):
        return "Date"
    if any(word in lowered for word in _NUMERIC_FIELDS):
        return "Number"
    if lowered in _LIST_FIELDS:
        return "List<String>"
    return "String"


def _actor_views(entities: Entities) -> list[dict[str, str]]:
    return [{"name": a, "id": uml_id(a)} for a in entities.actors]


# ---------------------------------------------------------------------------
# Diagrams
# ---------------------------------------------------------------------------

def use_case_context(entities: Entities, lexicon: Lexicon = DEFAULT_LEXICON) -> dict[str, Any]:
    actors = _actor_views(entities)
    use_cases = [
        {"index": i, "label": action.replace('"', "'")}
        for i, action in enumerate(entities.actions, start=1)
    ]
    links = [
        {"actor": actor["id"], "index": uc["index"]}
        for actor in actors
        for uc, action in zip(use_cases, entities.actions)
        if should_connect(actor["name"], action)
    ]
    includes = [
        {"base": base, "included": included}
        for included, auth in enumerate(entities.actions, start=1)
        if auth in _AUTH_INCLUDERS
        for base, action in enumerate(entities.actions, start=1)
        if action in _DATA_CHANGING_ACTIONS
    ]
    handled = entities.objects[:_MAX_NOTE_OBJECTS]
    anchor = actors[0]["id"] if actors else ("UC1" if use_cases else "")
    return {
        "actors": actors,
        "use_cases": use_cases,
        "links": links,
        "includes": includes,
        "handled_objects": handled if anchor else [],
        "more_objects": len(entities.objects) - len(handled),
        "note_anchor": anchor,
    }


def _sequence_lines(action: str, has_db: bool, lexicon: Lexicon) -> tuple[list[str], str]:
    """Interaction lines between System and DB for one action, plus the reply."""
    if lexicon.is_auth_action(action):
        if action == "logout":
            return ["System -> System : Invalidate session"], "Logout confirmation"
        if has_db:
            return [
                "System -> DB : Validate credentials",
                "activate DB",
                "DB --> System : Validation result",
                "deactivate DB",
            ], "Authentication status"
        return ["System -> System : Validate credentials"], "Authentication status"

    if action in ("create", "add"):
        lines = ["System -> System : Validate input"]
        db = ["System -> DB : Store data", "activate DB", "DB --> System : Confirmation", "deactivate DB"]
        return lines + (db if has_db else ["System -> System : Store data"]), "Success response"

    if action in ("update", "edit"):
        if has_db:
            return [
                "System -> DB : Retrieve current data",
                "activate DB",
                "DB --> System : Current data",
                "System -> System : Apply changes",
                "System -> DB : Update data",
                "DB --> System : Update confirmation",
                "deactivate DB",
            ], "Update response"
        return ["System -> System : Apply changes"], "Update response"

    if action in ("delete", "remove"):
        lines = ["System -> System : Check permissions"]
        db = ["System -> DB : Delete data", "activate DB", "DB --> System : Deletion confirmation", "deactivate DB"]
        return lines + (db if has_db else []), "Deletion response"

    lines = ["System -> System : Process request"]
    if has_db:
        lines += ["System -> DB : Data operation", "activate DB", "DB --> System : Operation result", "deactivate DB"]
    return lines, "Response"


def sequence_context(entities: Entities, lexicon: Lexicon = DEFAULT_LEXICON) -> dict[str, Any]:
    actors = _actor_views(entities)
    if not actors and entities.actions:
        actors = [{"name": _PLACEHOLDER_ACTOR, "id": uml_id(_PLACEHOLDER_ACTOR)}]
    primary = actors[0]["id"] if actors else ""
    has_db = bool(entities.objects)

    steps = []
    for action in entities.actions:
        lines, response = _sequence_lines(action, has_db, lexicon)
        steps.append({"action": action.replace('"', "'"), "lines": lines, "response": response})

    error_flows = []
    if any(lexicon.is_auth_action(a) and a != "logout" for a in entities.actions):
        lines = (
            ["System -> DB : Validate credentials", "activate DB",
             "DB --> System : Credentials rejected", "deactivate DB"]
            if has_db else ["System -> System : Validate credentials"]
        )
        lines.append("note right : Invalid credentials")
        error_flows.append({
            "title": "Alternative Flow (Authentication Failure)",
            "request": "Submit invalid credentials",
            "lines": lines,
            "response": "Authentication error",
        })
    if entities.actions:
        error_flows.append({
            "title": "Alternative Flow (Error Handling)",
            "request": "Invalid request",
            "lines": ["System -> System : Validate request", "note right : Validation fails"],
            "response": "Error response",
        })

    return {
        "actors": actors,
        "database": entities.objects[0] if has_db else "",
        "primary": primary,
        "steps": steps,
        "error_flows": error_flows,
    }


def class_context(entities: Entities, lexicon: Lexicon = DEFAULT_LEXICON) -> dict[str, Any]:
    reserved = {"id", "status", "createdAt", "updatedAt"}
    entity_classes = []
    for obj in entities.objects:
        attributes = []
        for field in entities.attributes.get(obj, []):
            name = camel_case(field)
            if name and name not in reserved and name not in {a["name"] for a in attributes}:
                attributes.append({"name": name, "uml_type": attribute_type(field)})
        entity_classes.append({"name": pascal_case(obj), "attributes": attributes})

    services: dict[str, list[str]] = {}
    for action in entities.actions:
        services.setdefault(lexicon.action_group(action), []).append(camel_case(action))

    relations = [f"{cls['name']} --> Status : has" for cls in entity_classes]
    target = entity_classes[0]["name"] if entity_classes else None
    if target:
        relations += [f"{name} ..> {target} : processes" for name in services]

    return {
        "entity_classes": entity_classes,
        "services": [{"name": name, "methods": methods} for name, methods in services.items()],
        "relations": relations,
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate(
    result: AnalysisResult,
    lexicon: Lexicon = DEFAULT_LEXICON,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the use-case, sequence and class diagrams as three PlantUML blocks."""
    renderer = renderer or default_renderer()
    entities = result.entities
    blocks = [
        renderer.render("uml/use_case.puml.j2", use_case_context(entities, lexicon)),
        renderer.render("uml/sequence.puml.j2", sequence_context(entities, lexicon)),
        renderer.render("uml/class.puml.j2", class_context(entities, lexicon)),
    ]
    return "\n\n".join(block.strip() for block in blocks) + "\n"
