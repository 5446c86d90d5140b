"""Rule-based extraction of actors, actions and objects.

Pure lexical heuristics over the normalized text, no AI calls. Results are
ordered by first occurrence in the text and de-duplicated case-insensitively.
"""

from __future__ import annotations

import bisect
import logging
import re
from functools import lru_cache

from .lexicon import DEFAULT_LEXICON, Lexicon, singularize
from .models import Entities
from .normalizer import NormalizedText, normalize_lenient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# "As a <role>" at the start of a sentence or after a label such as "Story 1:".
_ROLE_PHRASE = re.compile(
    r"(?:^|[:\-]\s*)as\s+an?\s+(?P<phrase>[^,.;!?\n]+?)"
    r"(?=\s*[,.;!?\n]|\s+i\s+(?:want|need|would\s+like|can)\b|\s+so\s+that\b|\s*$)"
)
_WITH_LIST = re.compile(
    r"\bwith\s+(?P<items>[^.;!?\n]+?)"
    r"(?=\s+(?:so\s+that|when|if|which|that|to|in\s+order)\b|[.;!?\n]|$)"
)
_LIST_SEPARATOR = re.compile(r"\s*,\s*(?:and\s+|or\s+)?|\s+(?:and|or)\s+")
_MAX_ACTOR_WORDS = 4
_MAX_ATTRIBUTE_WORDS = 3
_OBJECT_WINDOW = 5


@lru_cache(maxsize=8)
def _multiword_pattern(pairs: tuple[tuple[str, str], ...]) -> re.Pattern[str]:
    ordered = sorted((p for p, _ in pairs), key=lambda p: (-len(p), p))
    return re.compile(rf"(?<![\w-])(?:{'|'.join(re.escape(p) for p in ordered)})(?![\w-])")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ordered_unique(hits: list[tuple[int, str]]) -> list[str]:
    """Sort ``(position, value)`` pairs by position and drop repeats."""
    seen: set[str] = set()
    result: list[str] = []
    for _, value in sorted(hits, key=lambda h: h[0]):
        key = value.casefold()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


def _clean_words(phrase: str) -> list[str]:
    words = [re.sub(r"[^a-z0-9'/-]", "", w) for w in phrase.split()]
    return [w for w in words if w]


def _extract_actors(norm: NormalizedText, lexicon: Lexicon) -> list[tuple[int, str]]:
    hits: list[tuple[int, str]] = []
    spans: list[tuple[int, int]] = []
    heads: set[str] = set()

    for sentence in norm.sentences:
        chunk = norm.lowered[sentence.start:sentence.end]
        match = _ROLE_PHRASE.search(chunk)
        if not match:
            continue
        words = _clean_words(match.group("phrase"))
        while words and words[0] in lexicon.determiners:
            words.pop(0)
        words = words[:_MAX_ACTOR_WORDS]
        if not words:
            continue
        head = singularize(words[-1])
        start = sentence.start + match.start("phrase")
        hits.append((start, " ".join(words[:-1] + [head])))
        spans.append((start, sentence.start + match.end("phrase")))
        heads.add(head)

    for match in lexicon.actor_role_re.finditer(norm.lowered):
        role = match.group(1)
        if role in heads or any(s <= match.start() < e for s, e in spans):
            continue
        hits.append((match.start(), role))
    return hits


def _extract_actions(
    norm: NormalizedText, lexicon: Lexicon
) -> list[tuple[int, str, int]]:
    """Return ``(position, action, index of the next token)`` triples."""
    tokens = norm.tokens
    starts = [t.start for t in tokens]
    canonical = dict(lexicon.multiword_actions)
    covered: list[tuple[int, int]] = []
    hits: list[tuple[int, str, int]] = []

    for match in _multiword_pattern(lexicon.multiword_actions).finditer(norm.lowered):
        covered.append((match.start(), match.end()))
        next_index = bisect.bisect_left(starts, match.end())
        hits.append((match.start(), canonical[match.group(0)], next_index))

    for index, token in enumerate(tokens):
        if any(s <= token.start < e for s, e in covered):
            continue
        verb = lexicon.verb_forms.get(token.word)
        if not verb:
            continue
        # Participles after a determiner are adjectives: "a registered customer".
        if token.word != verb and index > 0 and tokens[index - 1].word in lexicon.determiners:
            continue
        hits.append((token.start, verb, index + 1))
    hits.sort(key=lambda h: h[0])
    return hits


def _is_rejected_object(word: str, after_determiner: bool, lexicon: Lexicon) -> bool:
    if len(word) < 2 or word.isdigit() or word in lexicon.stopwords:
        return True
    if word in lexicon.verb_forms and not after_determiner:
        return True
    if word.endswith("ly") and len(word) > 4:
        return True
    if singularize(word) in lexicon.actor_roles:
        return True
    return word in lexicon.vague_terms or word in lexicon.vague_quantities


def _object_after(
    norm: NormalizedText, index: int, lexicon: Lexicon
) -> tuple[int, str] | None:
    """First noun following an action, or ``None`` when nothing qualifies."""
    after_determiner = False
    for token in norm.tokens[index:index + _OBJECT_WINDOW]:
        word = token.word
        if word.endswith("'s"):
            after_determiner = True
            continue
        if word in lexicon.determiners:
            after_determiner = True
            continue
        if word in lexicon.prepositions:
            continue
        compound = lexicon.object_noun_re.match(norm.lowered, token.start)
        if compound:
            return token.start, singularize(compound.group(0))
        if _is_rejected_object(word, after_determiner, lexicon):
            return None
        return token.start, singularize(word)
    return None


def _nearest_object(
    position: int, candidates: list[tuple[int, str]]
) -> str | None:
    before = [c for c in candidates if c[0] < position]
    if before:
        return max(before, key=lambda c: c[0])[1]
    return min(candidates, key=lambda c: c[0])[1] if candidates else None


def _list_items(raw: str, lexicon: Lexicon) -> list[str]:
    items: list[str] = []
    for part in _LIST_SEPARATOR.split(raw):
        words = _clean_words(part)
        while words and (words[0] in lexicon.determiners or words[0] in lexicon.prepositions):
            words.pop(0)
        if not words or len(words) > _MAX_ATTRIBUTE_WORDS:
            continue
        if any(w in lexicon.stopwords or w in lexicon.verb_forms for w in words):
            continue
        items.append(" ".join(words))
    return items


def _extract_attributes(
    norm: NormalizedText,
    occurrences: list[tuple[int, str]],
    lexicon: Lexicon,
) -> dict[str, list[str]]:
    found: dict[str, list[tuple[int, str]]] = {}

    for sentence in norm.sentences:
        local = [o for o in occurrences if sentence.start <= o[0] < sentence.end]
        if not local:
            continue
        for match in _WITH_LIST.finditer(norm.lowered, sentence.start, sentence.end):
            owner = _nearest_object(match.start(), local)
            if owner is None:
                continue
            for item in _list_items(match.group("items"), lexicon):
                if item != owner:
                    found.setdefault(owner, []).append((match.start("items"), item))
        for match in lexicon.field_noun_re.finditer(norm.lowered, sentence.start, sentence.end):
            owner = _nearest_object(match.start(), local)
            field = match.group(0)
            if owner is not None and singularize(field) != owner:
                found.setdefault(owner, []).append((match.start(), field))

    return {obj: _ordered_unique(hits) for obj, hits in found.items()}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(text: str | NormalizedText, lexicon: Lexicon = DEFAULT_LEXICON) -> Entities:
    """Extract actors, actions, objects and object attributes from *text*.

    Args:
        text: Raw requirement text or an already normalized view of it.
        lexicon: Word tables to match against.

    Returns:
        An ``Entities`` instance. Blank input yields empty lists.
    """
    norm = text if isinstance(text, NormalizedText) else normalize_lenient(text)
    if norm.is_blank:
        return Entities()

    actors = _ordered_unique(_extract_actors(norm, lexicon))
    actor_heads = {a.split()[-1] for a in actors}

    action_hits = _extract_actions(norm, lexicon)
    object_hits: list[tuple[int, str]] = []
    for _, _, next_index in action_hits:
        found = _object_after(norm, next_index, lexicon)
        if found:
            object_hits.append(found)
    for match in lexicon.object_noun_re.finditer(norm.lowered):
        object_hits.append((match.start(), singularize(match.group(0))))
    object_hits = [h for h in object_hits if h[1] not in actor_heads]

    objects = _ordered_unique(object_hits)
    attributes = _extract_attributes(norm, object_hits, lexicon)

    entities = Entities(
        actors=actors,
        actions=_ordered_unique([(pos, action) for pos, action, _ in action_hits]),
        objects=objects,
        attributes={obj: attributes[obj] for obj in objects if attributes.get(obj)},
    )
    logger.debug(
        "Extracted %d actors, %d actions, %d objects",
        len(entities.actors), len(entities.actions), len(entities.objects),
    )
    return entities

