"""Static word tables shared by every analyzer.

All tables are built once at import time into a frozen :class:`Lexicon`.
Analyzers receive the lexicon as an argument; callers that need extra vague
terms derive a new instance with :meth:`Lexicon.with_custom_terms` instead of
mutating the default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from .models import NfrCategory, NfrPriority, Severity


# ---------------------------------------------------------------------------
# Entity tables
# ---------------------------------------------------------------------------

_ACTOR_ROLES = (
    "user", "admin", "administrator", "customer", "client", "manager",
    "operator", "guest", "visitor", "member", "employee", "student",
    "teacher", "developer", "owner", "author", "editor", "reviewer",
    "approver", "buyer", "seller", "vendor", "supplier", "patient", "doctor",
    "agent", "stakeholder", "subscriber", "moderator", "system", "service",
)

# Verbs recognised as actions, in no particular order.
_ACTION_VERBS = (
    "create", "update", "delete", "add", "remove", "login", "logout",
    "register", "submit", "send", "receive", "view", "edit", "search",
    "find", "filter", "sort", "upload", "download", "export", "import",
    "generate", "approve", "reject", "pay", "purchase", "checkout", "book",
    "cancel", "share", "assign", "manage", "access", "reset", "track",
    "schedule", "notify", "validate", "verify", "process", "authenticate",
    "authorize", "browse", "select", "save", "store", "print", "publish",
    "archive", "restore", "review", "comment", "rate", "subscribe",
    "unsubscribe", "invite", "configure", "monitor", "refund", "transfer",
    "compare", "calculate", "display",
)

_IRREGULAR_VERB_FORMS = {
    "paid": "pay",
    "found": "find",
    "sent": "send",
    "submitted": "submit",
    "submitting": "submit",
    "transferred": "transfer",
    "transferring": "transfer",
    "cancelled": "cancel",
    "cancelling": "cancel",
}

_MULTIWORD_ACTIONS = (
    ("log in", "login"),
    ("log-in", "login"),
    ("sign in", "login"),
    ("sign-in", "login"),
    ("signin", "login"),
    ("log out", "logout"),
    ("log-out", "logout"),
    ("sign out", "logout"),
    ("sign-out", "logout"),
    ("sign up", "register"),
    ("sign-up", "register"),
    ("signup", "register"),
    ("check out", "checkout"),
)

_AUTH_ACTIONS = frozenset({"login", "logout", "register", "authenticate", "authorize", "reset"})

_OBJECT_NOUNS = (
    "shopping cart", "account", "profile", "password", "email", "data",
    "file", "document", "report", "dashboard", "order", "product", "item",
    "category", "invoice", "payment", "message", "notification",
    "appointment", "booking", "ticket", "task", "project", "comment",
    "record", "transaction", "setting", "photo", "image", "video",
)

_DETERMINERS = frozenset({
    "a", "an", "the", "my", "our", "your", "their", "his", "her", "its",
    "this", "that", "these", "those", "all", "each", "every", "any", "new",
    "existing", "own", "specific", "selected", "relevant",
})

_PREPOSITIONS = frozenset({
    "to", "into", "onto", "with", "for", "from", "on", "in", "of", "via",
    "at", "by", "about", "through",
})

_STOPWORDS = frozenset({
    "and", "or", "but", "so", "that", "then", "than", "when", "if", "else",
    "i", "we", "you", "they", "it", "he", "she", "me", "us", "them", "be",
    "is", "are", "was", "were", "been", "being", "have", "has", "had", "do",
    "does", "did", "not", "no", "can", "could", "should", "would", "will",
    "shall", "may", "might", "must", "able", "want", "need", "needs",
    "there", "here", "what", "which", "who", "whom", "how", "why", "where",
    "also", "only", "just", "very", "too", "more", "most", "less", "least",
    "it's", "i'm", "without", "within", "easily", "again", "once",
})

# Field nouns attached to objects as data-class attributes.
_FIELD_NOUNS = (
    "title", "name", "description", "email", "password", "status",
    "priority", "due date", "start date", "end date", "date", "category",
    "type", "content", "body", "message", "subject", "url", "link", "image",
    "avatar", "phone", "address", "price", "amount", "quantity", "rating",
    "score", "tags", "label", "color", "size", "notes", "comment",
    "username", "role", "total", "currency", "location", "deadline",
)

# ---------------------------------------------------------------------------
# Ambiguity tables
# ---------------------------------------------------------------------------

_VAGUE_TERMS = (
    "fast", "quick", "quickly", "slow", "slowly", "easy", "easily", "hard",
    "user-friendly", "user friendly", "robust", "scalable", "efficient",
    "efficiently", "intuitive", "simple", "flexible", "seamless",
    "seamlessly", "better", "worse", "good", "bad", "nice", "great",
    "awesome", "appropriate", "adequate", "reasonable", "optimal",
    "modern", "state of the art", "as soon as possible", "asap",
    "high performance", "responsive", "lightweight", "clean",
)

_VAGUE_QUANTITIES = (
    "many", "few", "some", "several", "various", "multiple", "numerous",
    "a lot of", "lots of", "most", "large number of", "small number of",
    "a number of", "enough", "sufficient",
)

_PASSIVE_MODALS = (
    "should", "will", "must", "shall", "can", "may", "could", "would",
    "needs to", "need to", "ought to", "has to", "have to",
)

_IRREGULAR_PARTICIPLES = (
    "given", "taken", "shown", "sent", "done", "made", "kept", "seen",
    "known", "written", "built", "held", "found", "chosen", "hidden",
    "drawn", "set", "put", "shut", "read", "paid", "sold", "told",
)

_SUCCESS_CRITERIA_PHRASES = (
    "as expected", "as needed", "as appropriate", "as required",
    "properly", "correctly", "successfully", "work well", "works well",
    "tbd", "to be decided", "to be determined", "etc.", "and so on",
    "and more", "if possible", "where possible", "and/or",
)

_INDEFINITE_SUBJECTS = ("someone", "somebody", "anyone", "anybody", "everyone", "people")

# Severity and confidence per detection pass. A pass is suppressed when its
# confidence is below the configured ambiguity threshold.
_PASS_SEVERITY = {
    "missing_actor": Severity.CRITICAL,
    "undefined_success_criteria": Severity.HIGH,
    "passive_voice": Severity.HIGH,
    "vague_term": Severity.MEDIUM,
    "incomplete_conditional": Severity.MEDIUM,
    "vague_quantity": Severity.LOW,
}

_PASS_CONFIDENCE = {
    "missing_actor": 1.0,
    "undefined_success_criteria": 0.9,
    "passive_voice": 0.85,
    "vague_term": 0.8,
    "incomplete_conditional": 0.75,
    "vague_quantity": 0.7,
}

# ---------------------------------------------------------------------------
# Completeness tables
# ---------------------------------------------------------------------------

_ACCEPTANCE_KEYWORDS = (
    "acceptance criteria", "acceptance criterion", "acceptance test",
    "success criteria", "criteria", "definition of done", "expected result",
    "expected outcome",
)

_NFR_KEYWORDS = (
    "performance", "security", "secure", "usability", "reliability",
    "reliable", "scalability", "availability", "available", "uptime",
    "latency", "response time", "throughput", "encrypt", "accessibility",
    "accessible", "maintainability", "compatibility", "compatible", "wcag",
    "gdpr", "compliance",
)

_ERROR_KEYWORDS = (
    "error", "errors", "fail", "fails", "failed", "failure", "exception",
    "invalid", "retry", "timeout", "otherwise", "fallback", "rollback",
    "recover", "warning", "reject", "rejected",
)

_BUSINESS_RULE_KEYWORDS = (
    "only", "must not", "cannot", "can't", "at least", "at most", "maximum",
    "minimum", "limit", "rule", "policy", "unless", "allowed", "permitted",
    "not exceed", "up to", "per day", "per month", "per user", "approval",
    "eligible", "required",
)

# ---------------------------------------------------------------------------
# User story tables
# ---------------------------------------------------------------------------

_STORY_VAGUE_TERMS = (
    "thing", "things", "stuff", "something", "anything", "everything",
    "someone", "somebody", "anyone", "people", "etc",
)

_BENEFIT_KEYWORDS = (
    "save", "saves", "increase", "improve", "reduce", "efficiency",
    "productivity", "revenue", "cost", "time", "money", "faster", "avoid",
    "ensure", "comply", "compliance", "satisfaction", "benefit", "profit",
    "risk", "accurate", "accuracy", "track", "decide", "decision",
)

# ---------------------------------------------------------------------------
# Generator tables
# ---------------------------------------------------------------------------

# Action -> service group, used for the synthesized service classes.
_ACTION_GROUPS = {
    "login": "AuthenticationService",
    "logout": "AuthenticationService",
    "register": "AuthenticationService",
    "authenticate": "AuthenticationService",
    "authorize": "AuthenticationService",
    "reset": "AuthenticationService",
    "create": "DataManagementService",
    "add": "DataManagementService",
    "update": "DataManagementService",
    "edit": "DataManagementService",
    "delete": "DataManagementService",
    "remove": "DataManagementService",
    "view": "DataManagementService",
    "display": "DataManagementService",
    "manage": "DataManagementService",
    "save": "DataManagementService",
    "store": "DataManagementService",
    "archive": "DataManagementService",
    "restore": "DataManagementService",
    "access": "DataManagementService",
    "select": "DataManagementService",
    "search": "SearchService",
    "find": "SearchService",
    "filter": "SearchService",
    "sort": "SearchService",
    "browse": "SearchService",
    "compare": "SearchService",
    "upload": "FileService",
    "download": "FileService",
    "import": "FileService",
    "export": "FileService",
    "print": "FileService",
    "generate": "ReportingService",
    "monitor": "ReportingService",
    "track": "ReportingService",
    "calculate": "ReportingService",
    "send": "NotificationService",
    "receive": "NotificationService",
    "notify": "NotificationService",
    "share": "NotificationService",
    "invite": "NotificationService",
    "subscribe": "NotificationService",
    "unsubscribe": "NotificationService",
    "comment": "NotificationService",
    "pay": "PaymentService",
    "purchase": "PaymentService",
    "checkout": "PaymentService",
    "refund": "PaymentService",
    "transfer": "PaymentService",
}
_DEFAULT_ACTION_GROUP = "WorkflowService"

# ---------------------------------------------------------------------------
# NFR tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NfrTemplate:
    """A template NFR emitted when one of its trigger keywords is present."""

    category: NfrCategory
    requirement: str
    priority: NfrPriority
    rationale: str
    acceptance_criteria: tuple[str, ...]
    triggers: tuple[str, ...] = ()


_NFR_TEMPLATES = (
    NfrTemplate(
        NfrCategory.SECURITY,
        "The system shall implement secure authentication with multi-factor authentication options",
        NfrPriority.MUST_HAVE,
        "Login functionality requires strong security to protect user accounts",
        (
            "Support for 2FA/MFA authentication methods",
            "Password complexity requirements enforced",
            "Account lockout after 5 consecutive failed attempts",
        ),
        ("login", "password", "authenticate", "credential", "register", "account", "sign in"),
    ),
    NfrTemplate(
        NfrCategory.PERFORMANCE,
        "Authentication response time shall be under 2 seconds for 95% of requests under normal load",
        NfrPriority.SHOULD_HAVE,
        "Users expect quick login response times",
        (
            "95% of authentication requests complete within 2 seconds",
            "System supports concurrent authentication requests",
        ),
        ("login", "authenticate", "sign in"),
    ),
    NfrTemplate(
        NfrCategory.SECURITY,
        "Uploaded files shall be scanned for malware and restricted by type and size",
        NfrPriority.MUST_HAVE,
        "File uploads pose security risks and must be controlled",
        (
            "All uploads scanned by antivirus",
            "File type restrictions enforced",
            "Maximum file size limits applied",
        ),
        ("upload", "attachment"),
    ),
    NfrTemplate(
        NfrCategory.PERFORMANCE,
        "File uploads shall support resume functionality and progress indication",
        NfrPriority.SHOULD_HAVE,
        "Large file uploads need reliability and user feedback",
        (
            "Upload progress displayed to the user",
            "Interrupted uploads can be resumed",
        ),
        ("upload",),
    ),
    NfrTemplate(
        NfrCategory.SCALABILITY,
        "File storage shall scale to at least 10x the projected first-year volume without re-architecture",
        NfrPriority.COULD_HAVE,
        "Stored files accumulate over the lifetime of the system",
        ("Storage capacity monitored with alerts at 80% utilisation",),
        ("upload", "file", "document", "photo", "image", "video"),
    ),
    NfrTemplate(
        NfrCategory.PERFORMANCE,
        "Search results shall be returned within 1 second for 95% of queries",
        NfrPriority.MUST_HAVE,
        "Users expect fast search response times",
        (
            "Search index optimized for performance",
            "Results paginated for large datasets",
        ),
        ("search", "find", "filter", "browse"),
    ),
    NfrTemplate(
        NfrCategory.USABILITY,
        "Search shall offer suggestions when a query returns no results",
        NfrPriority.COULD_HAVE,
        "Empty result pages are a common point of user frustration",
        ("Zero-result queries display at least one alternative suggestion",),
        ("search", "find"),
    ),
    NfrTemplate(
        NfrCategory.PERFORMANCE,
        "Reports shall be generated within 5 seconds for datasets up to 100,000 records",
        NfrPriority.SHOULD_HAVE,
        "Reporting over large datasets must stay interactive",
        (
            "Report generation time measured and logged",
            "Long-running reports execute asynchronously with a notification",
        ),
        ("report", "export", "dashboard", "analytics", "generate"),
    ),
    NfrTemplate(
        NfrCategory.SCALABILITY,
        "The system shall support a 10x growth in data volume without degradation of report response time",
        NfrPriority.SHOULD_HAVE,
        "Report and dashboard data grows continuously",
        ("Load tests run with 10x the current data volume",),
        ("report", "dashboard", "analytics"),
    ),
    NfrTemplate(
        NfrCategory.SECURITY,
        "Payment data shall be processed in compliance with PCI DSS and never stored in plain text",
        NfrPriority.MUST_HAVE,
        "Payment card data is regulated and a high-value attack target",
        (
            "Card data tokenized by the payment provider",
            "PCI DSS compliance validated annually",
        ),
        ("pay", "payment", "checkout", "purchase", "billing", "refund", "card"),
    ),
    NfrTemplate(
        NfrCategory.RELIABILITY,
        "Payment transactions shall be idempotent and never charged twice on retry",
        NfrPriority.MUST_HAVE,
        "Network retries must not produce duplicate charges",
        ("Every payment request carries an idempotency key",),
        ("pay", "payment", "checkout", "purchase", "transfer", "refund"),
    ),
    NfrTemplate(
        NfrCategory.SECURITY,
        "Personal data shall be encrypted at rest and handled in line with GDPR",
        NfrPriority.MUST_HAVE,
        "Personal data is subject to privacy regulation",
        (
            "Personal data encrypted with AES-256 at rest",
            "Users can export and delete their personal data",
        ),
        ("profile", "personal", "privacy", "address", "phone", "gdpr", "email"),
    ),
    NfrTemplate(
        NfrCategory.RELIABILITY,
        "Notifications shall be delivered with automatic retry and at-least-once semantics",
        NfrPriority.SHOULD_HAVE,
        "Lost notifications silently break user workflows",
        (
            "Failed deliveries retried at least 3 times with backoff",
            "Undeliverable notifications logged for review",
        ),
        ("notify", "notification", "send", "email", "message", "alert"),
    ),
    NfrTemplate(
        NfrCategory.RELIABILITY,
        "The system shall maintain 99.9% availability measured monthly",
        NfrPriority.SHOULD_HAVE,
        "Availability expectations must be explicit to be testable",
        (
            "Uptime monitored externally",
            "Daily backups with a tested restore procedure",
        ),
        ("available", "availability", "uptime", "backup", "24/7", "downtime", "reliable"),
    ),
    NfrTemplate(
        NfrCategory.SCALABILITY,
        "The system shall support at least 1,000 concurrent users without exceeding response time targets",
        NfrPriority.SHOULD_HAVE,
        "Concurrent load determines infrastructure sizing",
        ("Load tests simulate 1,000 concurrent users",),
        ("concurrent", "scale", "scalable", "growth", "thousands", "millions", "peak"),
    ),
    NfrTemplate(
        NfrCategory.USABILITY,
        "Core user tasks shall be completable in no more than 3 steps by a first-time user",
        NfrPriority.SHOULD_HAVE,
        "Task efficiency is the measurable form of user-friendliness",
        (
            "Usability test with 5 first-time users",
            "Inline validation messages on every form field",
        ),
        ("form", "page", "screen", "interface", "user-friendly", "user friendly",
         "intuitive", "easy", "click", "navigate", "checkout"),
    ),
    NfrTemplate(
        NfrCategory.ACCESSIBILITY,
        "User interfaces shall conform to WCAG 2.1 level AA",
        NfrPriority.SHOULD_HAVE,
        "Accessibility is a legal requirement in many jurisdictions",
        (
            "Automated axe-core audit reports no critical violations",
            "All functionality operable by keyboard only",
        ),
        ("form", "page", "screen", "interface", "accessible", "accessibility",
         "screen reader", "disability", "keyboard", "contrast"),
    ),
    NfrTemplate(
        NfrCategory.COMPATIBILITY,
        "The application shall support the latest two versions of Chrome, Firefox, Safari and Edge, and iOS/Android mobile browsers",
        NfrPriority.SHOULD_HAVE,
        "Users access the system from heterogeneous devices",
        ("Cross-browser test suite passes on all supported browsers",),
        ("mobile", "browser", "device", "ios", "android", "tablet", "web", "responsive"),
    ),
    NfrTemplate(
        NfrCategory.COMPATIBILITY,
        "External APIs shall be versioned and remain backward compatible for at least one major version",
        NfrPriority.COULD_HAVE,
        "Integrations break when contracts change silently",
        ("API version exposed in every endpoint path",),
        ("api", "integrate", "integration", "import", "export", "third-party", "webhook"),
    ),
    NfrTemplate(
        NfrCategory.MAINTAINABILITY,
        "Business rules shall be configurable without code changes and covered by automated tests",
        NfrPriority.COULD_HAVE,
        "Rules that change often should not require a release",
        (
            "Configuration changes applied without redeploy",
            "Unit test coverage of at least 80% for business logic",
        ),
        ("configure", "configurable", "setting", "rule", "policy", "maintain", "modular", "workflow"),
    ),
)

_BASELINE_NFRS = (
    NfrTemplate(
        NfrCategory.SECURITY,
        "All data in transit shall be encrypted with TLS 1.2 or higher and every operation shall require an authenticated, authorized caller",
        NfrPriority.MUST_HAVE,
        "Every system exchanging data over a network needs a security baseline",
        (
            "No endpoint reachable over plain HTTP",
            "Unauthorized requests rejected with an explicit error",
        ),
    ),
    NfrTemplate(
        NfrCategory.PERFORMANCE,
        "User-facing operations shall have a response time under 3 seconds for 95% of requests under expected load",
        NfrPriority.SHOULD_HAVE,
        "Every interactive feature needs a measurable response time target",
        (
            "95th percentile response time measured in load tests",
            "Response time regressions fail the build",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _inflections(verb: str) -> set[str]:
    """Return the common inflected forms of a regular English verb."""
    forms = {verb, verb + "s"}
    if verb.endswith(("s", "sh", "ch", "x", "z")):
        forms.add(verb + "es")
    if verb.endswith("e"):
        forms.update({verb + "d", verb[:-1] + "ing"})
    elif verb.endswith("y") and len(verb) > 2 and verb[-2] not in "aeiou":
        forms.update({verb[:-1] + "ies", verb[:-1] + "ied", verb + "ing"})
    else:
        forms.update({verb + "ed", verb + "ing"})
        if re.fullmatch(r"[^aeiou]*[aeiou][bdgmnpt]", verb):
            forms.update({verb + verb[-1] + "ed", verb + verb[-1] + "ing"})
    return forms


def _build_verb_forms(verbs: tuple[str, ...]) -> Mapping[str, str]:
    table: dict[str, str] = dict(_IRREGULAR_VERB_FORMS)
    for verb in verbs:
        for form in sorted(_inflections(verb)):
            table.setdefault(form, verb)
    # Forms that collide with common nouns in requirement text.
    for noun_like in ("sorts", "comments", "rates", "views", "reviews", "books", "processes"):
        table.pop(noun_like, None)
    return MappingProxyType(table)


def _plural(term: str) -> str:
    if term.endswith("y") and len(term) > 2 and term[-2] not in "aeiou":
        return term[:-1] + "ies"
    if term.endswith(("s", "x", "ch", "sh")):
        return term + "es"
    return term + "s"


def _term_pattern(terms: tuple[str, ...], plurals: bool = False) -> re.Pattern[str]:
    """Compile an alternation matching any term on word boundaries.

    Longer terms come first so multi-word phrases win over their prefixes.
    With *plurals* the regular plural of every term matches too.
    """
    if plurals:
        terms = tuple(terms) + tuple(_plural(t) for t in terms)
    ordered = sorted(set(terms), key=lambda t: (-len(t), t))
    body = "|".join(re.escape(t) for t in ordered)
    return re.compile(rf"(?<![\w-])(?:{body})(?![\w-])")


def singularize(word: str) -> str:
    """Naive singularization for nouns extracted from requirements."""
    if len(word) <= 3 or word.endswith(("ss", "us", "is")):
        return word
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith(("ses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Lexicon:
    """Immutable bundle of every word table used by the analyzers."""

    actor_roles: frozenset[str] = frozenset(_ACTOR_ROLES)
    verb_forms: Mapping[str, str] = field(default_factory=lambda: _build_verb_forms(_ACTION_VERBS))
    multiword_actions: tuple[tuple[str, str], ...] = _MULTIWORD_ACTIONS
    auth_actions: frozenset[str] = _AUTH_ACTIONS
    object_nouns: tuple[str, ...] = _OBJECT_NOUNS
    determiners: frozenset[str] = _DETERMINERS
    prepositions: frozenset[str] = _PREPOSITIONS
    stopwords: frozenset[str] = _STOPWORDS
    field_nouns: tuple[str, ...] = _FIELD_NOUNS
    vague_terms: tuple[str, ...] = _VAGUE_TERMS
    vague_quantities: tuple[str, ...] = _VAGUE_QUANTITIES
    passive_modals: tuple[str, ...] = _PASSIVE_MODALS
    irregular_participles: tuple[str, ...] = _IRREGULAR_PARTICIPLES
    success_criteria_phrases: tuple[str, ...] = _SUCCESS_CRITERIA_PHRASES
    indefinite_subjects: tuple[str, ...] = _INDEFINITE_SUBJECTS
    pass_severity: Mapping[str, Severity] = field(default_factory=lambda: MappingProxyType(_PASS_SEVERITY))
    pass_confidence: Mapping[str, float] = field(default_factory=lambda: MappingProxyType(_PASS_CONFIDENCE))
    acceptance_keywords: tuple[str, ...] = _ACCEPTANCE_KEYWORDS
    nfr_keywords: tuple[str, ...] = _NFR_KEYWORDS
    error_keywords: tuple[str, ...] = _ERROR_KEYWORDS
    business_rule_keywords: tuple[str, ...] = _BUSINESS_RULE_KEYWORDS
    story_vague_terms: tuple[str, ...] = _STORY_VAGUE_TERMS
    benefit_keywords: tuple[str, ...] = _BENEFIT_KEYWORDS
    action_groups: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(_ACTION_GROUPS))
    default_action_group: str = _DEFAULT_ACTION_GROUP
    nfr_templates: tuple[NfrTemplate, ...] = _NFR_TEMPLATES
    baseline_nfrs: tuple[NfrTemplate, ...] = _BASELINE_NFRS

    def __post_init__(self) -> None:
        # Compiled patterns are derived data; frozen dataclasses need
        # object.__setattr__ to cache them.
        object.__setattr__(self, "vague_term_re", _term_pattern(self.vague_terms))
        object.__setattr__(self, "vague_quantity_re", _term_pattern(self.vague_quantities))
        object.__setattr__(self, "success_criteria_re", _term_pattern(self.success_criteria_phrases))
        object.__setattr__(self, "object_noun_re", _term_pattern(self.object_nouns, plurals=True))
        object.__setattr__(self, "field_noun_re", _term_pattern(self.field_nouns, plurals=True))
        object.__setattr__(self, "actor_role_re", re.compile(
            rf"(?<![\w-])({'|'.join(sorted(self.actor_roles, key=lambda r: (-len(r), r)))})s?(?![\w-])"
        ))
        modals = "|".join(re.escape(m) for m in sorted(self.passive_modals, key=lambda m: (-len(m), m)))
        irregular = "|".join(self.irregular_participles)
        object.__setattr__(self, "passive_re", re.compile(
            rf"\b(?:{modals})\s+(?:not\s+)?be\s+(?:\w+ly\s+)?(?:\w+ed|{irregular})\b"
        ))

    def with_custom_terms(self, terms: list[str] | tuple[str, ...]) -> "Lexicon":
        """Return a copy whose vague-term list also contains *terms*."""
        extra = tuple(t.strip().lower() for t in terms if t and t.strip())
        if not extra:
            return self
        return replace(self, vague_terms=self.vague_terms + extra)

    def action_group(self, action: str) -> str:
        return self.action_groups.get(action, self.default_action_group)

    def is_auth_action(self, action: str) -> bool:
        return action in self.auth_actions

    def severity_for(self, category: str) -> Severity:
        return self.pass_severity[category]

    def confidence_for(self, category: str) -> float:
        return self.pass_confidence[category]


DEFAULT_LEXICON = Lexicon()


def contains_term(lowered: str, term: str) -> bool:
    """Whole-word containment check on already-lowercased text."""
    return re.search(rf"(?<![\w-]){re.escape(term)}(?![\w-])", lowered) is not None


def find_terms(lowered: str, terms: tuple[str, ...]) -> list[str]:
    """Return the subset of *terms* present in *lowered*, in table order."""
    return [t for t in terms if contains_term(lowered, t)]
