"""
Triage Domain Entities
======================

Classification and routing of freshly reported issues.

A keyword heuristic infers category and urgency from the issue text unless
the reporter picked them explicitly; routing then maps the final category
to the staff team that owns it.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from hostelfix.config import (
    Category, Urgency, StaffRole, CATEGORY_ROUTES, URGENCY_SCORES
)
from hostelfix.core.exceptions import ValidationException


def urgency_to_score(urgency: Optional[str]) -> int:
    """Map an urgency label to its score; unknown labels score 0."""
    try:
        return URGENCY_SCORES[Urgency(urgency)]
    except ValueError:
        return 0


def route_category(category: Category) -> Optional[StaffRole]:
    """Staff team owning a category; ``None`` for ``other``."""
    return CATEGORY_ROUTES.get(category)


@dataclass(frozen=True)
class ClassificationResult:
    """
    Result of issue classification.

    Contains the category, urgency and routing decided at submission time.
    """
    category: Category
    urgency: Urgency
    urgency_score: int
    assigned_to: Optional[StaffRole]
    reason: str


class KeywordRules:
    """
    Keyword tables for the text heuristic.

    Following DRY principle - all keyword knowledge in one place.
    Category rule order breaks ties between equally matched categories.
    """

    CATEGORY_RULES: List[Tuple[Category, List[str]]] = [
        (Category.WATER, [
            "water", "leak", "leakage", "leaking", "tap", "pipe", "plumbing",
            "drain", "drainage", "flush", "toilet", "shower", "geyser",
            "clogged", "blocked", "overflow", "washroom", "sink",
        ]),
        (Category.ELECTRICITY, [
            "electricity", "electric", "power", "light", "lights", "bulb",
            "tubelight", "fan", "switch", "socket", "plug", "wiring", "spark",
            "sparking", "short circuit", "voltage", "fuse", "mcb", "blackout",
        ]),
        (Category.WIFI, [
            "wifi", "wi-fi", "internet", "network", "router", "lan",
            "connection", "connectivity", "bandwidth", "signal", "ethernet",
        ]),
        (Category.MESS, [
            "mess", "food", "meal", "canteen", "breakfast", "lunch", "dinner",
            "kitchen", "hygiene", "cook", "menu", "stale", "undercooked",
        ]),
        (Category.MAINTENANCE, [
            "door", "window", "lock", "bed", "furniture", "chair", "table",
            "wall", "paint", "ceiling", "carpenter", "cupboard", "roof",
            "hinge", "crack", "broken", "repair",
        ]),
    ]

    URGENCY_RULES: List[Tuple[Urgency, List[str]]] = [
        (Urgency.HIGH, [
            "urgent", "emergency", "immediately", "asap", "fire", "smoke",
            "shock", "sparking", "short circuit", "flood", "flooding", "burst",
            "no water", "no power", "no electricity", "blackout", "gas",
            "dangerous", "injury", "completely down",
        ]),
        (Urgency.MEDIUM, [
            "not working", "broken", "leak", "leaking", "leakage", "slow",
            "intermittent", "dirty", "smell", "stale", "frequently", "again",
        ]),
    ]

    DEFAULT_URGENCY = Urgency.LOW

    _patterns: Dict[str, "re.Pattern[str]"] = {}

    @classmethod
    def pattern(cls, keyword: str) -> "re.Pattern[str]":
        """Word-bounded, case-insensitive pattern for a keyword."""
        if keyword not in cls._patterns:
            cls._patterns[keyword] = re.compile(
                rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])", re.IGNORECASE
            )
        return cls._patterns[keyword]

    @classmethod
    def hits(cls, text: str, keywords: List[str]) -> List[str]:
        """Keywords found in text, in table order."""
        return [kw for kw in keywords if cls.pattern(kw).search(text)]


class KeywordClassifier:
    """Infers category and urgency from free text."""

    def __init__(self, rules: type = KeywordRules):
        self._rules = rules

    def infer_category(self, text: str) -> Tuple[Category, List[str]]:
        """Category with the most keyword hits; rule order breaks ties."""
        best, best_hits = Category.OTHER, []
        for category, keywords in self._rules.CATEGORY_RULES:
            found = self._rules.hits(text, keywords)
            if len(found) > len(best_hits):
                best, best_hits = category, found
        return best, best_hits

    def infer_urgency(self, text: str) -> Tuple[Urgency, List[str]]:
        """First urgency tier with any keyword hit, else the default."""
        for urgency, keywords in self._rules.URGENCY_RULES:
            found = self._rules.hits(text, keywords)
            if found:
                return urgency, found
        return self._rules.DEFAULT_URGENCY, []


def _parse_explicit(value: Optional[str], enum_type, field_name: str):
    if value is None or value == "":
        return None
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationException(
            f"Unknown {field_name} '{value}' (expected one of: {allowed})",
            {"field": field_name}
        )


_default_classifier = KeywordClassifier()


def classify_and_route(
    title: str,
    description: str = "",
    explicit_category: Optional[str] = None,
    explicit_urgency: Optional[str] = None,
    classifier: Optional[KeywordClassifier] = None
) -> ClassificationResult:
    """
    Decide category, urgency and routing for an issue.

    Explicit values win; otherwise the keyword heuristic reads
    ``title + description``. Routing looks at the final category only.

    Raises:
        ValidationException: An explicit value is not a known category/urgency
    """
    classifier = classifier or _default_classifier
    text = f"{title or ''}\n{description or ''}"
    reasons = []

    category = _parse_explicit(explicit_category, Category, "category")
    if category is not None:
        reasons.append(f"category '{category.value}' chosen by reporter")
    else:
        category, found = classifier.infer_category(text)
        if found:
            reasons.append(f"category '{category.value}' from keywords: {', '.join(found)}")
        else:
            reasons.append("no category keywords matched, filed under 'other'")

    urgency = _parse_explicit(explicit_urgency, Urgency, "urgency")
    if urgency is not None:
        reasons.append(f"urgency '{urgency.value}' chosen by reporter")
    else:
        urgency, found = classifier.infer_urgency(text)
        if found:
            reasons.append(f"urgency '{urgency.value}' from keywords: {', '.join(found)}")
        else:
            reasons.append(f"no urgency keywords matched, defaulted to '{urgency.value}'")

    assigned_to = route_category(category)
    if assigned_to is not None:
        reasons.append(f"routed to {assigned_to.value}")

    reason = "; ".join(reasons)
    return ClassificationResult(
        category=category,
        urgency=urgency,
        urgency_score=urgency_to_score(urgency),
        assigned_to=assigned_to,
        reason=reason[0].upper() + reason[1:],
    )
