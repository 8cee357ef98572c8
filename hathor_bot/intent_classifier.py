# hathor_bot/intent_classifier.py
"""
Rule-based intent classification for chat messages.

A single ordered rule table decides between the deterministic shortcuts
(download, inventory, follow-up) and the general language-model path.
Lower priority number wins; the first matching rule is the answer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from .enums import Intent, ResponseKind


@dataclass(frozen=True)
class IntentRule:
    priority: int
    intent: Intent
    patterns: Tuple[Pattern[str], ...]
    # Rule only applies when the previous stored reply had this type
    requires_previous: Optional[ResponseKind] = None

    def matches(self, message: str, previous: Optional[ResponseKind]) -> bool:
        if self.requires_previous is not None and previous != self.requires_previous:
            return False
        return any(p.search(message) for p in self.patterns)


def _rx(*patterns: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(p, re.I) for p in patterns)


def _literals(*phrases: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(re.escape(p), re.I) for p in phrases)


DOWNLOAD_PHRASES = (
    "download my prescription",
    "download the prescription",
    "download prescription",
    "download my recommendations",
    "get my prescription",
    "send my prescription",
    "prescription document",
)

INVENTORY_PATTERNS = (
    r"\bwhat\s+(?:oils?|products?)\s+(?:do\s+)?(?:you|u)\s+(?:have|got|sell|carry)",
    # "do" is required here so "are these all the oils you have" stays a follow-up
    r"\b(?:oils?|products?)\s+do\s+(?:you|u)\s+(?:have|sell|carry)",
    r"\b(?:oils?|products?)\s+(?:are\s+)?(?:available|in\s+stock)",
    r"\byour\s+(?:inventory|catalog(?:ue)?)",
    r"\bcomplete\s+collection",
    r"\ball\s+oils\b",
    r"\bdo\s+(?:you|u)\s+have\s+(?:any\s+)?(?:oils?|products?)\b",
    r"\bshow\s+me\s+(?:all\s+)?(?:of\s+)?your\s+(?:oils?|products?)",
)

FOLLOW_UP_PATTERNS = (
    r"\bare\s+these\s+all\b",
    r"\bis\s+(?:that|this)\s+all\b",
    r"\bmore\s+oils\b",
    r"\bany\s+other\s+oils\b",
    r"\bcomplete\s+list\b",
)

INTENT_RULES: Tuple[IntentRule, ...] = tuple(sorted(
    (
        IntentRule(10, Intent.DOWNLOAD, _literals(*DOWNLOAD_PHRASES)),
        IntentRule(20, Intent.INVENTORY, _rx(*INVENTORY_PATTERNS)),
        IntentRule(30, Intent.FOLLOW_UP, _rx(*FOLLOW_UP_PATTERNS),
                   requires_previous=ResponseKind.INVENTORY),
    ),
    key=lambda r: r.priority,
))


def classify(message: str, previous: Optional[ResponseKind] = None) -> Intent:
    """Intent for ``message`` given the type of the previous stored reply."""
    text = (message or "").strip()
    for rule in INTENT_RULES:
        if rule.matches(text, previous):
            return rule.intent
    return Intent.GENERAL
