"""Keyword-based intent classification for assistant messages."""

from __future__ import annotations

from enum import Enum


class Intent(str, Enum):
    """Discrete request classes derived from message keywords."""

    SUMMARY = "SUMMARY"
    BLOCKED = "BLOCKED"
    DUE_TODAY = "DUE_TODAY"
    LIST_ALL = "LIST_ALL"
    OVERDUE = "OVERDUE"
    URGENT = "URGENT"
    PRIORITY = "PRIORITY"
    UNKNOWN = "UNKNOWN"


DUE_TODAY_PATTERNS: tuple[str, ...] = ("due today",)
OVERDUE_PATTERNS: tuple[str, ...] = ("overdue",)
BLOCKED_PATTERNS: tuple[str, ...] = ("blocked",)
PRIORITY_PATTERNS: tuple[str, ...] = ("prioritize", "priority", "work on first")
URGENT_PATTERNS: tuple[str, ...] = ("urgent",)
SUMMARY_PATTERNS: tuple[str, ...] = ("summarize", "summary")
LIST_ALL_PATTERNS: tuple[str, ...] = ("all tasks", "list")

# Order is significant: phrases co-occur and the first matching rule wins.
INTENT_RULES: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.DUE_TODAY, DUE_TODAY_PATTERNS),
    (Intent.OVERDUE, OVERDUE_PATTERNS),
    (Intent.BLOCKED, BLOCKED_PATTERNS),
    (Intent.PRIORITY, PRIORITY_PATTERNS),
    (Intent.URGENT, URGENT_PATTERNS),
    (Intent.SUMMARY, SUMMARY_PATTERNS),
    (Intent.LIST_ALL, LIST_ALL_PATTERNS),
)


def detect_intent(message: str) -> Intent:
    """Classify a message by the first matching trigger phrase."""

    haystack = message.lower()
    for intent, patterns in INTENT_RULES:
        if first_match(haystack, patterns) is not None:
            return intent
    return Intent.UNKNOWN


def first_match(haystack: str, patterns: tuple[str, ...]) -> str | None:
    for pattern in patterns:
        if pattern in haystack:
            return pattern
    return None
