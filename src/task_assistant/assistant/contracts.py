"""AIResponse wire contract and provider output validation."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from task_assistant.assistant.intent import Intent

RESPONSE_INTENTS: tuple[str, ...] = (
    Intent.URGENT.value,
    Intent.PRIORITY.value,
    Intent.SUMMARY.value,
    Intent.UNKNOWN.value,
)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


@dataclass(slots=True)
class AIResponse:
    """Structured assistant reply returned to every caller."""

    intent: str
    confidence: float
    answer: str
    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "confidence": self.confidence,
            "answer": self.answer,
            "actions": list(self.actions),
            "warnings": list(self.warnings),
        }


@dataclass(slots=True)
class ResponseValidation:
    """Result of provider output validation.

    ``is_parsed`` is false when no JSON object could be decoded at all;
    schema violations of a decoded object keep it true.
    """

    is_valid: bool
    response: AIResponse | None
    error_summary: str | None
    is_parsed: bool = True


def to_response_intent(intent: Intent) -> str:
    """Collapse a detected intent onto the four contract intents."""

    if intent.value in RESPONSE_INTENTS:
        return intent.value
    return Intent.UNKNOWN.value


def validate_ai_response(payload: object) -> ResponseValidation:  # noqa: PLR0911
    """Check a decoded payload against the AIResponse schema."""

    if not isinstance(payload, dict):
        return _rejected("AIResponse must be a JSON object.")
    intent = payload.get("intent")
    if intent not in RESPONSE_INTENTS:
        return _rejected(f"AIResponse.intent must be one of {RESPONSE_INTENTS}, got {intent!r}.")
    confidence = payload.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, int | float):
        return _rejected("AIResponse.confidence must be a number.")
    if not 0 <= confidence <= 1:
        return _rejected(f"AIResponse.confidence must be within [0, 1], got {confidence!r}.")
    answer = payload.get("answer")
    if not isinstance(answer, str):
        return _rejected("AIResponse.answer must be a string.")
    actions = payload.get("actions")
    if not _is_string_list(actions):
        return _rejected("AIResponse.actions must be an array of strings.")
    warnings = payload.get("warnings")
    if not _is_string_list(warnings):
        return _rejected("AIResponse.warnings must be an array of strings.")
    return ResponseValidation(
        is_valid=True,
        response=AIResponse(
            intent=intent,
            confidence=float(confidence),
            answer=answer,
            actions=list(actions),
            warnings=list(warnings),
        ),
        error_summary=None,
    )


def parse_ai_response(raw_text: str) -> ResponseValidation:
    """Decode provider text and validate it.

    Accepts a bare JSON object, a fenced ```json block, or the outermost
    ``{...}`` span of the text.
    """

    text = raw_text.strip()
    if not text:
        return _rejected("Provider returned empty output.", is_parsed=False)
    payload = parse_json_object(text)
    if payload is None:
        return _rejected("Provider output is not a JSON object.", is_parsed=False)
    return validate_ai_response(payload)


def parse_json_object(text: str) -> dict[str, object] | None:
    """Find a JSON object in model output: bare, fenced, or the outer brace span."""

    direct = _try_load_dict(text)
    if direct is not None:
        return direct

    fenced = _FENCED_JSON.search(text)
    if fenced is not None:
        payload = _try_load_dict(fenced.group(1))
        if payload is not None:
            return payload

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return _try_load_dict(text[start : end + 1])


def _try_load_dict(raw: str) -> dict[str, object] | None:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _rejected(error_summary: str, *, is_parsed: bool = True) -> ResponseValidation:
    return ResponseValidation(
        is_valid=False,
        response=None,
        error_summary=error_summary,
        is_parsed=is_parsed,
    )
