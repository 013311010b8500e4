"""Single-email triage through the LLM provider.

An email (id, subject, snippet) is turned into a strict-JSON prompt; the
provider output is decoded into an `EmailAnalysis`. Unlike the task
assistant there is no deterministic fallback: a failed call or an
undecodable answer raises `EmailAnalysisError`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from task_assistant.assistant.contracts import parse_json_object
from task_assistant.assistant.orchestrator import send_prompt
from task_assistant.assistant.providers.base import LlmProvider
from task_assistant.config import ProviderSettings, Settings

logger = logging.getLogger(__name__)

EMAIL_ANALYSIS_INSTRUCTIONS = """Return ONLY valid JSON. No markdown. No commentary.

{
  "intent": "short label",
  "urgent": true or false,
  "suggested_action": "short action"
}"""

_UUID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(slots=True)
class InvalidEmailError(Exception):
    """Raised when an email payload fails validation."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class EmailAnalysisError(Exception):
    """Raised when the provider cannot produce an analysis."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class EmailMessage:
    id: str
    subject: str
    snippet: str = ""


@dataclass(slots=True)
class EmailAnalysis:
    """Provider verdict for one email. Missing fields take neutral defaults."""

    intent: str | None
    urgent: bool
    suggested_action: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "urgent": self.urgent,
            "suggested_action": self.suggested_action,
        }


def email_from_payload(payload: dict[str, Any]) -> EmailMessage:
    """Validate an analysis request: a UUID id and a non-empty subject."""

    email_id = _trimmed(payload.get("id"))
    subject = _trimmed(payload.get("subject"))
    snippet = _trimmed(payload.get("snippet"))
    if not email_id or not subject:
        raise InvalidEmailError("Missing id or subject")
    if not _UUID.match(email_id):
        raise InvalidEmailError(f"Invalid UUID format: {email_id!r}")
    return EmailMessage(id=email_id, subject=subject, snippet=snippet)


def build_email_prompt(email: EmailMessage) -> str:
    return "\n".join(
        [
            EMAIL_ANALYSIS_INSTRUCTIONS,
            "",
            "Email:",
            f"Subject: {email.subject}",
            f"Snippet: {email.snippet}",
        ],
    )


def parse_email_analysis(raw_text: str) -> EmailAnalysis | None:
    """Decode provider output; ``None`` when no JSON object is found."""

    payload = parse_json_object(raw_text.strip())
    if payload is None:
        return None
    urgent = payload.get("urgent")
    return EmailAnalysis(
        intent=_trimmed(payload.get("intent")) or None,
        urgent=urgent if isinstance(urgent, bool) else False,
        suggested_action=_trimmed(payload.get("suggested_action")) or None,
    )


def analyze_email(
    email: EmailMessage,
    *,
    provider_client: LlmProvider | None = None,
    settings: ProviderSettings | None = None,
) -> EmailAnalysis:
    """Ask the provider to triage one email."""

    provider_settings = settings or Settings.from_env().provider
    if provider_client is None and not provider_settings.openai_api_key:
        raise EmailAnalysisError("OPENAI_API_KEY is not configured.")

    result = send_prompt(
        build_email_prompt(email),
        provider_client=provider_client,
        settings=provider_settings,
    )
    if not result.is_success:
        reason = result.error or "unknown error"
        if result.failure_class is not None:
            reason = f"{result.failure_class.value}: {reason}"
        logger.warning("Email analysis failed for %s: %s", email.id, reason)
        raise EmailAnalysisError(f"Analysis failed ({reason}).")

    analysis = parse_email_analysis(result.text)
    if analysis is None:
        logger.warning("Invalid email analysis output for %s: %.200s", email.id, result.text)
        raise EmailAnalysisError("AI returned invalid JSON")
    logger.info("Analyzed email %s: urgent=%s", email.id, analysis.urgent)
    return analysis


def _trimmed(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""
