"""Deterministic classification of provider HTTP failures."""

from __future__ import annotations

from dataclasses import dataclass

from task_assistant.assistant.intent import first_match
from task_assistant.assistant.providers.base import ProviderFailureClass

_QUOTA_STATUS_CODES: tuple[int, ...] = (429,)
_AUTH_STATUS_CODES: tuple[int, ...] = (401, 403)
_INVALID_REQUEST_STATUS_CODES: tuple[int, ...] = (400, 404, 422)

_QUOTA_PATTERNS: tuple[str, ...] = (
    "insufficient_quota",
    "quota",
    "rate limit",
    "billing",
)
_AUTH_PATTERNS: tuple[str, ...] = (
    "invalid_api_key",
    "incorrect api key",
    "unauthorized",
    "permission denied",
)


@dataclass(slots=True)
class ProviderFailureClassification:
    """Normalized failure classification result."""

    failure_class: ProviderFailureClass
    matched_rule: str
    matched_pattern: str | None

    @property
    def retryable(self) -> bool:
        return self.failure_class not in (
            ProviderFailureClass.AUTH,
            ProviderFailureClass.CONFIG,
            ProviderFailureClass.INVALID_REQUEST,
        )


def classify_provider_failure(*, status_code: int, body: str) -> ProviderFailureClassification:
    """Classify a non-success provider response.

    Quota wins over auth so a throttled key is not reported as revoked.
    """

    haystack = body.lower()

    pattern = first_match(haystack, _QUOTA_PATTERNS)
    if pattern is not None or status_code in _QUOTA_STATUS_CODES:
        return ProviderFailureClassification(
            failure_class=ProviderFailureClass.QUOTA,
            matched_rule="quota" if pattern is not None else "quota_status_code",
            matched_pattern=pattern,
        )

    pattern = first_match(haystack, _AUTH_PATTERNS)
    if pattern is not None or status_code in _AUTH_STATUS_CODES:
        return ProviderFailureClassification(
            failure_class=ProviderFailureClass.AUTH,
            matched_rule="auth" if pattern is not None else "auth_status_code",
            matched_pattern=pattern,
        )

    if status_code in _INVALID_REQUEST_STATUS_CODES:
        return ProviderFailureClassification(
            failure_class=ProviderFailureClass.INVALID_REQUEST,
            matched_rule="invalid_request_status_code",
            matched_pattern=None,
        )

    return ProviderFailureClassification(
        failure_class=ProviderFailureClass.UPSTREAM,
        matched_rule="fallback_upstream",
        matched_pattern=None,
    )
