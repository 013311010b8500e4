from __future__ import annotations

import json

import allure
import httpx
import pytest
from click.testing import CliRunner

from task_assistant.assistant.emails import (
    EmailAnalysis,
    EmailAnalysisError,
    EmailMessage,
    InvalidEmailError,
    analyze_email,
    build_email_prompt,
    email_from_payload,
    parse_email_analysis,
)
from task_assistant.assistant.providers.base import ProviderFailureClass, ProviderResult
from task_assistant.assistant.providers.openai_provider import OpenAIProvider
from task_assistant.config import ProviderSettings
from task_assistant.main import task_assistant

pytestmark = [
    allure.epic("Assistant Core"),
    allure.feature("Email Triage"),
]

EMAIL_ID = "3f2b8c1e-9a4d-4e6f-b1c2-0d9e8f7a6b5c"
EMAIL = EmailMessage(id=EMAIL_ID, subject="Invoice overdue", snippet="Please pay by Friday.")


def test_email_from_payload_trims_fields() -> None:
    email = email_from_payload({"id": f" {EMAIL_ID} ", "subject": " Hello ", "snippet": None})

    assert email == EmailMessage(id=EMAIL_ID, subject="Hello", snippet="")


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"subject": "Hello"}, "Missing id or subject"),
        ({"id": EMAIL_ID, "subject": "   "}, "Missing id or subject"),
        ({"id": "email-1", "subject": "Hello"}, "Invalid UUID"),
    ],
)
def test_email_from_payload_rejects_bad_input(payload: dict[str, object], message: str) -> None:
    with pytest.raises(InvalidEmailError, match=message):
        email_from_payload(payload)


def test_prompt_asks_for_strict_json_and_quotes_email() -> None:
    prompt = build_email_prompt(EMAIL)

    assert prompt.startswith("Return ONLY valid JSON. No markdown. No commentary.")
    assert '"suggested_action": "short action"' in prompt
    assert prompt.endswith("Email:\nSubject: Invoice overdue\nSnippet: Please pay by Friday.")


def test_parse_accepts_fenced_output_and_defaults_missing_fields() -> None:
    analysis = parse_email_analysis('```json\n{"intent": "billing"}\n```')

    assert analysis == EmailAnalysis(intent="billing", urgent=False, suggested_action=None)


def test_parse_ignores_non_boolean_urgency() -> None:
    analysis = parse_email_analysis('{"intent": "x", "urgent": "yes", "suggested_action": "Pay"}')

    assert analysis is not None
    assert analysis.urgent is False
    assert analysis.suggested_action == "Pay"


def test_parse_returns_none_without_json_object() -> None:
    assert parse_email_analysis("I cannot help with that.") is None


def test_analyze_email_returns_provider_verdict(make_provider) -> None:
    provider = make_provider(
        ProviderResult(
            is_success=True,
            text=json.dumps({"intent": "billing", "urgent": True, "suggested_action": "Pay today"}),
        ),
    )

    analysis = analyze_email(EMAIL, provider_client=provider)

    assert analysis.to_dict() == {
        "intent": "billing",
        "urgent": True,
        "suggested_action": "Pay today",
    }
    assert "Subject: Invoice overdue" in provider.prompts[0]


def test_analyze_email_raises_on_provider_failure(make_provider) -> None:
    provider = make_provider(
        ProviderResult(
            is_success=False,
            text="",
            status_code=429,
            error="HTTP 429",
            failure_class=ProviderFailureClass.QUOTA,
        ),
    )

    with pytest.raises(EmailAnalysisError, match="quota: HTTP 429"):
        analyze_email(EMAIL, provider_client=provider)


def test_analyze_email_raises_on_invalid_json(make_provider) -> None:
    provider = make_provider(ProviderResult(is_success=True, text="not json"))

    with pytest.raises(EmailAnalysisError, match="invalid JSON"):
        analyze_email(EMAIL, provider_client=provider)


def test_analyze_email_requires_api_key() -> None:
    with pytest.raises(EmailAnalysisError, match="OPENAI_API_KEY"):
        analyze_email(EMAIL, settings=ProviderSettings(openai_api_key=None))


def test_emails_analyze_command(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = {"intent": "billing", "urgent": True, "suggested_action": "Pay today"}
        return httpx.Response(200, json={"output_text": json.dumps(body)})

    original_from_settings = OpenAIProvider.from_settings

    def _from_settings(settings, transport=None):
        return original_from_settings(settings, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(OpenAIProvider, "from_settings", staticmethod(_from_settings))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    result = CliRunner().invoke(
        task_assistant,
        ["emails", "analyze", "--id", EMAIL_ID, "--subject", "Invoice overdue"],
    )

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        f"email_id={EMAIL_ID}",
        "intent=billing",
        "urgent=true",
        "suggested_action=Pay today",
    ]


def test_emails_analyze_without_key_fails() -> None:
    result = CliRunner().invoke(
        task_assistant,
        ["emails", "analyze", "--id", EMAIL_ID, "--subject", "Invoice overdue"],
    )

    assert result.exit_code != 0
    assert "OPENAI_API_KEY is not configured." in result.output
