"""Runtime configuration for the assistant and its LLM providers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

SUPPORTED_PROVIDERS = ("mock", "openai", "gemini")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class AssistantSettings:
    """Deterministic assistant settings."""

    timezone: str = "Asia/Dubai"
    urgent_limit: int = 5
    tasks_path: Path | None = None


@dataclass(slots=True)
class ProviderSettings:
    """External LLM provider settings."""

    default_provider: str = "openai"
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4.1-mini"
    request_timeout_seconds: float = 30.0
    cooldown_seconds: float = 30.0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    assistant: AssistantSettings = field(default_factory=AssistantSettings)
    provider: ProviderSettings = field(default_factory=ProviderSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, tasks_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        env_tasks_path = os.getenv("TASK_ASSISTANT_TASKS_PATH", "").strip()
        return cls(
            assistant=AssistantSettings(
                timezone=os.getenv("TASK_ASSISTANT_TIMEZONE", "Asia/Dubai"),
                urgent_limit=int(os.getenv("TASK_ASSISTANT_URGENT_LIMIT", "5")),
                tasks_path=tasks_path or (Path(env_tasks_path) if env_tasks_path else None),
            ),
            provider=ProviderSettings(
                default_provider=os.getenv("TASK_ASSISTANT_PROVIDER", "openai").strip().lower(),
                openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
                openai_base_url=os.getenv(
                    "TASK_ASSISTANT_OPENAI_BASE_URL",
                    "https://api.openai.com/v1",
                ).rstrip("/"),
                openai_model=os.getenv("TASK_ASSISTANT_OPENAI_MODEL", "gpt-4.1-mini"),
                request_timeout_seconds=float(
                    os.getenv("TASK_ASSISTANT_REQUEST_TIMEOUT_SECONDS", "30.0"),
                ),
                cooldown_seconds=float(os.getenv("TASK_ASSISTANT_COOLDOWN_SECONDS", "30.0")),
            ),
            log_level=os.getenv("TASK_ASSISTANT_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error if any setting is out of range."""

        if not self.assistant.timezone.strip():
            raise ValueError("TASK_ASSISTANT_TIMEZONE must be a non-empty string.")
        if self.assistant.urgent_limit <= 0:
            raise ValueError("TASK_ASSISTANT_URGENT_LIMIT must be a positive integer.")
        if self.provider.default_provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported TASK_ASSISTANT_PROVIDER: {self.provider.default_provider!r}. "
                f"Use one of {SUPPORTED_PROVIDERS}.",
            )
        parsed = urlparse(self.provider.openai_base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "Invalid TASK_ASSISTANT_OPENAI_BASE_URL: "
                f"{self.provider.openai_base_url!r}. Expected an absolute http(s) URL.",
            )
        if not self.provider.openai_model.strip():
            raise ValueError("TASK_ASSISTANT_OPENAI_MODEL must be a non-empty string.")
        if self.provider.request_timeout_seconds <= 0:
            raise ValueError("TASK_ASSISTANT_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if self.provider.cooldown_seconds < 0:
            raise ValueError("TASK_ASSISTANT_COOLDOWN_SECONDS must be >= 0.")
        if self.log_level not in SUPPORTED_LOG_LEVELS:
            raise ValueError(
                f"Invalid TASK_ASSISTANT_LOG_LEVEL: {self.log_level!r}. "
                f"Use one of {SUPPORTED_LOG_LEVELS}.",
            )
