"""Provider interface for the external LLM capability."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ProviderFailureClass(str, Enum):
    """Normalized provider failure classes."""

    CONFIG = "config"
    INVALID_REQUEST = "invalid_request"
    QUOTA = "quota"
    AUTH = "auth"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UPSTREAM = "upstream"


@dataclass(slots=True)
class ProviderResult:
    """Outcome of one provider round-trip."""

    is_success: bool
    text: str
    status_code: int = 0
    error: str | None = None
    failure_class: ProviderFailureClass | None = None


class LlmProvider(Protocol):
    """Protocol implemented by provider clients."""

    name: str

    def send(self, instruction_text: str) -> ProviderResult:
        """Send one instruction and return the raw text or a failure."""
        raise NotImplementedError
