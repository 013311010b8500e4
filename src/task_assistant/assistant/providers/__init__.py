"""LLM provider implementations."""

from task_assistant.assistant.providers.base import (
    LlmProvider,
    ProviderFailureClass,
    ProviderResult,
)
from task_assistant.assistant.providers.openai_provider import OpenAIProvider

__all__ = [
    "LlmProvider",
    "OpenAIProvider",
    "ProviderFailureClass",
    "ProviderResult",
]
