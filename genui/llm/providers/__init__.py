"""LLM provider implementations."""

from genui.llm.providers.base import Provider
from genui.llm.providers.openai_compat import OpenAICompatProvider

__all__ = ["OpenAICompatProvider", "Provider"]
