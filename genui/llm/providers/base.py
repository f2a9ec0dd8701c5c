"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from genui.llm.types import Message, StreamChunk


class Provider(ABC):
    """
    A provider encapsulates access to a single LLM endpoint.

    Implementations stream ``StreamChunk`` objects from ``chat``.  Retry and
    rate-limit policy belongs here, never in the engine.
    """

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        tools: list[dict] | None = None,
        stream: bool = True,
        *,
        temperature: float = 0.0,
        tool_choice: str | dict | None = None,
        response_format: dict | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Start a chat completion.

        Yields ``StreamChunk`` objects.  The last chunk has ``done=True``.
        """
        ...
        # Make the method an async generator so sub-classes can ``yield``.
        if False:  # pragma: no cover
            yield StreamChunk()  # type: ignore[misc]

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. ``"openai-compat"``)."""
        ...

    @property
    def model(self) -> str | None:
        """Model identifier sent to the endpoint, when known."""
        return None
