"""
LLM client -- routes prompts to a named provider and assembles the reply.

Stages talk to the model only through :class:`LLMClient`:

  1. ``complete`` returns one assembled :class:`LLMReply`.
  2. ``stream`` returns a :class:`~genui.streaming.StreamingQueue` of
     accumulated reply snapshots, the last one with ``done=True``.

Tool-call deltas are fed into a ``ToolCallAssembler``.  If the assembler
records errors (malformed JSON from the model) the reply carries no tool
calls and the errors are surfaced in ``metadata["assembler_errors"]``.
"""

from __future__ import annotations

import hashlib
import logging
from typing import AsyncIterator

from genui.llm.providers.base import Provider
from genui.llm.tool_call_assembler import ToolCallAssembler
from genui.llm.types import LLMReply, Message, StreamChunk
from genui.streaming import StreamingQueue, pump

logger = logging.getLogger(__name__)


def chain_id(value: str) -> str:
    """
    Derive a stable UUIDv4-shaped id from *value*.

    The same prompt name always maps to the same id, which keeps log lines
    for one kind of call correlated across processes.
    """
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    versioned = digest[:12] + "4" + digest[13:32]
    variant = format((int(digest[16], 16) & 0x3) | 0x8, "x")
    h = versioned[:16] + variant + versioned[17:]
    return f"{h[:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


class LLMClient:
    """
    Routes completion requests to the active provider.

    Parameters
    ----------
    temperature:
        Sampling temperature for every call.  Defaults to ``0.0`` so
        decisions are as deterministic as the provider allows.
    timeout:
        Per-request timeout passed to the provider (``None`` = provider
        default).
    """

    def __init__(self, temperature: float = 0.0, timeout: float | None = None) -> None:
        self._providers: dict[str, Provider] = {}
        self._active: str | None = None
        self.temperature = temperature
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Provider management
    # ------------------------------------------------------------------

    def register_provider(self, name: str, provider: Provider) -> None:
        """Register a provider under *name*.  Overwrites any existing entry."""
        self._providers[name] = provider
        if self._active is None:
            self._active = name

    def set_active(self, name: str) -> None:
        """
        Switch the active provider.

        Raises ``KeyError`` if *name* has not been registered.
        """
        if name not in self._providers:
            raise KeyError(
                f"Unknown provider {name!r}. Registered: {list(self._providers)}"
            )
        self._active = name

    @property
    def active_name(self) -> str | None:
        return self._active

    @property
    def active_provider(self) -> Provider:
        """
        Return the active ``Provider`` instance.

        Raises ``RuntimeError`` if no provider is active.
        """
        if self._active is None or self._active not in self._providers:
            raise RuntimeError("No active LLM provider")
        return self._providers[self._active]

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[dict] | None = None,
        tool_choice: str | dict | None = None,
        response_format: dict | None = None,
        prompt_name: str = "",
    ) -> LLMReply:
        """Run a non-streaming completion and return the assembled reply."""
        reply = LLMReply(provider=self._active)
        async for reply in self._snapshots(
            messages, tools, tool_choice, response_format, prompt_name, stream=False
        ):
            pass
        logger.debug("[%s] reply: %r", prompt_name, reply.content[:500])
        return reply

    def stream(
        self,
        messages: list[Message],
        *,
        tools: list[dict] | None = None,
        tool_choice: str | dict | None = None,
        response_format: dict | None = None,
        prompt_name: str = "",
    ) -> StreamingQueue[LLMReply]:
        """
        Start a streaming completion.

        Must be called from a running event loop.  Each queued value is the
        reply accumulated so far.
        """
        return pump(
            self._snapshots(
                messages, tools, tool_choice, response_format, prompt_name, stream=True
            )
        )

    async def _snapshots(
        self,
        messages: list[Message],
        tools: list[dict] | None,
        tool_choice: str | dict | None,
        response_format: dict | None,
        prompt_name: str,
        *,
        stream: bool,
    ) -> AsyncIterator[LLMReply]:
        provider = self.active_provider
        logger.info(
            "LLM call %s chain=%s provider=%s stream=%s",
            prompt_name or "(unnamed)",
            chain_id(prompt_name or "default"),
            self._active,
            stream,
        )
        assembler = ToolCallAssembler()
        content_parts: list[str] = []

        chunk: StreamChunk
        async for chunk in provider.chat(
            messages,
            tools=tools,
            stream=stream,
            temperature=self.temperature,
            tool_choice=tool_choice,
            response_format=response_format,
            timeout=self.timeout,
        ):
            if chunk.delta:
                content_parts.append(chunk.delta)
            for td in chunk.tool_deltas or ():
                assembler.feed(td)
            if stream and (chunk.delta or chunk.tool_deltas):
                yield LLMReply(
                    content="".join(content_parts),
                    tool_calls=assembler.calls,
                    provider=self._active,
                    done=False,
                )

        assembler.flush()
        metadata: dict = {"provider": self._active}
        tool_calls = assembler.calls
        if assembler.errors:
            logger.warning("Tool-call assembly errors: %s", assembler.errors)
            metadata["assembler_errors"] = list(assembler.errors)
            tool_calls = []

        yield LLMReply(
            content="".join(content_parts),
            tool_calls=tool_calls,
            provider=self._active,
            done=True,
            metadata=metadata,
        )
