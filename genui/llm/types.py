"""Core types for the LLM subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Message:
    """
    A provider-ready chat turn.

    *content* is either plain text or a list of OpenAI-style content parts
    (``{"type": "text", "text": ...}``).
    """

    role: str  # "user", "assistant", "system", "tool"
    content: str | list[dict]
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None


@dataclass
class ToolCall:
    """A resolved tool call with parsed arguments."""

    id: str
    name: str
    arguments: dict


@dataclass
class RawToolDelta:
    """
    An incremental delta for a streaming tool call.

    Providers emit these as tool-call fragments arrive.  The ToolCallAssembler
    accumulates them and produces finished ToolCall objects.
    """

    call_index: int
    id: str | None = None
    name_delta: str = ""
    args_delta: str = ""
    done: bool = False


@dataclass
class StreamChunk:
    """
    A single chunk yielded by a provider.

    *delta* carries new text content, *tool_deltas* incremental tool-call
    fragments.  *done* is ``True`` on the final chunk.
    """

    delta: str = ""
    tool_deltas: list[RawToolDelta] | None = None
    done: bool = False


@dataclass
class LLMReply:
    """
    A model reply: the full assistant turn, or an accumulated snapshot of it
    while streaming.
    """

    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    provider: str | None = None
    done: bool = True
    metadata: dict = field(default_factory=dict)

    @property
    def first_tool_call(self) -> ToolCall | None:
        return self.tool_calls[0] if self.tool_calls else None
