"""LLM subsystem -- providers, client, and streaming tool-call assembly."""

from genui.llm.client import LLMClient, chain_id
from genui.llm.tool_call_assembler import ToolCallAssembler
from genui.llm.types import (
    LLMReply,
    Message,
    RawToolDelta,
    StreamChunk,
    ToolCall,
)

__all__ = [
    "LLMClient",
    "LLMReply",
    "Message",
    "RawToolDelta",
    "StreamChunk",
    "ToolCall",
    "ToolCallAssembler",
    "chain_id",
]
