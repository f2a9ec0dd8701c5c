"""Tests for genui.llm.client.LLMClient."""

from __future__ import annotations

import re
import uuid

import pytest

from genui.llm.client import LLMClient, chain_id
from genui.llm.types import Message
from tests.mock_providers import (
    make_client,
    make_malformed_tool_call_provider,
    make_text_provider,
    make_tool_call_provider,
)


MESSAGES = [Message(role="user", content="hi")]


class TestChainId:
    def test_stable_and_uuid4_shaped(self):
        value = chain_id("decision")
        assert value == chain_id("decision")
        assert value != chain_id("hydration")
        parsed = uuid.UUID(value)
        assert parsed.version == 4
        assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}", value)


class TestProviders:
    def test_first_registered_is_active(self):
        client = LLMClient()
        client.register_provider("a", make_text_provider("x"))
        client.register_provider("b", make_text_provider("y"))
        assert client.active_name == "a"
        client.set_active("b")
        assert client.active_name == "b"

    def test_unknown_provider(self):
        with pytest.raises(KeyError):
            LLMClient().set_active("nope")

    def test_no_active_provider(self):
        with pytest.raises(RuntimeError):
            LLMClient().active_provider


class TestComplete:
    async def test_text(self):
        provider = make_text_provider("hello big world")
        reply = await make_client(provider).complete(MESSAGES, prompt_name="t")
        assert reply.content == "hello big world"
        assert reply.done
        assert reply.tool_calls == []
        assert provider.last_kwargs["stream"] is False

    async def test_temperature_is_forwarded(self):
        provider = make_text_provider("x")
        client = make_client(provider)
        await client.complete(MESSAGES)
        assert provider.last_kwargs["temperature"] == 0.0

        client.temperature = 0.7
        await client.complete(MESSAGES)
        assert provider.last_kwargs["temperature"] == 0.7

    async def test_tool_call(self):
        provider = make_tool_call_provider("lookup", {"q": "x"}, call_id="c1", content_prefix="Let me check")
        reply = await make_client(provider).complete(MESSAGES, tools=[{"type": "function"}])
        assert reply.content == "Let me check"
        assert reply.first_tool_call.name == "lookup"
        assert reply.first_tool_call.arguments == {"q": "x"}

    async def test_assembler_errors_drop_tool_calls(self):
        reply = await make_client(make_malformed_tool_call_provider()).complete(MESSAGES)
        assert reply.tool_calls == []
        assert reply.first_tool_call is None
        assert reply.metadata["assembler_errors"]


class TestStream:
    async def test_snapshots_accumulate(self):
        provider = make_text_provider("a b c")
        queue = make_client(provider).stream(MESSAGES)
        replies = [r async for r in queue]

        assert [r.content for r in replies] == ["a ", "a b ", "a b c", "a b c"]
        assert [r.done for r in replies] == [False, False, False, True]
        assert provider.last_kwargs["stream"] is True
