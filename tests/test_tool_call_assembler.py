"""Tests for genui.llm.tool_call_assembler.ToolCallAssembler."""

from __future__ import annotations

import json

import pytest

from genui.llm.tool_call_assembler import ToolCallAssembler
from genui.llm.types import RawToolDelta, ToolCall


def _feed_all(asm: ToolCallAssembler, *deltas: RawToolDelta) -> list[ToolCall]:
    done: list[ToolCall] = []
    for delta in deltas:
        done.extend(asm.feed(delta))
    return done


class TestSingleToolCall:
    def test_fragments_assemble_on_done(self):
        asm = ToolCallAssembler()
        pending = _feed_all(
            asm,
            RawToolDelta(call_index=0, id="call_1", name_delta="get_"),
            RawToolDelta(call_index=0, name_delta="weather"),
            RawToolDelta(call_index=0, args_delta='{"city": '),
            RawToolDelta(call_index=0, args_delta='"Oslo"}'),
        )
        assert pending == []

        (tc,) = asm.feed(RawToolDelta(call_index=0, done=True))
        assert tc == ToolCall(id="call_1", name="get_weather", arguments={"city": "Oslo"})
        assert asm.errors == []

    def test_single_delta_with_everything(self):
        asm = ToolCallAssembler()
        (tc,) = asm.feed(
            RawToolDelta(
                call_index=0,
                id="call_x",
                name_delta="ping",
                args_delta='{"host": "localhost"}',
                done=True,
            )
        )
        assert tc.arguments == {"host": "localhost"}

    def test_late_id_does_not_replace_first(self):
        asm = ToolCallAssembler()
        (tc,) = _feed_all(
            asm,
            RawToolDelta(call_index=0, id="first", name_delta="t"),
            RawToolDelta(call_index=0, id="second", done=True),
        )
        assert tc.id == "first"


class TestConcurrentCalls:
    def test_interleaved_indices(self):
        asm = ToolCallAssembler()
        for idx in range(3):
            asm.feed(RawToolDelta(call_index=idx, id=f"c{idx}", name_delta=f"tool_{idx}"))
        for idx in range(3):
            asm.feed(RawToolDelta(call_index=idx, args_delta=json.dumps({"idx": idx})))

        calls = _feed_all(asm, *(RawToolDelta(call_index=i, done=True) for i in (2, 0, 1)))
        assert [c.name for c in calls] == ["tool_2", "tool_0", "tool_1"]
        assert [c.arguments["idx"] for c in calls] == [2, 0, 1]


class TestMalformedJSON:
    def test_invalid_json_records_error(self):
        asm = ToolCallAssembler()
        result = _feed_all(
            asm,
            RawToolDelta(call_index=0, id="bad", name_delta="broken"),
            RawToolDelta(call_index=0, args_delta='{"key": "val'),
            RawToolDelta(call_index=0, done=True),
        )
        assert result == []
        assert len(asm.errors) == 1
        assert "tool_call_json_parse_failed" in asm.errors[0]
        assert "idx=0" in asm.errors[0]

    def test_malformed_does_not_block_valid_calls(self):
        asm = ToolCallAssembler()
        _feed_all(
            asm,
            RawToolDelta(call_index=0, id="bad", name_delta="broken", args_delta="{BAD", done=True),
        )
        (tc,) = asm.feed(
            RawToolDelta(call_index=1, id="good", name_delta="ok", args_delta='{"a": 1}', done=True)
        )
        assert tc.name == "ok"
        assert [c.name for c in asm.calls] == ["ok"]


class TestFlush:
    def test_flush_finalizes_open_calls_in_index_order(self):
        asm = ToolCallAssembler()
        asm.feed(RawToolDelta(call_index=1, id="b", name_delta="beta", args_delta='{"v": 2}'))
        asm.feed(RawToolDelta(call_index=0, id="a", name_delta="alpha", args_delta='{"v": 1}'))

        assert [c.name for c in asm.flush()] == ["alpha", "beta"]
        assert asm.flush() == []

    def test_flush_with_bad_json(self):
        asm = ToolCallAssembler()
        asm.feed(RawToolDelta(call_index=0, id="f1", name_delta="bad", args_delta="NOPE"))
        assert asm.flush() == []
        assert len(asm.errors) == 1


class TestEmptyArgs:
    def test_absent_arguments_default_to_empty_object(self):
        asm = ToolCallAssembler()
        (tc,) = asm.feed(RawToolDelta(call_index=0, id="no_args", name_delta="simple", done=True))
        assert tc.arguments == {}


class TestNonObjectArguments:
    """Arguments must decode to a JSON object."""

    @pytest.mark.parametrize("args", ["[1, 2]", "\"text\"", "42", "null"])
    def test_non_object_dropped(self, args):
        asm = ToolCallAssembler()
        result = asm.feed(
            RawToolDelta(call_index=0, id="n", name_delta="t", args_delta=args, done=True)
        )
        assert result == []
        assert asm.calls == []
        assert "tool_call_args_not_object" in asm.errors[0]


class TestCallsProperty:
    def test_accumulates_in_completion_order(self):
        asm = ToolCallAssembler()
        asm.feed(RawToolDelta(call_index=0, id="a", name_delta="first"))
        asm.feed(RawToolDelta(call_index=1, id="b", name_delta="second", done=True))
        assert asm.in_progress
        asm.flush()
        assert [c.name for c in asm.calls] == ["second", "first"]
        assert not asm.in_progress

    def test_calls_is_a_copy(self):
        asm = ToolCallAssembler()
        asm.feed(RawToolDelta(call_index=0, id="a", name_delta="x", done=True))
        asm.calls.clear()
        assert len(asm.calls) == 1


class TestIdFallback:
    """When no id is provided, a synthetic id should be generated."""

    def test_missing_id_uses_call_index(self):
        asm = ToolCallAssembler()
        result = asm.feed(
            RawToolDelta(
                call_index=7,
                name_delta="no_id",
                args_delta="{}",
                done=True,
            )
        )
        assert len(result) == 1
        assert result[0].id == "call_7"


class TestNameStripping:
    """Tool names should be stripped of leading/trailing whitespace."""

    def test_whitespace_in_name(self):
        asm = ToolCallAssembler()
        asm.feed(RawToolDelta(call_index=0, id="ws", name_delta="  spaced "))
        asm.feed(RawToolDelta(call_index=0, name_delta=" tool  "))
        result = asm.feed(RawToolDelta(call_index=0, args_delta="{}", done=True))
        assert len(result) == 1
        assert result[0].name == "spaced  tool"
