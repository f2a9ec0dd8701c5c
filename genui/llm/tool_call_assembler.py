"""
Assembles streaming tool-call deltas into complete ToolCall objects.

Fragments are accumulated per ``call_index``.  A call is finalized when a
delta arrives with ``done=True`` or when ``flush()`` is called at stream end;
its argument string is then JSON-parsed.  Calls whose arguments are not a
JSON object are dropped and the failure recorded in ``errors``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from genui.llm.types import RawToolDelta, ToolCall


@dataclass
class _Pending:
    id: str | None = None
    name: str = ""
    args: str = ""


class ToolCallAssembler:
    """Buffers raw tool-call deltas and emits finished ``ToolCall`` objects."""

    def __init__(self) -> None:
        self._pending: dict[int, _Pending] = {}
        self._finished: list[ToolCall] = []
        self.errors: list[str] = []

    def feed(self, delta: RawToolDelta) -> list[ToolCall]:
        """
        Feed one delta.  Returns the calls it completed (possibly none).
        """
        buf = self._pending.setdefault(delta.call_index, _Pending())
        if delta.id and not buf.id:
            buf.id = delta.id
        buf.name += delta.name_delta
        buf.args += delta.args_delta

        if delta.done:
            return self._finalize(delta.call_index)
        return []

    def flush(self) -> list[ToolCall]:
        """Finalize every open call, in call-index order."""
        calls: list[ToolCall] = []
        for idx in sorted(self._pending):
            calls.extend(self._finalize(idx))
        return calls

    @property
    def calls(self) -> list[ToolCall]:
        """All calls finalized so far, in completion order."""
        return list(self._finished)

    @property
    def in_progress(self) -> bool:
        return bool(self._pending)

    def _finalize(self, idx: int) -> list[ToolCall]:
        buf = self._pending.pop(idx, None)
        if buf is None:
            return []

        try:
            args = json.loads(buf.args or "{}")
        except ValueError as exc:
            self.errors.append(f"tool_call_json_parse_failed idx={idx} err={exc}")
            return []
        if not isinstance(args, dict):
            self.errors.append(
                f"tool_call_args_not_object idx={idx} type={type(args).__name__}"
            )
            return []

        call = ToolCall(id=buf.id or f"call_{idx}", name=buf.name.strip(), arguments=args)
        self._finished.append(call)
        return [call]
