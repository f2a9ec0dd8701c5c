"""
Conversation-history adapter.

Converts persisted :class:`~genui.types.ConversationTurn` objects into
provider-ready :class:`~genui.llm.types.Message` turns.

Chat-completion providers require every assistant tool call to be answered by
a tool turn with the same id before the conversation continues.  Stored
threads do not always satisfy that, so the adapter reconciles:

  - a tool turn without a call id becomes a user turn;
  - an assistant turn whose call id was never answered carries the call as
    serialized text instead of a native ``tool_calls`` array.

The conversion is order-preserving and has no side effects besides warnings.
"""

from __future__ import annotations

import json
import logging

from genui.llm.types import Message, ToolCall
from genui.tools.bridge import tool_call_to_wire
from genui.types import ConversationTurn, MessageRole

logger = logging.getLogger(__name__)

_ASSISTANT_ROLES = frozenset({MessageRole.ASSISTANT, MessageRole.HYDRA})


def _role(turn: ConversationTurn) -> MessageRole:
    return MessageRole(turn.role)


def _parts(content: str | list[dict]) -> list[dict]:
    if isinstance(content, str):
        return [{"type": "text", "text": content}] if content else []
    return list(content)


def answered_call_ids(turns: list[ConversationTurn]) -> set[str]:
    """Ids of tool calls that have a matching tool-role turn."""
    return {
        t.tool_call_id
        for t in turns
        if _role(t) is MessageRole.TOOL and t.tool_call_id
    }


def to_provider_turns(turns: list[ConversationTurn]) -> list[Message]:
    """Convert a stored conversation into provider chat turns."""
    answered = answered_call_ids(turns)
    out: list[Message] = []
    for turn in turns:
        role = _role(turn)
        if role is MessageRole.TOOL:
            out.append(_tool_turn(turn))
        elif role in _ASSISTANT_ROLES:
            out.append(_assistant_turn(turn, answered))
        else:
            out.append(_context_turn(turn))
    return out


def _tool_turn(turn: ConversationTurn) -> Message:
    if turn.tool_call_id:
        return Message(role="tool", content=_parts(turn.content), tool_call_id=turn.tool_call_id)
    logger.warning(
        "no tool id in tool message %s, converting to user message", turn.id
    )
    return Message(role="user", content=_parts(turn.content))


def _assistant_turn(turn: ConversationTurn, answered: set[str]) -> Message:
    request = turn.decision.tool_call_request if turn.decision else None

    if turn.tool_call_id and turn.tool_call_id not in answered:
        logger.warning(
            "tool call %s in message %s was never answered, sending it as text",
            turn.tool_call_id,
            turn.id,
        )
        encoded = json.dumps(tool_call_to_wire(request, turn.tool_call_id))
        return Message(role="assistant", content=[{"type": "text", "text": encoded}])

    tool_calls = None
    if request is not None:
        tool_calls = [
            ToolCall(
                id=turn.tool_call_id or "",
                name=request.tool_name,
                arguments=request.arguments(),
            )
        ]
    return Message(
        role="assistant",
        content=_parts(turn.content),
        tool_calls=tool_calls,
    )


def _context_turn(turn: ConversationTurn) -> Message:
    content = _parts(turn.content)
    extra = additional_context(turn)
    if extra:
        content.append({"type": "text", "text": extra})
    return Message(role=_role(turn).value, content=content)


def additional_context(turn: ConversationTurn) -> str:
    """Context annotation appended to user/system turns ('' if none)."""
    text = ""
    if turn.decision is not None and not turn.action_type:
        text += f"\n<Component>{json.dumps(turn.decision.to_dict())}</Component>"
    if turn.component_state and not turn.action_type:
        text += f"\n<ComponentState>{json.dumps(turn.component_state)}</ComponentState>"
    if turn.additional_context:
        text += (
            "<System> The following is additional context provided by the system "
            "that you can use when responding to the user: "
            f"{turn.additional_context} </System>"
        )
    return text
