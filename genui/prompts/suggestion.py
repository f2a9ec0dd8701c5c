"""Follow-up suggestion prompt builder."""

from __future__ import annotations

import json

from genui.catalog import ArtifactCatalog
from genui.llm.types import Message
from genui.schemas import SUGGESTIONS_SCHEMA
from genui.types import ConversationTurn, MessageRole

SUGGESTIONS_TOOL: dict = {
    "type": "function",
    "function": {
        "name": "generate_suggestions",
        "description": (
            "Generate suggestions for the user based on the available "
            "components and context."
        ),
        "parameters": SUGGESTIONS_SCHEMA,
    },
}


def build_suggestion_messages(
    catalog: ArtifactCatalog,
    history: list[ConversationTurn],
    count: int,
) -> list[Message]:
    """System turn, the last two user/assistant turns, then the request."""
    messages = [Message(role="system", content=_system_text(catalog, count))]

    recent = [
        t for t in history
        if MessageRole(t.role) in (MessageRole.USER, MessageRole.ASSISTANT)
    ][-2:]
    for turn in recent:
        text = turn.text()
        if text.strip():
            messages.append(Message(role=MessageRole(turn.role).value, content=text))

    messages.append(Message(role="user", content=_request_text(history, count)))
    return messages


def _current_component(history: list[ConversationTurn]) -> tuple[str, dict | None] | None:
    for turn in reversed(history):
        if turn.decision is not None and turn.decision.artifact_name:
            return turn.decision.artifact_name, turn.decision.parameters
    return None


def _system_text(catalog: ArtifactCatalog, count: int) -> str:
    return f"""Review the available components and conversation history to generate natural follow-up messages that a user might send.

{catalog.describe()}

Your task is to suggest {count} messages written exactly as if they came from the user. These suggestions should represent natural follow-up requests based on the available components and context.

Rules:
1. Write each suggestion as a complete message that could be sent by the user
2. Focus on practical requests that use the available components
3. Make suggestions contextually relevant to the conversation and previous actions
4. If a component is currently in use, suggest natural variations or new ways to use it
5. Write in a natural, conversational tone as if the user is typing
6. Avoid technical language or system-focused phrasing"""


def _request_text(history: list[ConversationTurn], count: int) -> str:
    current = _current_component(history)
    if current is not None:
        name, props = current
        context = f"Current component: {name}\nCurrent props: {json.dumps(props, indent=2)}"
    else:
        context = "No component currently in use."

    return f"""Generate {count} natural follow-up messages that a user might send. Each suggestion should be a complete message that could be sent directly to the system.

The suggestions should be written exactly as a user would type them, not as descriptions or commands, in a JSON structure matching this schema:
{json.dumps(SUGGESTIONS_SCHEMA)}

The suggestions should be written in the same language as the above conversation.

{context}"""
