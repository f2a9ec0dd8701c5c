"""Thread naming prompt builder."""

from __future__ import annotations

from genui.history import to_provider_turns
from genui.llm.types import Message
from genui.types import ConversationTurn

THREAD_NAME_PROMPT = """You are given the conversation so far between a user and an AI assistant.
Write a short title that summarizes what the conversation is about.
The title must be at most {max_words} words, in plain text, with no quotes and no trailing punctuation.
Respond with the title only."""


def build_thread_name_messages(
    history: list[ConversationTurn],
    max_words: int,
) -> list[Message]:
    return [
        Message(role="system", content=THREAD_NAME_PROMPT.format(max_words=max_words)),
        *to_provider_turns(history),
        Message(role="user", content="Write the title for this conversation."),
    ]
