"""
Suggestion engine -- proposes follow-up user messages.

Unlike the decision path this flow never raises to its caller: any failure
becomes an empty :class:`~genui.types.SuggestionSet` with an explanatory
message, so a broken suggestion call cannot break the turn it accompanies.
"""

from __future__ import annotations

import logging

from genui.catalog import ArtifactCatalog
from genui.errors import ParseError, StreamingNotSupportedError
from genui.llm.client import LLMClient
from genui.parsing import parse_and_validate
from genui.prompts.suggestion import SUGGESTIONS_TOOL, build_suggestion_messages
from genui.schemas import MAX_SUGGESTIONS, SUGGESTIONS_SCHEMA
from genui.types import ConversationTurn, Suggestion, SuggestionSet

logger = logging.getLogger(__name__)

NO_SUGGESTIONS_MESSAGE = "No suggestions could be generated at this time."
INVALID_FORMAT_MESSAGE = "Invalid suggestion format received."
FAILED_MESSAGE = "Failed to process suggestions."

_FORCE_TOOL = {"type": "function", "function": {"name": SUGGESTIONS_TOOL["function"]["name"]}}


class SuggestionEngine:
    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def generate(
        self,
        history: list[ConversationTurn],
        catalog: ArtifactCatalog,
        count: int = MAX_SUGGESTIONS,
        thread_id: str = "",
        *,
        stream: bool = False,
    ) -> SuggestionSet:
        if stream:
            raise StreamingNotSupportedError("Streaming is not supported yet")

        count = min(count, MAX_SUGGESTIONS)
        if count <= 0:
            return _empty(NO_SUGGESTIONS_MESSAGE, thread_id)
        try:
            return await self._generate(history, catalog, count, thread_id)
        except ParseError as exc:
            logger.warning("Invalid suggestion reply: %s (raw=%r)", exc, exc.raw)
            return _empty(INVALID_FORMAT_MESSAGE, thread_id)
        except Exception:
            logger.exception("Suggestion generation failed")
            return _empty(FAILED_MESSAGE, thread_id)

    async def _generate(
        self,
        history: list[ConversationTurn],
        catalog: ArtifactCatalog,
        count: int,
        thread_id: str,
    ) -> SuggestionSet:
        reply = await self._client.complete(
            build_suggestion_messages(catalog, history, count),
            tools=[SUGGESTIONS_TOOL],
            tool_choice=_FORCE_TOOL,
            prompt_name="suggestions",
        )

        call = reply.first_tool_call
        if call is not None:
            raw = call.arguments
        elif reply.content.strip():
            raw = reply.content
        else:
            logger.warning("Empty suggestion reply")
            return _empty(NO_SUGGESTIONS_MESSAGE, thread_id)

        data = parse_and_validate(SUGGESTIONS_SCHEMA, raw)
        suggestions = [
            Suggestion(title=s["title"], detailed_suggestion=s["detailedSuggestion"])
            for s in data["suggestions"][:count]
        ]
        return SuggestionSet(
            suggestions=suggestions,
            message=data["reflection"],
            thread_id=thread_id,
        )


def _empty(message: str, thread_id: str) -> SuggestionSet:
    return SuggestionSet(suggestions=[], message=message, thread_id=thread_id)
