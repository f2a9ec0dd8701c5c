"""
Decision stage -- should this turn show an artifact, and which one?

The model answers with three tagged spans::

    <reasoning>...</reasoning><decision>true|false</decision><component>Name</component>

When native function calling is enabled the same record is also offered as
the ``decide_component`` tool; a reply that uses the tool wins over the text
tags, which remain the fallback for providers that ignore tools.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import AsyncIterator

from genui.catalog import ArtifactCatalog
from genui.errors import ArtifactNotFoundError, InvalidDecisionError, ParseError
from genui.history import to_provider_turns
from genui.llm.client import LLMClient
from genui.llm.types import LLMReply, Message
from genui.orchestrator.hydration import HydrationStage
from genui.parsing import parse_and_validate
from genui.prompts.decision import (
    DECIDE_COMPONENT_TOOL,
    build_catalog_message,
    build_decision_prompt,
    build_no_component_prompt,
)
from genui.schemas import DECIDE_COMPONENT_SCHEMA
from genui.streaming import StreamingQueue, pump
from genui.types import ConversationTurn, Decision, SchemaVersion, new_decision

logger = logging.getLogger(__name__)

_TAGS = {
    name: re.compile(rf"<{name}>(.*?)</{name}>", re.DOTALL)
    for name in ("reasoning", "decision", "component")
}


@dataclass
class DecisionTags:
    reasoning: str = ""
    decision: bool | None = None
    component: str | None = None


def parse_decision_tags(text: str) -> DecisionTags:
    """Extract the tagged spans from a decision reply.  Missing spans stay unset."""
    spans: dict[str, str] = {}
    for name, pattern in _TAGS.items():
        match = pattern.search(text or "")
        if match:
            spans[name] = match.group(1).strip()

    flag = spans.get("decision", "").lower()
    return DecisionTags(
        reasoning=spans.get("reasoning", ""),
        decision={"true": True, "false": False}.get(flag),
        component=spans.get("component") or None,
    )


class DecisionStage:
    """
    Parameters
    ----------
    client : LLMClient
        Client used for the decision and no-artifact calls.
    hydration : HydrationStage
        Stage that receives the chosen artifact.
    native_decision_tool : bool
        Offer the ``decide_component`` function alongside the tag prompt.
    """

    def __init__(
        self,
        client: LLMClient,
        hydration: HydrationStage,
        *,
        native_decision_tool: bool = True,
    ) -> None:
        self._client = client
        self._hydration = hydration
        self.native_decision_tool = native_decision_tool

    async def decide(
        self,
        history: list[ConversationTurn],
        catalog: ArtifactCatalog,
        thread_id: str = "",
        *,
        stream: bool = False,
        schema_version: SchemaVersion | str = SchemaVersion.V1,
    ) -> Decision | StreamingQueue[Decision]:
        messages = [
            Message(role="system", content=build_decision_prompt()),
            *to_provider_turns(history),
            Message(role="user", content=build_catalog_message(catalog)),
        ]
        tools = [DECIDE_COMPONENT_TOOL] if self.native_decision_tool else None

        reply = await self._client.complete(messages, tools=tools, prompt_name="decision")
        tags = self._read_reply(reply)
        logger.info(
            "Decision: %s component=%s reasoning=%r",
            tags.decision,
            tags.component,
            tags.reasoning,
        )

        if tags.decision is False:
            return await self._no_artifact(
                history, catalog, tags.reasoning, thread_id, stream, schema_version
            )

        if tags.decision is True and tags.component:
            artifact = catalog.get(tags.component)
            if artifact is None:
                logger.warning("Model chose unknown component %s", tags.component)
                raise ArtifactNotFoundError(tags.component)
            return await self._hydration.hydrate(
                history,
                artifact,
                catalog=catalog,
                thread_id=thread_id,
                schema_version=schema_version,
                stream=stream,
            )

        raise InvalidDecisionError(reply.content)

    def _read_reply(self, reply: LLMReply) -> DecisionTags:
        call = reply.first_tool_call
        if call is None or call.name != DECIDE_COMPONENT_TOOL["function"]["name"]:
            return parse_decision_tags(reply.content)
        try:
            args = parse_and_validate(DECIDE_COMPONENT_SCHEMA, call.arguments)
        except ParseError as exc:
            raise InvalidDecisionError(reply.content or str(call.arguments)) from exc
        component = args["component"]
        return DecisionTags(
            reasoning=args["reasoning"].strip(),
            decision=args["decision"],
            component=component.strip() if component else None,
        )

    async def _no_artifact(
        self,
        history: list[ConversationTurn],
        catalog: ArtifactCatalog,
        reasoning: str,
        thread_id: str,
        stream: bool,
        schema_version: SchemaVersion | str,
    ) -> Decision | StreamingQueue[Decision]:
        messages = [
            Message(role="system", content=build_no_component_prompt(reasoning, catalog)),
            *to_provider_turns(history),
        ]

        def to_decision(reply: LLMReply) -> Decision:
            # Tool calls are ignored on this path; only text is surfaced.
            return new_decision(
                schema_version,
                message=reply.content,
                reasoning=reasoning,
                thread_id=thread_id,
            )

        if stream:
            replies = self._client.stream(messages, prompt_name="no-component")
            return pump(_growing(replies), to_decision)

        reply = await self._client.complete(messages, prompt_name="no-component")
        return to_decision(reply)


async def _growing(replies: StreamingQueue[LLMReply]) -> AsyncIterator[LLMReply]:
    """Snapshots whose text actually grew, plus the final one."""
    seen = None
    try:
        async for reply in replies:
            if reply.done or reply.content != seen:
                seen = reply.content
                yield reply
    finally:
        replies.cancel()
