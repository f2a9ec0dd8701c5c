"""
Hydration stage -- fills in the props of a chosen artifact.

One call is one model round trip:

  - without a tool response, the artifact's capabilities are offered and the
    model may answer with a tool call, giving a *pending* decision;
  - with a tool response, no capabilities are offered and the reply must be
    the final decision object.

The caller executes a pending tool call and calls ``hydrate`` again with the
result.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from genui.catalog import ArtifactCatalog
from genui.history import to_provider_turns
from genui.llm.client import LLMClient
from genui.llm.types import LLMReply, Message, ToolCall
from genui.parsing import parse_and_validate, parse_partial
from genui.prompts.hydration import build_component_message, build_hydration_prompt
from genui.schemas import decision_schema
from genui.streaming import StreamingQueue, pump
from genui.tools.bridge import to_callable_definitions, to_tool_call_request
from genui.types import (
    NO_TOOL_RESPONSE,
    ArtifactDescriptor,
    ConversationTurn,
    Decision,
    JsonValue,
    SchemaVersion,
    SuggestedAction,
    new_decision,
)

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Fetching additional data"

_JSON_MODE = {"type": "json_object"}


class HydrationStage:
    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def hydrate(
        self,
        history: list[ConversationTurn],
        artifact: ArtifactDescriptor,
        tool_response: JsonValue = NO_TOOL_RESPONSE,
        catalog: ArtifactCatalog | None = None,
        thread_id: str = "",
        *,
        schema_version: SchemaVersion | str = SchemaVersion.V1,
        stream: bool = False,
    ) -> Decision | StreamingQueue[Decision]:
        """
        Ask the model for *artifact*'s props.

        A *tool_response* of ``None`` is a real (null) response; leave it out
        to let the model call the artifact's capabilities.

        Returns a pending or final ``Decision``, or with ``stream=True`` a
        queue of decision snapshots whose last value is the pending or final
        decision.  Raises ``ParseError`` if the reply fails validation (with
        ``stream=True`` the queue fails instead).
        """
        version = SchemaVersion(schema_version)
        if catalog is None:
            catalog = ArtifactCatalog([artifact])

        messages = [
            Message(
                role="system",
                content=build_hydration_prompt(catalog, version, tool_response),
            ),
            *to_provider_turns(history),
            Message(role="user", content=build_component_message(artifact, tool_response)),
        ]

        has_response = tool_response is not NO_TOOL_RESPONSE
        tools = None
        if not has_response and artifact.capabilities:
            tools = to_callable_definitions(artifact.capabilities)

        logger.info(
            "Hydrating %s (version=%s tools=%d tool_response=%s)",
            artifact.name,
            version.value,
            len(tools or ()),
            has_response,
        )

        if stream:
            replies = self._client.stream(
                messages, tools=tools, response_format=_JSON_MODE, prompt_name="hydration"
            )
            return pump(self._snapshots(replies, artifact, version, thread_id, not has_response))

        reply = await self._client.complete(
            messages, tools=tools, response_format=_JSON_MODE, prompt_name="hydration"
        )
        return self._finalize(reply, artifact, version, thread_id, not has_response)

    # ------------------------------------------------------------------

    def _finalize(
        self,
        reply: LLMReply,
        artifact: ArtifactDescriptor,
        version: SchemaVersion,
        thread_id: str,
        allow_tools: bool = True,
    ) -> Decision:
        call = reply.first_tool_call
        if call is not None:
            if allow_tools:
                return _pending(call, artifact, version, thread_id)
            logger.warning("Ignoring tool call %s after a tool response", call.name)

        data = parse_and_validate(decision_schema(version), reply.content)
        return new_decision(
            version,
            artifact_name=data["componentName"],
            parameters=data["props"],
            message=data["message"],
            reasoning=data["reasoning"],
            component_state=data.get("componentState"),
            suggested_actions=_suggested_actions(data.get("suggestedActions")),
            thread_id=thread_id,
        )

    async def _snapshots(
        self,
        replies: StreamingQueue[LLMReply],
        artifact: ArtifactDescriptor,
        version: SchemaVersion,
        thread_id: str,
        allow_tools: bool = True,
    ) -> AsyncIterator[Decision]:
        last: LLMReply | None = None
        try:
            async for reply in replies:
                last = reply
                if reply.done:
                    break
                if reply.tool_calls and allow_tools:
                    continue
                partial = parse_partial(reply.content)
                if isinstance(partial, dict):
                    yield _snapshot(partial, artifact, version, thread_id)
        finally:
            replies.cancel()

        if last is None:
            last = LLMReply()
        yield self._finalize(last, artifact, version, thread_id, allow_tools)


def _pending(
    call: ToolCall,
    artifact: ArtifactDescriptor,
    version: SchemaVersion,
    thread_id: str,
) -> Decision:
    logger.info("Model requested tool %s for %s", call.name, artifact.name)
    return new_decision(
        version,
        artifact_name=artifact.name,
        parameters=None,
        message=PENDING_MESSAGE,
        tool_call_request=to_tool_call_request(call),
        thread_id=thread_id,
    )


def _suggested_actions(raw: Any) -> list[SuggestedAction]:
    if not isinstance(raw, list):
        return []
    return [
        SuggestedAction(label=a["label"], action_text=a["actionText"])
        for a in raw
        if isinstance(a, dict)
        and isinstance(a.get("label"), str)
        and isinstance(a.get("actionText"), str)
    ]


def _snapshot(
    partial: dict,
    artifact: ArtifactDescriptor,
    version: SchemaVersion,
    thread_id: str,
) -> Decision:
    # Unvalidated; fields only appear once they have a usable type.
    name = partial.get("componentName")
    props = partial.get("props")
    state = partial.get("componentState")
    return new_decision(
        version,
        artifact_name=name if isinstance(name, str) and name else artifact.name,
        parameters=props if isinstance(props, dict) else {},
        message=_str(partial.get("message")),
        reasoning=_str(partial.get("reasoning")),
        component_state=state if isinstance(state, dict) else None,
        suggested_actions=_suggested_actions(partial.get("suggestedActions")),
        thread_id=thread_id,
    )


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""
