"""
Engine -- the facade that ties the stages together.

The engine:
1. Normalizes the catalog and schema version
2. Runs the decision stage, which routes to hydration or a plain reply
3. Re-enters hydration with tool responses supplied by the caller
4. Generates follow-up suggestions on request
5. Optionally drives a whole turn, executing one pending tool call
6. Names a thread from its history
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, Mapping, Union

from genui.catalog import ArtifactCatalog
from genui.config import EngineConfig, load_config
from genui.llm.client import LLMClient
from genui.llm.providers.openai_compat import OpenAICompatProvider
from genui.orchestrator.decision import DecisionStage
from genui.orchestrator.hydration import HydrationStage
from genui.orchestrator.suggestions import SuggestionEngine
from genui.prompts.thread_name import build_thread_name_messages
from genui.schemas import MAX_SUGGESTIONS
from genui.streaming import StreamingQueue
from genui.tools.registry import CapabilityExecutor
from genui.types import (
    NO_TOOL_RESPONSE,
    ArtifactDescriptor,
    ConversationTurn,
    Decision,
    DecisionKind,
    JsonValue,
    MessageRole,
    SchemaVersion,
    SuggestionSet,
)

logger = logging.getLogger(__name__)

CatalogLike = Union[ArtifactCatalog, Mapping[str, ArtifactDescriptor], Iterable[ArtifactDescriptor]]

DEFAULT_THREAD_NAME = "New conversation"
THREAD_NAME_MAX_WORDS = 6


class Engine:
    """
    Generative-UI decision engine.

    Parameters
    ----------
    client : LLMClient
        Client with at least one registered provider.
    schema_version : SchemaVersion | str
        Decision schema used for hydration replies (``"v1"`` or ``"v2"``).
    native_decision_tool : bool
        Offer ``decide_component`` as a function in the decision call.
    suggestion_count : int
        Default number of suggestions requested.
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        schema_version: SchemaVersion | str = SchemaVersion.V1,
        native_decision_tool: bool = True,
        suggestion_count: int = MAX_SUGGESTIONS,
    ) -> None:
        self.client = client
        self.schema_version = SchemaVersion(schema_version)
        self.suggestion_count = suggestion_count
        self.hydration = HydrationStage(client)
        self.decision = DecisionStage(
            client, self.hydration, native_decision_tool=native_decision_tool
        )
        self.suggestions = SuggestionEngine(client)

    @classmethod
    def from_config(cls, cfg: EngineConfig | None = None, **provider_kwargs) -> Engine:
        """
        Build an engine talking to the OpenAI-compatible endpoint in *cfg*.

        Extra keyword arguments go to ``OpenAICompatProvider`` (e.g. a test
        ``transport``).
        """
        if cfg is None:
            cfg = load_config()
        provider = OpenAICompatProvider(
            url=cfg.llm.api_base,
            model=cfg.llm.model,
            api_key=cfg.llm.api_key or "",
            timeout=cfg.llm.timeout_seconds,
            max_retries=cfg.llm.max_retries,
            **provider_kwargs,
        )
        client = LLMClient(
            temperature=cfg.llm.temperature,
            timeout=cfg.llm.timeout_seconds,
        )
        client.register_provider(cfg.llm.name, provider)
        return cls(
            client,
            schema_version=cfg.engine.schema_version,
            native_decision_tool=cfg.engine.native_decision_tool,
            suggestion_count=cfg.engine.suggestion_count,
        )

    async def generate_component(
        self,
        history: list[ConversationTurn],
        catalog: CatalogLike,
        thread_id: str = "",
        *,
        stream: bool = False,
    ) -> Decision | StreamingQueue[Decision]:
        return await self.decision.decide(
            history,
            ArtifactCatalog.coerce(catalog),
            thread_id,
            stream=stream,
            schema_version=self.schema_version,
        )

    async def hydrate_component_with_data(
        self,
        history: list[ConversationTurn],
        artifact: ArtifactDescriptor,
        tool_response: JsonValue = NO_TOOL_RESPONSE,
        thread_id: str = "",
        *,
        catalog: CatalogLike | None = None,
        stream: bool = False,
    ) -> Decision | StreamingQueue[Decision]:
        return await self.hydration.hydrate(
            history,
            artifact,
            tool_response,
            ArtifactCatalog.coerce(catalog) if catalog is not None else None,
            thread_id,
            schema_version=self.schema_version,
            stream=stream,
        )

    async def generate_suggestions(
        self,
        history: list[ConversationTurn],
        catalog: CatalogLike,
        count: int | None = None,
        thread_id: str = "",
        *,
        stream: bool = False,
    ) -> SuggestionSet:
        return await self.suggestions.generate(
            history,
            ArtifactCatalog.coerce(catalog),
            self.suggestion_count if count is None else count,
            thread_id,
            stream=stream,
        )

    async def generate_thread_name(
        self,
        history: list[ConversationTurn],
        *,
        max_words: int = THREAD_NAME_MAX_WORDS,
    ) -> str:
        """
        Summarize *history* into a short thread title.

        Surrounding quotes and trailing punctuation are stripped.  Returns
        ``DEFAULT_THREAD_NAME`` when the model answers with nothing usable.
        """
        reply = await self.client.complete(
            build_thread_name_messages(history, max_words), prompt_name="thread-name"
        )
        lines = reply.content.strip().splitlines()
        name = lines[0].strip().strip("\"'`").rstrip(".!?:;").strip() if lines else ""
        if not name:
            logger.warning("Model returned no thread name")
            return DEFAULT_THREAD_NAME
        return " ".join(name.split()[:max_words])

    async def run_turn(
        self,
        history: list[ConversationTurn],
        catalog: CatalogLike,
        thread_id: str,
        executor: CapabilityExecutor,
    ) -> Decision:
        """
        Decide, and if the model asks for data, execute the call and hydrate
        again with the result.

        Errors from *executor* propagate unchanged.
        """
        catalog = ArtifactCatalog.coerce(catalog)
        decision = await self.generate_component(history, catalog, thread_id)
        if decision.kind is not DecisionKind.PENDING:
            return decision

        request = decision.tool_call_request
        artifact = catalog[decision.artifact_name]
        logger.info("Executing %s for %s", request.tool_name, artifact.name)
        response = await executor.execute(request)

        followup = [
            *history,
            ConversationTurn(
                role=MessageRole.ASSISTANT,
                content=decision.message,
                tool_call_id=request.tool_call_id,
                decision=decision,
            ),
            ConversationTurn(
                role=MessageRole.TOOL,
                content=json.dumps(response),
                tool_call_id=request.tool_call_id,
            ),
        ]
        return await self.hydrate_component_with_data(
            followup, artifact, response, thread_id, catalog=catalog
        )
