"""Capability registry -- validates and executes model-issued tool calls."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

import jsonschema

from genui.errors import ToolExecutionError
from genui.tools.bridge import capability_schema
from genui.types import CapabilityDescriptor, JsonValue, ToolCallRequest

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[JsonValue]]


class CapabilityExecutor(ABC):
    """Executes a model-issued tool call and returns the tool response body."""

    @abstractmethod
    async def execute(self, request: ToolCallRequest) -> JsonValue: ...


class CapabilityRegistry(CapabilityExecutor):
    def __init__(self) -> None:
        self._entries: dict[str, tuple[CapabilityDescriptor, Handler]] = {}

    def register(
        self,
        capability: CapabilityDescriptor,
        handler: Handler,
        *,
        overwrite: bool = False,
    ) -> None:
        if capability.name in self._entries and not overwrite:
            raise ValueError(f"Capability already registered: {capability.name}")
        self._entries[capability.name] = (capability, handler)

    def get(self, name: str) -> CapabilityDescriptor | None:
        entry = self._entries.get(name)
        return entry[0] if entry else None

    def list(self) -> list[CapabilityDescriptor]:
        return sorted((c for c, _ in self._entries.values()), key=lambda c: c.name)

    @staticmethod
    def validate(capability: CapabilityDescriptor, arguments: dict) -> str | None:
        """Return an error message if *arguments* do not match the capability."""
        try:
            jsonschema.validate(instance=arguments, schema=capability_schema(capability))
        except jsonschema.ValidationError as e:
            return str(e.message)
        return None

    async def execute(self, request: ToolCallRequest) -> JsonValue:
        entry = self._entries.get(request.tool_name)
        if entry is None:
            raise ToolExecutionError(request.tool_name, "unknown tool")
        capability, handler = entry

        arguments = request.arguments()
        error = self.validate(capability, arguments)
        if error is not None:
            raise ToolExecutionError(request.tool_name, f"invalid arguments: {error}")

        logger.info("Executing capability %s (call %s)", request.tool_name, request.tool_call_id)
        try:
            return await handler(**arguments)
        except ToolExecutionError:
            raise
        except Exception as e:
            raise ToolExecutionError(request.tool_name, str(e)) from e
