"""Capability bridge and executor registry."""

from genui.tools.bridge import (
    capability_schema,
    to_callable_definitions,
    to_tool_call_request,
    tool_call_to_wire,
)
from genui.tools.registry import CapabilityExecutor, CapabilityRegistry

__all__ = [
    "CapabilityExecutor",
    "CapabilityRegistry",
    "capability_schema",
    "to_callable_definitions",
    "to_tool_call_request",
    "tool_call_to_wire",
]
