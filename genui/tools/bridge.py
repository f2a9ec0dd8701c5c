"""
Bridge between artifact capabilities and model function calling.

Capability descriptors become OpenAI function definitions on the way out;
tool calls issued by the model become :class:`ToolCallRequest` objects on
the way back.
"""

from __future__ import annotations

import json

from genui.llm.types import ToolCall
from genui.types import (
    CapabilityDescriptor,
    CapabilityParameter,
    ParameterType,
    ToolCallRequest,
    ToolParameter,
)


def parameter_schema(parameter: CapabilityParameter) -> dict:
    """JSON schema for one capability parameter."""
    kind = ParameterType(parameter.type)
    if kind is ParameterType.ENUM:
        schema: dict = {"type": "string", "enum": list(parameter.enum_values)}
    elif kind is ParameterType.ARRAY:
        schema = {"type": "array", "items": {"type": parameter.items_type or "string"}}
    elif kind is ParameterType.OBJECT:
        schema = {"type": "object", **parameter.schema}
    else:
        schema = {"type": kind.value}
    if parameter.description:
        schema["description"] = parameter.description
    return schema


def capability_schema(capability: CapabilityDescriptor) -> dict:
    """The ``parameters`` object schema for a capability."""
    return {
        "type": "object",
        "properties": {p.name: parameter_schema(p) for p in capability.parameters},
        "required": [p.name for p in capability.parameters if p.required],
        "additionalProperties": False,
    }


def to_callable_definitions(capabilities: list[CapabilityDescriptor] | tuple) -> list[dict]:
    """Map capability descriptors to provider function definitions."""
    return [
        {
            "type": "function",
            "function": {
                "name": cap.name,
                "description": cap.description,
                "parameters": capability_schema(cap),
            },
        }
        for cap in capabilities
    ]


def to_tool_call_request(tool_call: ToolCall) -> ToolCallRequest:
    """Map an assembled model tool call back to a typed request."""
    return ToolCallRequest(
        tool_name=tool_call.name,
        tool_call_id=tool_call.id,
        parameters=[ToolParameter(name=k, value=v) for k, v in tool_call.arguments.items()],
    )


def tool_call_to_wire(request: ToolCallRequest | None, call_id: str | None) -> list[dict] | None:
    """OpenAI ``tool_calls`` array for *request*, or ``None`` without one."""
    if request is None:
        return None
    return [
        {
            "id": call_id or "",
            "type": "function",
            "function": {
                "name": request.tool_name,
                "arguments": json.dumps(request.arguments()),
            },
        }
    ]
