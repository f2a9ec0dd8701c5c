"""JSON schemas for model replies, selected by schema version."""

from __future__ import annotations

import copy

from genui.types import SchemaVersion

MAX_SUGGESTED_ACTIONS = 3
MAX_SUGGESTIONS = 3

_BASE_DECISION_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "componentName": {
            "type": "string",
            "description": "The name of the chosen component",
        },
        "props": {
            "type": "object",
            "description": "The props that should be used in the chosen component",
        },
        "message": {
            "type": "string",
            "description": "The message to be displayed to the user alongside the chosen component",
        },
        "reasoning": {
            "type": "string",
            "description": "The reasoning behind the decision",
        },
        "componentState": {
            "type": ["object", "null"],
            "description": "Any additional state the component should start with",
        },
    },
    "required": ["componentName", "props", "message", "reasoning"],
}

DECISION_SCHEMA_V2: dict = _BASE_DECISION_SCHEMA

DECISION_SCHEMA_V1: dict = copy.deepcopy(_BASE_DECISION_SCHEMA)
DECISION_SCHEMA_V1["properties"]["suggestedActions"] = {
    "type": "array",
    "maxItems": MAX_SUGGESTED_ACTIONS,
    "description": "Follow-up actions the user can take next",
    "items": {
        "type": "object",
        "properties": {
            "label": {"type": "string", "description": "Button text"},
            "actionText": {
                "type": "string",
                "description": "The message sent on the user's behalf",
            },
        },
        "required": ["label", "actionText"],
    },
}

SUGGESTIONS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "reflection": {
            "type": "string",
            "description": "A short reflection on what the user might want next",
        },
        "suggestions": {
            "type": "array",
            "maxItems": MAX_SUGGESTIONS,
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "detailedSuggestion": {"type": "string"},
                },
                "required": ["title", "detailedSuggestion"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["reflection", "suggestions"],
    "additionalProperties": False,
}

DECIDE_COMPONENT_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "reasoning": {"type": "string"},
        "decision": {"type": "boolean"},
        "component": {"type": ["string", "null"]},
    },
    "required": ["reasoning", "decision", "component"],
    "additionalProperties": False,
}


def decision_schema(version: SchemaVersion | str) -> dict:
    """The hydration reply schema for *version*."""
    if SchemaVersion(version) is SchemaVersion.V1:
        return DECISION_SCHEMA_V1
    return DECISION_SCHEMA_V2
