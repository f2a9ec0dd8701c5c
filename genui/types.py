"""Data model shared by every stage of the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Union

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]

# Opaque structured value returned by the tool-execution collaborator.
ToolResponseBody = JsonValue


class _NoToolResponse:
    """Marks a hydration call with no tool response; ``None`` is a valid response."""

    def __repr__(self) -> str:
        return "NO_TOOL_RESPONSE"

    def __bool__(self) -> bool:
        return False


NO_TOOL_RESPONSE: Any = _NoToolResponse()


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"
    HYDRA = "hydra"  # deprecated alias of ASSISTANT


class SchemaVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


class DecisionKind(str, Enum):
    FINAL = "final"
    PENDING = "pending"
    NO_ARTIFACT = "no_artifact"


class ParameterType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"


# ---------------------------------------------------------------------------
# Catalog records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CapabilityParameter:
    name: str
    type: ParameterType | str
    description: str = ""
    required: bool = False
    enum_values: tuple[str, ...] = ()
    items_type: str = "string"
    schema: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CapabilityDescriptor:
    """A callable, schema-described function an artifact may invoke."""

    name: str
    description: str
    parameters: tuple[CapabilityParameter, ...] = ()


@dataclass(frozen=True)
class ArtifactDescriptor:
    """A UI artifact the engine may choose, with its declared props."""

    name: str
    description: str
    props: dict = field(default_factory=dict)
    capabilities: tuple[CapabilityDescriptor, ...] = ()


# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------


@dataclass
class ToolParameter:
    name: str
    value: JsonValue


@dataclass
class ToolCallRequest:
    tool_name: str
    parameters: list[ToolParameter] = field(default_factory=list)
    tool_call_id: str | None = None

    def arguments(self) -> dict[str, JsonValue]:
        return {p.name: p.value for p in self.parameters}

    def to_dict(self) -> dict:
        return {
            "toolName": self.tool_name,
            "parameters": [
                {"parameterName": p.name, "parameterValue": p.value}
                for p in self.parameters
            ],
        }


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


@dataclass
class SuggestedAction:
    label: str
    action_text: str

    def to_dict(self) -> dict:
        return {"label": self.label, "actionText": self.action_text}


@dataclass
class Decision:
    """
    The engine's typed output.

    Exactly one of three shapes:

    * *final*: ``artifact_name`` and ``parameters`` set, no tool call
    * *pending*: ``tool_call_request`` set, ``parameters`` is ``None``
    * *no-artifact*: ``artifact_name`` and ``parameters`` are ``None``

    This base record is the v2 shape; :class:`DecisionV1` adds the v1-only
    ``suggested_actions`` field.
    """

    schema_version: ClassVar[SchemaVersion] = SchemaVersion.V2

    artifact_name: str | None = None
    parameters: dict[str, JsonValue] | None = None
    message: str = ""
    reasoning: str = ""
    component_state: dict[str, JsonValue] | None = None
    tool_call_request: ToolCallRequest | None = None
    thread_id: str = ""

    @property
    def kind(self) -> DecisionKind:
        if self.tool_call_request is not None:
            return DecisionKind.PENDING
        if self.artifact_name is None:
            return DecisionKind.NO_ARTIFACT
        return DecisionKind.FINAL

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "componentName": self.artifact_name,
            "props": self.parameters,
            "message": self.message,
            "reasoning": self.reasoning,
            "componentState": self.component_state,
            "threadId": self.thread_id,
        }
        if self.tool_call_request is not None:
            d["toolCallRequest"] = self.tool_call_request.to_dict()
        return d


@dataclass
class DecisionV1(Decision):
    schema_version: ClassVar[SchemaVersion] = SchemaVersion.V1

    suggested_actions: list[SuggestedAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["suggestedActions"] = [a.to_dict() for a in self.suggested_actions]
        return d


def new_decision(version: SchemaVersion | str, **kwargs: Any) -> Decision:
    """Construct the Decision variant for *version*."""
    if SchemaVersion(version) is SchemaVersion.V1:
        return DecisionV1(**kwargs)
    kwargs.pop("suggested_actions", None)
    return Decision(**kwargs)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


@dataclass
class ConversationTurn:
    """A persisted thread message, as supplied by the storage layer."""

    role: MessageRole | str
    content: str | list[dict] = ""
    tool_call_id: str | None = None
    decision: Decision | None = None
    id: str = ""
    component_state: dict[str, JsonValue] | None = None
    additional_context: str | None = None
    action_type: str | None = None

    def text(self) -> str:
        """Concatenate the text parts of the content."""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.get("text", "") for p in self.content if isinstance(p, dict))


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


@dataclass
class Suggestion:
    title: str
    detailed_suggestion: str

    def to_dict(self) -> dict:
        return {"title": self.title, "detailedSuggestion": self.detailed_suggestion}


@dataclass
class SuggestionSet:
    suggestions: list[Suggestion]
    message: str
    thread_id: str

    def to_dict(self) -> dict:
        return {
            "suggestions": [s.to_dict() for s in self.suggestions],
            "message": self.message,
            "threadId": self.thread_id,
        }
