"""genui -- generative-UI decision engine."""

from genui.catalog import ArtifactCatalog
from genui.config import EngineConfig, load_config
from genui.errors import (
    ArtifactNotFoundError,
    EngineError,
    InvalidDecisionError,
    ParseError,
    StreamError,
    StreamingNotSupportedError,
    ToolExecutionError,
)
from genui.orchestrator import Engine
from genui.streaming import StreamingQueue, pump
from genui.types import (
    NO_TOOL_RESPONSE,
    ArtifactDescriptor,
    CapabilityDescriptor,
    CapabilityParameter,
    ConversationTurn,
    Decision,
    DecisionKind,
    DecisionV1,
    MessageRole,
    SchemaVersion,
    SuggestedAction,
    Suggestion,
    SuggestionSet,
    ToolCallRequest,
    ToolParameter,
)

__version__ = "0.1.0"

__all__ = [
    "NO_TOOL_RESPONSE",
    "ArtifactCatalog",
    "ArtifactDescriptor",
    "ArtifactNotFoundError",
    "CapabilityDescriptor",
    "CapabilityParameter",
    "ConversationTurn",
    "Decision",
    "DecisionKind",
    "DecisionV1",
    "Engine",
    "EngineConfig",
    "EngineError",
    "InvalidDecisionError",
    "MessageRole",
    "ParseError",
    "SchemaVersion",
    "StreamError",
    "StreamingNotSupportedError",
    "StreamingQueue",
    "SuggestedAction",
    "Suggestion",
    "SuggestionSet",
    "ToolCallRequest",
    "ToolExecutionError",
    "ToolParameter",
    "load_config",
    "pump",
]
