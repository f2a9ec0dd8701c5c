"""Error taxonomy for the decision engine."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for all engine errors."""


class ArtifactNotFoundError(EngineError):
    """The model chose an artifact that is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Component {name} not found")
        self.name = name


class ParseError(EngineError):
    """
    Model output could not be parsed or failed schema validation.

    *raw* keeps the exact input that was rejected so prompt drift can be
    diagnosed later.  *cause* is the underlying decode/validation error.
    """

    def __init__(self, raw: Any, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to parse model response{detail}")
        self.raw = raw
        self.cause = cause


class InvalidDecisionError(EngineError):
    """The decision reply had missing or contradictory tags."""

    def __init__(self, raw: str = "") -> None:
        super().__init__("Invalid decision")
        self.raw = raw


class ToolExecutionError(EngineError):
    """Raised by the tool-execution collaborator; never caught by the core."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Tool {tool_name!r} failed: {message}")
        self.tool_name = tool_name


class StreamError(EngineError):
    """Normalized failure delivered through a StreamingQueue."""


class StreamingNotSupportedError(EngineError):
    """The requested operation has no streaming mode."""
