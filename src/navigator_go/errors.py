"""Error taxonomy for definition lookups.

Every failure inside the lookup pipeline is raised as a :class:`NavigatorError`
subclass and converted at the navigator boundary into either a warning
notification or a logged no-op. None of them escape to the host editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


class ErrorCode:
    """Machine-readable identifiers attached to navigator errors."""

    # Preconditions
    NO_EDITOR = "no_editor"
    MULTIPLE_CURSORS = "multiple_cursors"
    NOT_CONFIGURED = "not_configured"

    # Tool discovery
    TOOL_UNAVAILABLE = "tool_unavailable"

    # Process execution
    NONZERO_EXIT = "nonzero_exit"
    TIMEOUT = "timeout"
    EXECUTOR_FAILED = "executor_failed"

    # Tool output
    MALFORMED_OUTPUT = "malformed_output"

    # Target resolution
    INVALID_PATH = "invalid_path"
    INVALID_DIRECTORY = "invalid_directory"
    NO_SOURCE_FILE = "no_source_file"

    # Lifecycle
    CANCELLED = "cancelled"


@dataclass
class NavigatorError(Exception):
    """Base class for every error raised inside the lookup pipeline.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable summary, used as the notification detail.
        details: Extra structured context (paths, exit codes, raw output).
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    # Whether the navigator surfaces this error as a warning notification.
    user_visible: ClassVar[bool] = False

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class PreconditionError(NavigatorError):
    """The request cannot start: no editor, several cursors, or no configuration."""

    error_code: str = field(default=ErrorCode.NO_EDITOR)
    message: str = field(default="no active source editor")
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def user_visible(self) -> bool:  # type: ignore[override]
        # Missing editors and configuration stay silent; several cursors do not.
        return self.error_code == ErrorCode.MULTIPLE_CURSORS


@dataclass
class ToolUnavailableError(NavigatorError):
    """The definition tool could not be located (an install may be pending)."""

    error_code: str = field(default=ErrorCode.TOOL_UNAVAILABLE)
    message: str = field(default="definition tool is not installed")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ExecutionError(NavigatorError):
    """The tool process failed, timed out, or exited with a nonzero status."""

    error_code: str = field(default=ErrorCode.EXECUTOR_FAILED)
    message: str = field(default="definition tool failed")
    details: dict[str, Any] = field(default_factory=dict)
    exitcode: int | None = field(default=None)
    stderr: str = field(default="")


@dataclass
class MalformedOutputError(NavigatorError):
    """The tool answered with output that does not carry a file path."""

    error_code: str = field(default=ErrorCode.MALFORMED_OUTPUT)
    message: str = field(default="returned malformed output")
    details: dict[str, Any] = field(default_factory=dict)
    raw: str | None = field(default=None)

    user_visible: ClassVar[bool] = True


@dataclass
class InvalidTargetError(NavigatorError):
    """The resolved path cannot be visited (missing, unreadable, no sources)."""

    error_code: str = field(default=ErrorCode.INVALID_PATH)
    message: str = field(default="returned invalid file path")
    details: dict[str, Any] = field(default_factory=dict)
    path: str | None = field(default=None)

    user_visible: ClassVar[bool] = True


@dataclass
class RequestCancelledError(NavigatorError):
    """The request was abandoned because the navigator was disposed."""

    error_code: str = field(default=ErrorCode.CANCELLED)
    message: str = field(default="request cancelled")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ErrorCode",
    "NavigatorError",
    "PreconditionError",
    "ToolUnavailableError",
    "ExecutionError",
    "MalformedOutputError",
    "InvalidTargetError",
    "RequestCancelledError",
]
