"""
Typed errors raised by the assistant engine.

Every error carries a machine-readable code, a human-readable message
and a context map (channelId, threadId, upstream causeErrorCode, ...).
The HTTP layer serializes them with to_dict().
"""

from datetime import datetime, timezone
from typing import Any, Optional

SEVERITIES = ("fatal", "error", "warning", "info")


class AssistantError(Exception):
    """Base class for all assistant failures."""

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        severity: str = "error",
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context or {}
        self.severity = severity if severity in SEVERITIES else "error"
        self.cause = str(cause) if cause is not None else None
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation for API responses and logs."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "context": self.context,
            "timestamp": self.timestamp,
            "cause": self.cause,
        }

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.code}: {self.message}"


class NotFoundError(AssistantError):
    """A channel or thread does not exist."""


class ChannelNotFoundError(NotFoundError):
    def __init__(self, channel_id: str) -> None:
        super().__init__(
            "LLM_ASSISTANT_CHANNEL_NOT_FOUND",
            "Channel not found for the assistant.",
            {"channelId": channel_id},
        )


class ThreadNotFoundError(NotFoundError):
    def __init__(self, thread_id: str) -> None:
        super().__init__(
            "LLM_ASSISTANT_THREAD_NOT_FOUND",
            "The requested assistant thread does not exist.",
            {"threadId": thread_id},
        )


class ThreadChannelMismatchError(AssistantError):
    """An existing thread was reused with a different channel."""

    def __init__(self, thread_id: str, expected_channel_id: str, requested_channel_id: str) -> None:
        super().__init__(
            "LLM_ASSISTANT_THREAD_CHANNEL_MISMATCH",
            "The selected assistant thread does not belong to the requested channel.",
            {
                "threadId": thread_id,
                "expectedChannelId": expected_channel_id,
                "requestedChannelId": requested_channel_id,
            },
        )


class DependencyFailureError(AssistantError):
    """The metrics facade or the underlying store failed."""


class PersistenceError(AssistantError):
    """The conversation transaction could not be committed."""


class OutputValidationError(AssistantError):
    """A synthesized payload failed its own shape check."""


def cause_code(error: BaseException) -> Optional[str]:
    """Upstream error code to carry in a wrapping error's context."""
    if isinstance(error, AssistantError):
        return error.code
    return type(error).__name__
