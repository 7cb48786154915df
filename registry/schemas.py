"""
Pydantic schemas for the Assistant-Lite engine.

Defines all request/response models exchanged with callers. Field names
are snake_case in Python and camelCase on the wire.
"""

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Confidence = Literal["low", "medium", "high"]
Role = Literal["user", "assistant"]
TargetMetric = Literal["views", "subscribers", "likes", "comments", "watch_time"]
ToolNameLiteral = Literal[
    "read_channel_info", "read_kpis", "read_top_videos", "read_anomalies"
]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Evidence
# =============================================================================

class EvidenceItem(CamelModel):
    """A single fact cited in support of an assistant answer."""

    evidence_id: str = Field(..., min_length=1)
    tool: ToolNameLiteral
    label: str = Field(..., min_length=1)
    value: str
    source_table: str = Field(..., min_length=1)
    source_record_id: str = Field(..., min_length=1)


# =============================================================================
# Ask
# =============================================================================

class AskInput(CamelModel):
    """
    Request schema for one question to the assistant.

    When only one of date_from/date_to is given the default trailing
    window is used instead.
    """

    channel_id: str = Field(
        ...,
        description="Channel the question is about",
        min_length=1,
        max_length=64,
        examples=["UC-demo-channel"]
    )
    question: str = Field(
        ...,
        description="Free-text question",
        min_length=1,
        max_length=2000,
        examples=["Jak szly moje filmy w ostatnim miesiacu?"]
    )
    date_from: Optional[str] = Field(default=None, examples=["2026-01-17"])
    date_to: Optional[str] = Field(default=None, examples=["2026-02-15"])
    thread_id: Optional[str] = Field(
        default=None,
        description="Existing thread to continue; a new one is created when empty",
        max_length=64,
    )
    target_metric: TargetMetric = "views"

    @field_validator("date_from", "date_to")
    @classmethod
    def _check_iso_date(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _ISO_DATE.match(value):
            raise ValueError("dates must use the YYYY-MM-DD format")
        return value

    @field_validator("question")
    @classmethod
    def _check_question(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question must not be blank")
        return value


class AskResult(CamelModel):
    """Answer returned by ask(), after persistence."""

    thread_id: str = Field(..., min_length=1)
    message_id: int = Field(..., ge=1)
    answer: str = Field(..., min_length=1)
    confidence: Confidence
    follow_up_questions: list[str] = Field(default_factory=list, max_length=4)
    evidence: list[EvidenceItem] = Field(default_factory=list)
    used_stub: Literal[True] = True
    created_at: str


# =============================================================================
# Threads
# =============================================================================

class ThreadListInput(CamelModel):
    channel_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    limit: int = Field(default=20, ge=1, le=100)


class ThreadListItem(CamelModel):
    thread_id: str = Field(..., min_length=1)
    channel_id: str = Field(..., min_length=1)
    title: str
    last_question: Optional[str] = None
    created_at: str
    updated_at: str


class ThreadListResult(CamelModel):
    items: list[ThreadListItem] = Field(default_factory=list)


class ThreadMessagesInput(CamelModel):
    thread_id: str = Field(..., min_length=1, max_length=64)


class ThreadMessage(CamelModel):
    message_id: int = Field(..., ge=1)
    thread_id: str
    role: Role
    text: str
    confidence: Optional[Confidence] = None
    follow_up_questions: list[str] = Field(default_factory=list)
    evidence: list[EvidenceItem] = Field(default_factory=list)
    created_at: str


class ThreadMessagesResult(CamelModel):
    thread_id: str
    channel_id: str
    title: str
    messages: list[ThreadMessage] = Field(default_factory=list)


# =============================================================================
# Server
# =============================================================================

class HealthResponse(BaseModel):
    """Response schema for the /health endpoint."""

    status: str = Field(..., examples=["healthy"])
    version: str = Field(..., examples=["1.0.0"])
    mode: str = Field(default="local-stub")
