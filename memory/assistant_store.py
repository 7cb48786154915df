"""
Conversation store for assistant threads.

Owns three append-only relations:
- assistant_threads
- assistant_messages
- assistant_message_evidence

Each ask() exchange (thread + user message + assistant message +
evidence) is written in a single UnitOfWork, so readers see either the
state before the exchange or the fully committed exchange.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import desc, asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.models.assistant_message import AssistantMessage
from db.models.assistant_thread import AssistantThread
from db.models.message_evidence import MessageEvidence
from memory.unit_of_work import UnitOfWork
from registry.base import ToolName
from registry.errors import (
    AssistantError,
    DependencyFailureError,
    PersistenceError,
    ThreadChannelMismatchError,
    cause_code,
)
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)


def to_iso_datetime(value: datetime) -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-02-16T10:00:00.000Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC, truncated to milliseconds."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def decode_string_list(raw: Optional[str]) -> list[str]:
    """
    Decode a stored JSON list of strings.

    Malformed JSON or a non-list yields []; non-string and blank
    entries are dropped.
    """
    try:
        parsed: Any = json.loads(raw or "[]")
    except ValueError:
        logger.warning("Discarding malformed follow-up questions payload")
        return []

    if not isinstance(parsed, list):
        return []

    return [item for item in parsed if isinstance(item, str) and item.strip()]


def decode_evidence_tool(raw: Optional[str]) -> str:
    """Stored tool name, or read_anomalies when it is not a known tool."""
    try:
        return ToolName(raw).value
    except ValueError:
        logger.warning(f"Unknown evidence tool {raw!r}, reading it as read_anomalies")
        return ToolName.READ_ANOMALIES.value


def resolve_thread_id(requested: Optional[str]) -> str:
    """Caller's trimmed thread id, or a fresh one when empty."""
    if requested is not None and requested.strip():
        return requested.strip()
    return str(uuid.uuid4())


@dataclass
class Exchange:
    """One question/answer pair to persist."""

    channel_id: str
    question: str
    title: str
    answer: str
    confidence: str
    created_at: datetime
    follow_up_questions: list[str] = field(default_factory=list)
    evidence: list[EvidenceItem] = field(default_factory=list)
    thread_id: Optional[str] = None


@dataclass(frozen=True)
class PersistedExchange:
    thread_id: str
    message_id: int
    created_at: str


class AssistantStore:
    """
    Persistent store for assistant conversations.

    Provides the atomic exchange write plus the thread list and thread
    history reads.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        logger.info("AssistantStore initialized")

    def _get_session(self) -> Session:
        """Create a new database session."""
        return self._session_factory()

    # -------------------------------------------------------------------------
    # WRITE METHODS
    # -------------------------------------------------------------------------

    def persist_exchange(self, exchange: Exchange) -> PersistedExchange:
        """
        Persist one ask() exchange atomically.

        Steps, all inside one transaction:
        1. Resolve the thread id (caller's trimmed value or a new UUID)
        2. Reject an existing thread that belongs to another channel
        3. Insert the thread when new
        4. Insert the user message
        5. Insert the assistant message and capture its id
        6. Insert the evidence rows, then touch the thread's updated_at
        7. Commit

        Raises:
            ThreadChannelMismatchError: thread exists for another channel
            PersistenceError: any store failure; nothing is written
        """
        thread_id = resolve_thread_id(exchange.thread_id)
        created_at = to_naive_utc(exchange.created_at)
        stage = "DB_ASSISTANT_THREAD_READ_FAILED"

        try:
            with UnitOfWork(self._session_factory) as uow:
                session = uow.session

                thread = session.get(AssistantThread, thread_id)
                if thread is not None and thread.channel_id != exchange.channel_id:
                    logger.warning(
                        f"Thread {thread_id} belongs to channel {thread.channel_id}, "
                        f"not {exchange.channel_id}"
                    )
                    raise ThreadChannelMismatchError(
                        thread_id, thread.channel_id, exchange.channel_id)

                if thread is None:
                    stage = "DB_ASSISTANT_THREAD_INSERT_FAILED"
                    thread = AssistantThread(
                        thread_id=thread_id,
                        channel_id=exchange.channel_id,
                        title=exchange.title,
                        created_at=created_at,
                        updated_at=created_at,
                    )
                    session.add(thread)
                    session.flush()

                stage = "DB_ASSISTANT_MESSAGE_INSERT_FAILED"
                session.add(AssistantMessage(
                    thread_id=thread_id,
                    role="user",
                    text=exchange.question,
                    confidence=None,
                    follow_up_questions_json="[]",
                    created_at=created_at,
                ))
                assistant_message = AssistantMessage(
                    thread_id=thread_id,
                    role="assistant",
                    text=exchange.answer,
                    confidence=exchange.confidence,
                    follow_up_questions_json=json.dumps(
                        exchange.follow_up_questions, ensure_ascii=False),
                    created_at=created_at,
                )
                session.add(assistant_message)
                session.flush()
                message_id = assistant_message.id

                stage = "DB_ASSISTANT_EVIDENCE_INSERT_FAILED"
                for item in exchange.evidence:
                    session.add(MessageEvidence(
                        message_id=message_id,
                        evidence_id=item.evidence_id,
                        tool_name=item.tool,
                        label=item.label,
                        value=item.value,
                        source_table=item.source_table,
                        source_record_id=item.source_record_id,
                        metadata_json="{}",
                        created_at=created_at,
                    ))
                    session.flush()

                stage = "DB_ASSISTANT_THREAD_UPDATE_FAILED"
                thread.updated_at = created_at
                session.flush()

                stage = "DB_ASSISTANT_TRANSACTION_FAILED"
                uow.commit()
        except AssistantError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error persisting assistant exchange ({stage}): {e}")
            raise PersistenceError(
                "LLM_ASSISTANT_PERSIST_FAILED",
                "Failed to save the assistant conversation.",
                {
                    "channelId": exchange.channel_id,
                    "threadId": exchange.thread_id,
                    "causeErrorCode": stage,
                },
                cause=e,
            )

        logger.debug(
            f"Saved exchange in thread {thread_id}: assistant message {message_id}, "
            f"{len(exchange.evidence)} evidence rows"
        )
        return PersistedExchange(
            thread_id=thread_id,
            message_id=message_id,
            created_at=to_iso_datetime(created_at),
        )

    # -------------------------------------------------------------------------
    # READ METHODS
    # -------------------------------------------------------------------------

    def list_threads(
        self, channel_id: Optional[str] = None, limit: int = 20
    ) -> list[dict[str, Any]]:
        """
        List threads, most recently updated first.

        Each item carries the text of the latest user message in the
        thread as last_question (None if the thread has none).
        """
        last_question = (
            select(AssistantMessage.text)
            .where(
                AssistantMessage.thread_id == AssistantThread.thread_id,
                AssistantMessage.role == "user",
            )
            .order_by(desc(AssistantMessage.id))
            .limit(1)
            .correlate(AssistantThread)
            .scalar_subquery()
        )

        query = select(AssistantThread, last_question.label("last_question"))
        if channel_id is not None:
            query = query.where(AssistantThread.channel_id == channel_id)
        query = query.order_by(
            desc(AssistantThread.updated_at), asc(AssistantThread.thread_id)
        ).limit(limit)

        session = self._get_session()
        try:
            rows = session.execute(query).all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing assistant threads: {e}")
            raise DependencyFailureError(
                "DB_ASSISTANT_THREADS_READ_FAILED",
                "Failed to read the assistant thread list.",
                {"channelId": channel_id, "limit": limit},
                cause=e,
            )
        finally:
            session.close()

        return [
            {
                "thread_id": thread.thread_id,
                "channel_id": thread.channel_id,
                "title": thread.title,
                "last_question": question,
                "created_at": to_iso_datetime(thread.created_at),
                "updated_at": to_iso_datetime(thread.updated_at),
            }
            for thread, question in rows
        ]

    def get_thread_messages(self, thread_id: str) -> Optional[dict[str, Any]]:
        """
        Thread header plus all messages in id order, each with its
        evidence in insertion order.

        Returns:
            Payload dict, or None when the thread does not exist.
        """
        session = self._get_session()
        try:
            thread = session.get(AssistantThread, thread_id)
            if thread is None:
                return None

            messages = session.scalars(
                select(AssistantMessage)
                .where(AssistantMessage.thread_id == thread_id)
                .order_by(asc(AssistantMessage.id))
            ).all()

            evidence_by_message: dict[int, list[dict[str, Any]]] = {}
            message_ids = [message.id for message in messages]
            if message_ids:
                evidence_rows = session.scalars(
                    select(MessageEvidence)
                    .where(MessageEvidence.message_id.in_(message_ids))
                    .order_by(asc(MessageEvidence.message_id), asc(MessageEvidence.id))
                ).all()
                for row in evidence_rows:
                    evidence_by_message.setdefault(row.message_id, []).append({
                        "evidence_id": row.evidence_id,
                        "tool": decode_evidence_tool(row.tool_name),
                        "label": row.label,
                        "value": row.value,
                        "source_table": row.source_table,
                        "source_record_id": row.source_record_id,
                    })

            return {
                "thread_id": thread.thread_id,
                "channel_id": thread.channel_id,
                "title": thread.title,
                "messages": [
                    {
                        "message_id": message.id,
                        "thread_id": message.thread_id,
                        "role": message.role,
                        "text": message.text,
                        "confidence": message.confidence,
                        "follow_up_questions": decode_string_list(
                            message.follow_up_questions_json),
                        "evidence": evidence_by_message.get(message.id, []),
                        "created_at": to_iso_datetime(message.created_at),
                    }
                    for message in messages
                ],
            }
        except SQLAlchemyError as e:
            logger.error(f"Error reading thread messages: {e}")
            raise DependencyFailureError(
                "DB_ASSISTANT_MESSAGES_READ_FAILED",
                "Failed to read the assistant messages.",
                {"threadId": thread_id, "causeErrorCode": cause_code(e)},
                cause=e,
            )
        finally:
            session.close()
