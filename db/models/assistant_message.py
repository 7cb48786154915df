from sqlalchemy import (
    String, Text, TIMESTAMP, Integer,
    ForeignKey, Index, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from db.base import Base
from datetime import datetime


class AssistantMessage(Base):
    """One turn of a thread.

    The autoincrement id is the message order; user and assistant rows
    are always written in pairs.
    """

    __tablename__ = "assistant_messages"
    __table_args__ = (
        Index("idx_assistant_messages_thread_order", "thread_id", "id"),
        CheckConstraint("role IN ('user', 'assistant')", name="role"),
        CheckConstraint(
            "confidence IS NULL OR confidence IN ('low', 'medium', 'high')",
            name="confidence"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("assistant_threads.thread_id", ondelete="CASCADE"),
        nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[str | None] = mapped_column(String(8), nullable=True)
    follow_up_questions_json: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    thread: Mapped["AssistantThread"] = relationship(back_populates="messages")
    evidence: Mapped[list["MessageEvidence"]] = relationship(
        back_populates="message",
        order_by="MessageEvidence.id",
        passive_deletes=True,
    )
