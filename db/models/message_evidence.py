from sqlalchemy import String, Text, TIMESTAMP, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from db.base import Base
from datetime import datetime


class MessageEvidence(Base):
    """A fact cited by an assistant message, traceable to its source row."""

    __tablename__ = "assistant_message_evidence"
    __table_args__ = (
        Index("idx_assistant_message_evidence_message", "message_id", "id"),
        Index("idx_assistant_message_evidence_source",
              "source_table", "source_record_id", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assistant_messages.id", ondelete="CASCADE"),
        nullable=False)
    evidence_id: Mapped[str] = mapped_column(String(255), nullable=False)
    tool_name: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    source_table: Mapped[str] = mapped_column(String(64), nullable=False)
    source_record_id: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_json: Mapped[str] = mapped_column(
        Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    message: Mapped["AssistantMessage"] = relationship(back_populates="evidence")
