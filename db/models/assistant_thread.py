from sqlalchemy import String, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from db.base import Base
from datetime import datetime


class AssistantThread(Base):
    """A conversation scoped to exactly one channel.

    channel_id never changes after the row is inserted.
    """

    __tablename__ = "assistant_threads"
    __table_args__ = (
        Index("idx_assistant_threads_channel_updated",
              "channel_id", "updated_at", "thread_id"),
    )

    thread_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    channel_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("dim_channel.channel_id", ondelete="CASCADE"),
        nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    messages: Mapped[list["AssistantMessage"]] = relationship(
        back_populates="thread",
        order_by="AssistantMessage.id",
        passive_deletes=True,
    )
