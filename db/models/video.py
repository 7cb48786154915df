from sqlalchemy import (
    String, Text, TIMESTAMP, BigInteger, Integer,
    ForeignKey, Index,
)
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base
from datetime import datetime


class Video(Base):
    """Video dimension row for a channel.

    Read by the top-videos tool, ranked by view_count with
    like_count, published_at and video_id as tie-breaks.
    """

    __tablename__ = "dim_video"
    __table_args__ = (
        Index("idx_dim_video_channel_published", "channel_id", "published_at"),
    )

    video_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    channel_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("dim_channel.channel_id", ondelete="CASCADE"),
        nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    published_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    duration_seconds: Mapped[int | None] = mapped_column(
        Integer, nullable=True)
    view_count: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0)
    like_count: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
