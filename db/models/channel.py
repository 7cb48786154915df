from sqlalchemy import String, Text, TIMESTAMP, BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base
from datetime import datetime


class Channel(Base):
    """Channel dimension row.

    Populated by the sync pipeline; the assistant only reads it.
    """

    __tablename__ = "dim_channel"

    channel_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    published_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    subscriber_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    video_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
