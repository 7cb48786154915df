from sqlalchemy import String, TIMESTAMP, Integer, BigInteger, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base
import datetime as dt
from datetime import datetime


class ChannelDay(Base):
    __tablename__ = "fact_channel_day"

    channel_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("dim_channel.channel_id", ondelete="CASCADE"),
        primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    subscribers: Mapped[int] = mapped_column(Integer, nullable=False)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False)
    videos: Mapped[int] = mapped_column(Integer, nullable=False)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    watch_time_minutes: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow)
