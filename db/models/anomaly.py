from sqlalchemy import (
    String, Text, TIMESTAMP, Integer, Float, Date,
    ForeignKey, Index, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base
import datetime as dt
from datetime import datetime


class Anomaly(Base):
    """Anomaly detected by the ML pipeline for one metric on one day."""

    __tablename__ = "ml_anomalies"
    __table_args__ = (
        Index("idx_ml_anomalies_channel_date",
              "channel_id", "target_metric", "date", "id"),
        CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')", name="severity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("dim_channel.channel_id", ondelete="CASCADE"),
        nullable=False)
    target_metric: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    metric_value: Mapped[float] = mapped_column(Float, nullable=False)
    baseline_value: Mapped[float] = mapped_column(Float, nullable=False)
    deviation_ratio: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[str] = mapped_column(String(16), nullable=False)
    confidence: Mapped[str] = mapped_column(String(8), nullable=False)
    severity: Mapped[str] = mapped_column(String(8), nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    detected_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=datetime.utcnow)
