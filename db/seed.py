"""
Demo data for local runs and tests.

Seeds one channel with daily metrics, a handful of videos and stored
anomalies. Every value is derived from the day index, so two databases
seeded with the same arguments hold identical content.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.base import Base
from db.models import Anomaly, Channel, ChannelDay, Video

logger = logging.getLogger(__name__)

DEMO_CHANNEL_ID = "UC-demo-channel"
DEMO_END_DATE = date(2026, 2, 15)

DEMO_VIDEOS = (
    # video_id, title, days before end date, views, likes, comments
    ("vid-001", "How I edit a video in 10 minutes", 80, 48200, 2100, 310),
    ("vid-002", "Studio tour 2026", 52, 91500, 5400, 720),
    ("vid-003", "Q&A: your questions answered", 33, 23750, 1300, 540),
    ("vid-004", "Budget camera setup for beginners", 18, 91500, 6100, 430),
    ("vid-005", "Behind the scenes of a live stream", 4, 7300, 410, 95),
)

DEMO_ANOMALIES = (
    # target metric, days before end date, value, baseline, severity
    ("views", 25, 6420.0, 2410.0, "high"),
    ("views", 11, 980.0, 2630.0, "medium"),
    ("views", 3, 4150.0, 2700.0, "low"),
    ("subscribers", 11, 10480.0, 10700.0, "medium"),
    ("views", 70, 5100.0, 1900.0, "high"),
)


def create_tables(engine: Engine) -> None:
    """Create all tables registered on Base.metadata."""
    import db.models  # noqa: F401  registers every model

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def seed_demo_channel(
    session_factory: sessionmaker[Session],
    channel_id: str = DEMO_CHANNEL_ID,
    name: str = "Demo Channel",
    end_date: date = DEMO_END_DATE,
    days: int = 90,
) -> None:
    """
    Insert the demo channel with `days` days of metrics ending on end_date.

    Does nothing when the channel already exists.
    """
    session = session_factory()
    try:
        if session.get(Channel, channel_id) is not None:
            logger.info(f"Demo channel {channel_id} already seeded")
            return

        stamp = datetime.combine(end_date, datetime.min.time())
        start = end_date - timedelta(days=days - 1)

        daily = []
        for i in range(days):
            views = 1000 + 37 * i + (i % 7) * 50
            daily.append(ChannelDay(
                channel_id=channel_id,
                date=start + timedelta(days=i),
                subscribers=10000 + 12 * i,
                views=views,
                videos=40 + i // 15,
                likes=views // 20,
                comments=views // 100,
                watch_time_minutes=views * 3,
                created_at=stamp,
            ))

        last = daily[-1]
        session.add(Channel(
            channel_id=channel_id,
            name=name,
            description=f"{name} used for local assistant runs",
            published_at=stamp - timedelta(days=3 * 365),
            subscriber_count=last.subscribers,
            video_count=last.videos,
            view_count=sum(row.views for row in daily),
            created_at=stamp,
            updated_at=stamp,
        ))
        session.flush()
        session.add_all(daily)

        for video_id, title, age, views, likes, comments in DEMO_VIDEOS:
            session.add(Video(
                video_id=f"{channel_id}-{video_id}",
                channel_id=channel_id,
                title=title,
                description="",
                published_at=stamp - timedelta(days=age),
                duration_seconds=600,
                view_count=views,
                like_count=likes,
                comment_count=comments,
                created_at=stamp,
                updated_at=stamp,
            ))

        for metric, age, value, baseline, severity in DEMO_ANOMALIES:
            session.add(Anomaly(
                channel_id=channel_id,
                target_metric=metric,
                date=end_date - timedelta(days=age),
                metric_value=value,
                baseline_value=baseline,
                deviation_ratio=round(value / baseline - 1, 4),
                method="zscore",
                confidence="high",
                severity=severity,
                explanation=f"{metric} deviated from the rolling baseline",
                detected_at=stamp,
            ))

        session.commit()
        logger.info(f"Seeded demo channel {channel_id} with {days} days of metrics")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
