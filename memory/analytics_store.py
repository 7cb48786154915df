"""
Read-only analytics store.

Provides the queries behind the assistant tools:
- Channel dimension lookup
- Top videos ranking
- Stored anomalies for a metric and date range

Store failures are wrapped into DependencyFailureError so tools can
report the upstream code.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import desc, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.models.anomaly import Anomaly
from db.models.channel import Channel
from db.models.video import Video
from registry.errors import DependencyFailureError

logger = logging.getLogger(__name__)


class AnalyticsStore:
    """Read access to the channel, video and anomaly tables."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        """Create a new database session."""
        return self._session_factory()

    def get_channel_info(self, channel_id: str) -> Optional[Channel]:
        """
        Retrieve a channel dimension row.

        Args:
            channel_id: The channel identifier.

        Returns:
            The Channel object, or None if not found.
        """
        session = self._get_session()
        try:
            return (
                session.query(Channel)
                .filter(Channel.channel_id == channel_id)
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching channel info: {e}")
            raise DependencyFailureError(
                "DB_ASSISTANT_CHANNEL_READ_FAILED",
                "Failed to read channel data for the assistant.",
                {"channelId": channel_id},
                cause=e,
            )
        finally:
            session.close()

    def list_top_videos(self, channel_id: str, limit: int = 3) -> list[Video]:
        """
        Retrieve the strongest videos of a channel.

        Ordered by view count, then like count, then newest first, with
        video_id as the final tie-break so the ranking is total.
        """
        session = self._get_session()
        try:
            return (
                session.query(Video)
                .filter(Video.channel_id == channel_id)
                .order_by(
                    desc(Video.view_count),
                    desc(Video.like_count),
                    desc(Video.published_at),
                    asc(Video.video_id),
                )
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching top videos: {e}")
            raise DependencyFailureError(
                "DB_ASSISTANT_TOP_VIDEOS_READ_FAILED",
                "Failed to read top videos for the assistant.",
                {"channelId": channel_id, "limit": limit},
                cause=e,
            )
        finally:
            session.close()

    def list_anomalies(
        self,
        channel_id: str,
        target_metric: str,
        date_from: date,
        date_to: date,
        limit: int = 3,
    ) -> list[Anomaly]:
        """
        Retrieve the most recent anomalies for a metric within a range.

        Returns:
            Anomalies ordered by date descending, then id descending.
        """
        session = self._get_session()
        try:
            return (
                session.query(Anomaly)
                .filter(
                    Anomaly.channel_id == channel_id,
                    Anomaly.target_metric == target_metric,
                    Anomaly.date >= date_from,
                    Anomaly.date <= date_to,
                )
                .order_by(desc(Anomaly.date), desc(Anomaly.id))
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching anomalies: {e}")
            raise DependencyFailureError(
                "DB_ASSISTANT_ANOMALIES_READ_FAILED",
                "Failed to read anomalies for the assistant.",
                {
                    "channelId": channel_id,
                    "targetMetric": target_metric,
                    "dateFrom": date_from.isoformat(),
                    "dateTo": date_to.isoformat(),
                    "limit": limit,
                },
                cause=e,
            )
        finally:
            session.close()
