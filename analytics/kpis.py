"""
Metrics Query Facade.

The assistant consumes KPI aggregates through the MetricsQueryFacade
protocol. SqlMetricsQueries is the local implementation over the
fact_channel_day table: totals for the requested window, deltas against
the immediately preceding window of the same length.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.models.channel import Channel
from db.models.channel_day import ChannelDay
from registry.errors import DependencyFailureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KpiResult:
    """KPI aggregates for one channel and date range."""

    views: int
    views_delta: int
    subscribers: int
    subscribers_delta: int
    engagement_rate: float


class MetricsQueryFacade(Protocol):
    def get_kpis(self, channel_id: str, date_from: str, date_to: str) -> KpiResult:
        ...


def parse_iso_date(value: str, date_from: str, date_to: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise DependencyFailureError(
            "DB_INVALID_DATE",
            "Invalid date range.",
            {"dateFrom": date_from, "dateTo": date_to},
        )


@dataclass(frozen=True)
class _WindowTotals:
    views: int
    likes: int
    comments: int
    subscribers: int


class SqlMetricsQueries:
    """KPI facade backed by the daily channel fact table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_kpis(self, channel_id: str, date_from: str, date_to: str) -> KpiResult:
        """
        Compute KPIs for [date_from, date_to].

        Raises:
            DependencyFailureError: invalid range or store failure
        """
        start = parse_iso_date(date_from, date_from, date_to)
        end = parse_iso_date(date_to, date_from, date_to)
        if start > end:
            raise DependencyFailureError(
                "DB_INVALID_DATE_RANGE",
                "The start date cannot be later than the end date.",
                {"dateFrom": date_from, "dateTo": date_to},
            )

        span_days = (end - start).days + 1
        previous_end = start - timedelta(days=1)
        previous_start = previous_end - timedelta(days=span_days - 1)

        session = self._session_factory()
        try:
            current = self._read_window(session, channel_id, start, end)
            previous = self._read_window(
                session, channel_id, previous_start, previous_end)
        except SQLAlchemyError as e:
            logger.error(f"Error reading KPIs for channel {channel_id}: {e}")
            raise DependencyFailureError(
                "DB_KPI_READ_FAILED",
                "Failed to read KPI metrics.",
                {"channelId": channel_id, "dateFrom": date_from, "dateTo": date_to},
                cause=e,
            )
        finally:
            session.close()

        engagement_rate = (
            (current.likes + current.comments) / current.views
            if current.views > 0 else 0.0
        )

        logger.debug(
            f"KPIs for {channel_id} {date_from}..{date_to}: "
            f"views={current.views} subscribers={current.subscribers}"
        )

        return KpiResult(
            views=current.views,
            views_delta=current.views - previous.views,
            subscribers=current.subscribers,
            subscribers_delta=current.subscribers - previous.subscribers,
            engagement_rate=engagement_rate,
        )

    def _read_window(
        self, session: Session, channel_id: str, start: date, end: date
    ) -> _WindowTotals:
        in_window = (
            ChannelDay.channel_id == channel_id,
            ChannelDay.date >= start,
            ChannelDay.date <= end,
        )
        views, likes, comments = session.execute(
            select(
                func.coalesce(func.sum(ChannelDay.views), 0),
                func.coalesce(func.sum(ChannelDay.likes), 0),
                func.coalesce(func.sum(ChannelDay.comments), 0),
            ).where(*in_window)
        ).one()

        latest = session.execute(
            select(ChannelDay.subscribers)
            .where(*in_window)
            .order_by(ChannelDay.date.desc())
            .limit(1)
        ).first()

        if latest is not None:
            subscribers = latest[0]
        else:
            subscribers = self._dimension_fallback(session, channel_id)

        return _WindowTotals(
            views=int(views),
            likes=int(likes),
            comments=int(comments),
            subscribers=int(subscribers),
        )

    @staticmethod
    def _dimension_fallback(session: Session, channel_id: str) -> int:
        """Latest known subscriber count from dim_channel when the window has no daily rows."""
        subscribers: Optional[int] = session.scalar(
            select(Channel.subscriber_count)
            .where(Channel.channel_id == channel_id)
        )
        return subscribers or 0
