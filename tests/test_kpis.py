"""
KPI facade tests against the seeded daily metrics of channel C1.

C1 has 90 days of rows ending 2026-02-15, with views on day i equal to
1000 + 37*i + (i % 7)*50 and subscribers equal to 10000 + 12*i.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from analytics.kpis import SqlMetricsQueries, parse_iso_date
from registry.errors import DependencyFailureError


@pytest.fixture
def metrics(session_factory):
    return SqlMetricsQueries(session_factory)


class TestSqlMetricsQueries:

    def test_window_totals_and_deltas(self, metrics):
        kpis = metrics.get_kpis("C1", "2026-01-17", "2026-02-15")

        assert kpis.views == 117345
        assert kpis.views_delta == 117345 - 83845
        assert kpis.subscribers == 11068
        assert kpis.subscribers_delta == 360
        assert 0.055 < kpis.engagement_rate <= 0.06

    def test_empty_window_falls_back_to_channel_counts(self, metrics):
        kpis = metrics.get_kpis("C1", "2030-01-01", "2030-01-31")

        assert kpis.views == 0
        assert kpis.engagement_rate == 0.0
        assert kpis.subscribers == 11068
        assert kpis.subscribers_delta == 0

    def test_unknown_channel_reports_zeros(self, metrics):
        kpis = metrics.get_kpis("missing", "2026-01-17", "2026-02-15")
        assert (kpis.views, kpis.subscribers) == (0, 0)

    def test_inverted_range_is_rejected(self, metrics):
        with pytest.raises(DependencyFailureError) as exc_info:
            metrics.get_kpis("C1", "2026-02-15", "2026-01-17")
        assert exc_info.value.code == "DB_INVALID_DATE_RANGE"

    def test_invalid_date_is_rejected(self, metrics):
        with pytest.raises(DependencyFailureError) as exc_info:
            metrics.get_kpis("C1", "2026-02-30", "2026-03-01")
        assert exc_info.value.code == "DB_INVALID_DATE"

    def test_store_failure_is_wrapped(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("locked"))
        metrics = SqlMetricsQueries(lambda: session)

        with pytest.raises(DependencyFailureError) as exc_info:
            metrics.get_kpis("C1", "2026-01-17", "2026-02-15")

        assert exc_info.value.code == "DB_KPI_READ_FAILED"
        session.close.assert_called_once()


class TestParseIsoDate:

    def test_valid(self):
        assert parse_iso_date("2026-02-15", "2026-02-15", "2026-02-16").isoformat() == "2026-02-15"

    def test_invalid_carries_range(self):
        with pytest.raises(DependencyFailureError) as exc_info:
            parse_iso_date("15.02.2026", "15.02.2026", "2026-02-16")
        assert exc_info.value.context["dateFrom"] == "15.02.2026"
