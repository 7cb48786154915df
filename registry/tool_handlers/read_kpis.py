"""
read_kpis tool.

Delegates to the Metrics Query Facade for the requested range. All three
evidence items point at the same composite record: the channel and the
date span the aggregates were computed over.
"""

import logging

from analytics.formatting import format_int
from analytics.kpis import MetricsQueryFacade
from registry.base import ToolContext, ToolName, ToolOutput
from registry.errors import DependencyFailureError, cause_code
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)

SOURCE_TABLE = "fact_channel_day"


class ReadKpisTool:
    """Baseline tool: views, subscribers and engagement for the range."""

    name = ToolName.READ_KPIS

    def __init__(self, metrics: MetricsQueryFacade, separator: str = ",") -> None:
        self.metrics = metrics
        self.separator = separator

    def execute(self, context: ToolContext) -> ToolOutput:
        date_from = context.date_range.date_from
        date_to = context.date_range.date_to

        try:
            kpis = self.metrics.get_kpis(context.channel_id, date_from, date_to)
        except Exception as e:
            logger.error(f"KPI facade failed for {context.channel_id}: {e}")
            raise DependencyFailureError(
                "LLM_ASSISTANT_READ_KPIS_FAILED",
                "Failed to read KPI metrics.",
                {
                    "channelId": context.channel_id,
                    "dateFrom": date_from,
                    "dateTo": date_to,
                    "causeErrorCode": cause_code(e),
                },
                cause=e,
            )

        source_record_id = f"channel_id={context.channel_id};date={date_from}..{date_to}"
        span = f"{date_from}-{date_to}"

        return ToolOutput(
            summary_lines=[
                f"In the analysed period the channel collected {self._fmt(kpis.views)} views "
                f"(delta {self._fmt(kpis.views_delta)}).",
                f"The current subscriber count is {self._fmt(kpis.subscribers)} "
                f"(delta {self._fmt(kpis.subscribers_delta)}).",
            ],
            evidence=[
                EvidenceItem(
                    evidence_id=f"ev-kpis-views-{span}",
                    tool=self.name.value,
                    label="Total views",
                    value=str(kpis.views),
                    source_table=SOURCE_TABLE,
                    source_record_id=source_record_id,
                ),
                EvidenceItem(
                    evidence_id=f"ev-kpis-subs-{span}",
                    tool=self.name.value,
                    label="Subscriber count",
                    value=str(kpis.subscribers),
                    source_table=SOURCE_TABLE,
                    source_record_id=source_record_id,
                ),
                EvidenceItem(
                    evidence_id=f"ev-kpis-engagement-{span}",
                    tool=self.name.value,
                    label="Engagement rate",
                    value=f"{kpis.engagement_rate:.4f}",
                    source_table=SOURCE_TABLE,
                    source_record_id=source_record_id,
                ),
            ],
        )

    def _fmt(self, value: float) -> str:
        return format_int(value, self.separator)
