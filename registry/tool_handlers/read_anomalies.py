"""
read_anomalies tool.

Lists the most recent stored anomalies of the target metric inside the
requested range. No anomalies is a normal outcome, not an error.
"""

import logging

from analytics.formatting import format_int
from analytics.kpis import parse_iso_date
from memory.analytics_store import AnalyticsStore
from registry.base import ToolContext, ToolName, ToolOutput
from registry.errors import DependencyFailureError, cause_code
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)

SOURCE_TABLE = "ml_anomalies"
NO_ANOMALIES_SENTENCE = "No stored anomalies were detected in the selected period."


class ReadAnomaliesTool:
    name = ToolName.READ_ANOMALIES

    def __init__(self, store: AnalyticsStore, limit: int = 3, separator: str = ",") -> None:
        self.store = store
        self.limit = limit
        self.separator = separator

    def execute(self, context: ToolContext) -> ToolOutput:
        date_from = context.date_range.date_from
        date_to = context.date_range.date_to
        error_context = {
            "channelId": context.channel_id,
            "targetMetric": context.target_metric,
            "dateFrom": date_from,
            "dateTo": date_to,
        }

        try:
            anomalies = self.store.list_anomalies(
                context.channel_id,
                context.target_metric,
                parse_iso_date(date_from, date_from, date_to),
                parse_iso_date(date_to, date_from, date_to),
                limit=self.limit,
            )
        except DependencyFailureError as e:
            raise DependencyFailureError(
                "LLM_ASSISTANT_READ_ANOMALIES_FAILED",
                "Failed to read anomalies.",
                {**error_context, "causeErrorCode": cause_code(e)},
                cause=e,
            )

        if not anomalies:
            return ToolOutput(summary_lines=[NO_ANOMALIES_SENTENCE], evidence=[])

        evidence = [
            EvidenceItem(
                evidence_id=f"ev-anomaly-{anomaly.id}",
                tool=self.name.value,
                label=f"Anomaly {anomaly.date.isoformat()}",
                value=(
                    f"{format_int(anomaly.metric_value, self.separator)} vs baseline "
                    f"{format_int(anomaly.baseline_value, self.separator)} ({anomaly.severity})"
                ),
                source_table=SOURCE_TABLE,
                source_record_id=f"id={anomaly.id}",
            )
            for anomaly in anomalies
        ]

        latest = anomalies[0]
        return ToolOutput(
            summary_lines=[
                f"Detected {len(anomalies)} anomalies; the latest on "
                f"{latest.date.isoformat()} ({latest.severity}).",
            ],
            evidence=evidence,
        )
