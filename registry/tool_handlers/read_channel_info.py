"""
read_channel_info tool.

Reads the channel dimension row and reports subscriber and video counts.
A missing channel is an error: every answer needs a channel to talk about.
"""

import logging

from analytics.formatting import format_int
from memory.analytics_store import AnalyticsStore
from registry.base import ToolContext, ToolName, ToolOutput
from registry.errors import (
    ChannelNotFoundError,
    DependencyFailureError,
    cause_code,
)
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)

SOURCE_TABLE = "dim_channel"


class ReadChannelInfoTool:
    """Baseline tool: channel name, subscribers and video count."""

    name = ToolName.READ_CHANNEL_INFO

    def __init__(self, store: AnalyticsStore, separator: str = ",") -> None:
        self.store = store
        self.separator = separator

    def execute(self, context: ToolContext) -> ToolOutput:
        try:
            channel = self.store.get_channel_info(context.channel_id)
        except DependencyFailureError as e:
            raise DependencyFailureError(
                "LLM_ASSISTANT_READ_CHANNEL_FAILED",
                "Failed to read channel information.",
                {"channelId": context.channel_id, "causeErrorCode": cause_code(e)},
                cause=e,
            )

        if channel is None:
            logger.warning(f"Channel {context.channel_id} not found")
            raise ChannelNotFoundError(context.channel_id)

        subscribers = format_int(channel.subscriber_count, self.separator)
        videos = format_int(channel.video_count, self.separator)

        return ToolOutput(
            summary_lines=[
                f"Channel {channel.name} has {subscribers} subscribers and {videos} videos.",
            ],
            evidence=[
                EvidenceItem(
                    evidence_id=f"ev-channel-{channel.channel_id}",
                    tool=self.name.value,
                    label="Channel basics",
                    value=f"Subscribers: {subscribers}, videos: {videos}",
                    source_table=SOURCE_TABLE,
                    source_record_id=f"channel_id={channel.channel_id}",
                ),
            ],
        )
