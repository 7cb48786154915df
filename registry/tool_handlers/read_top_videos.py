"""
read_top_videos tool.

Lists the strongest videos of the channel. A channel without videos is
not an error: the tool says so and contributes no evidence.
"""

import logging

from analytics.formatting import format_int
from memory.analytics_store import AnalyticsStore
from registry.base import ToolContext, ToolName, ToolOutput
from registry.errors import DependencyFailureError, cause_code
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)

SOURCE_TABLE = "dim_video"
NO_VIDEOS_SENTENCE = "No videos are stored for this channel."


class ReadTopVideosTool:
    name = ToolName.READ_TOP_VIDEOS

    def __init__(self, store: AnalyticsStore, limit: int = 3, separator: str = ",") -> None:
        self.store = store
        self.limit = limit
        self.separator = separator

    def execute(self, context: ToolContext) -> ToolOutput:
        try:
            videos = self.store.list_top_videos(context.channel_id, limit=self.limit)
        except DependencyFailureError as e:
            raise DependencyFailureError(
                "LLM_ASSISTANT_READ_TOP_VIDEOS_FAILED",
                "Failed to read top videos.",
                {"channelId": context.channel_id, "causeErrorCode": cause_code(e)},
                cause=e,
            )

        if not videos:
            logger.info(f"No videos stored for channel {context.channel_id}")
            return ToolOutput(summary_lines=[NO_VIDEOS_SENTENCE], evidence=[])

        strongest = videos[0]
        evidence = [
            EvidenceItem(
                evidence_id=f"ev-video-{video.video_id}",
                tool=self.name.value,
                label=f"Video {video.video_id}",
                value=f"{video.title} ({format_int(video.view_count, self.separator)} views)",
                source_table=SOURCE_TABLE,
                source_record_id=f"video_id={video.video_id}",
            )
            for video in videos
        ]

        return ToolOutput(
            summary_lines=[
                f'Strongest video: "{strongest.title}" '
                f"({format_int(strongest.view_count, self.separator)} views).",
            ],
            evidence=evidence,
        )
