"""
Assistant tool handlers.

One module per whitelisted read-only tool.
"""

from .read_channel_info import ReadChannelInfoTool
from .read_kpis import ReadKpisTool
from .read_top_videos import ReadTopVideosTool
from .read_anomalies import ReadAnomaliesTool

__all__ = [
    "ReadChannelInfoTool",
    "ReadKpisTool",
    "ReadTopVideosTool",
    "ReadAnomaliesTool",
]
