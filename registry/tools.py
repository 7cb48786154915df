"""
Assistant Tool Registry.

Registers the four whitelisted read-only tools. Each tool has:
- name: A ToolName member
- description: Human-readable description
- source_table: Where its evidence comes from
- optional: False for the baseline tools

Tools:
- read_channel_info: Channel dimension row (baseline)
- read_kpis: KPI aggregates for the date range (baseline)
- read_top_videos: Strongest videos by views
- read_anomalies: Stored anomalies for the target metric

Handler implementations live in the tool_handlers/ subpackage.
"""

import logging
from typing import Any, Optional

from analytics.kpis import MetricsQueryFacade
from config import AssistantConfig, config
from memory.analytics_store import AnalyticsStore
from .base import ToolContext, ToolDefinition, ToolName, ToolOutput, ToolResult
from .errors import AssistantError
from .tool_handlers import (
    ReadAnomaliesTool,
    ReadChannelInfoTool,
    ReadKpisTool,
    ReadTopVideosTool,
)

logger = logging.getLogger(__name__)

__all__ = ["ToolResult", "ToolDefinition", "ToolRegistry"]


class ToolRegistry:
    """
    Central registry for the assistant tools.

    Dispatch is an explicit match over ToolName; there is no lookup by
    arbitrary string.

    Usage:
        registry = ToolRegistry(store, metrics)
        result = registry.execute_tool(ToolName.READ_KPIS, context)
    """

    def __init__(
        self,
        store: AnalyticsStore,
        metrics: MetricsQueryFacade,
        settings: Optional[AssistantConfig] = None,
    ) -> None:
        """Initialize the registry and register all tools."""
        settings = settings or config.assistant
        separator = settings.thousands_separator

        self._channel_info = ReadChannelInfoTool(store, separator=separator)
        self._kpis = ReadKpisTool(metrics, separator=separator)
        self._top_videos = ReadTopVideosTool(
            store, limit=settings.top_videos_limit, separator=separator)
        self._anomalies = ReadAnomaliesTool(
            store, limit=settings.anomalies_limit, separator=separator)

        self._tools: dict[ToolName, ToolDefinition] = {}
        self._register_all_tools()

    def _register_all_tools(self) -> None:
        """Register all available assistant tools."""
        self._register_tool(ToolDefinition(
            name=ToolName.READ_CHANNEL_INFO,
            description="Read the channel name, subscriber count and video count",
            source_table="dim_channel",
            optional=False,
        ))
        self._register_tool(ToolDefinition(
            name=ToolName.READ_KPIS,
            description="Read views, subscribers and engagement rate for the date range",
            source_table="fact_channel_day",
            optional=False,
        ))
        self._register_tool(ToolDefinition(
            name=ToolName.READ_TOP_VIDEOS,
            description="Read the strongest videos of the channel by view count",
            source_table="dim_video",
        ))
        self._register_tool(ToolDefinition(
            name=ToolName.READ_ANOMALIES,
            description="Read stored anomalies of the target metric within the date range",
            source_table="ml_anomalies",
        ))

    def _register_tool(self, tool: ToolDefinition) -> None:
        """Register a single tool."""
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name.value}")

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools in execution order."""
        return [self._tools[name].describe() for name in ToolName.execution_order()]

    def _dispatch(self, tool_name: ToolName, context: ToolContext) -> ToolOutput:
        match tool_name:
            case ToolName.READ_CHANNEL_INFO:
                return self._channel_info.execute(context)
            case ToolName.READ_KPIS:
                return self._kpis.execute(context)
            case ToolName.READ_TOP_VIDEOS:
                return self._top_videos.execute(context)
            case ToolName.READ_ANOMALIES:
                return self._anomalies.execute(context)
        raise ValueError(f"Unknown tool: {tool_name!r}")

    def execute_tool(self, tool_name: ToolName, context: ToolContext) -> ToolResult:
        """
        Execute a tool by name.

        Args:
            tool_name: Tool to execute
            context: Channel, date range and target metric

        Returns:
            ToolResult with success status and output, or the typed error
        """
        try:
            output = self._dispatch(tool_name, context)
            logger.info(
                f"Tool {tool_name.value} produced {len(output.summary_lines)} summary lines, "
                f"{len(output.evidence)} evidence items"
            )
            return ToolResult(tool_name=tool_name, success=True, output=output)
        except AssistantError as e:
            logger.error(f"Tool execution failed: {tool_name.value}: {e}")
            return ToolResult(tool_name=tool_name, success=False, error=e)
