"""
Base classes for the assistant tool registry.

Defines core data structures used across all tool modules:
- ToolName: The closed set of read-only tools
- ToolContext: Inputs shared by every tool execution
- ToolOutput: Summary lines and evidence produced by a tool
- ToolResult: Execution result container
- ToolDefinition: Tool description used for listing
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from registry.errors import AssistantError
from registry.schemas import EvidenceItem

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """Whitelisted read-only tools, in their fixed execution order."""

    READ_CHANNEL_INFO = "read_channel_info"
    READ_KPIS = "read_kpis"
    READ_TOP_VIDEOS = "read_top_videos"
    READ_ANOMALIES = "read_anomalies"

    @classmethod
    def execution_order(cls) -> list["ToolName"]:
        return [
            cls.READ_CHANNEL_INFO,
            cls.READ_KPIS,
            cls.READ_TOP_VIDEOS,
            cls.READ_ANOMALIES,
        ]


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO date range (YYYY-MM-DD)."""

    date_from: str
    date_to: str


@dataclass(frozen=True)
class ToolContext:
    """Inputs passed to every tool execution."""

    channel_id: str
    date_range: DateRange
    target_metric: str = "views"


@dataclass
class ToolOutput:
    """Summary lines and supporting evidence produced by one tool."""

    summary_lines: list[str] = field(default_factory=list)
    evidence: list[EvidenceItem] = field(default_factory=list)


@dataclass
class ToolResult:
    """Result from a tool execution."""

    tool_name: ToolName
    success: bool
    output: Optional[ToolOutput] = None
    error: Optional[AssistantError] = None


@dataclass
class ToolDefinition:
    """
    Definition of an assistant tool.

    Attributes:
        name: Unique identifier for the tool
        description: Human-readable description
        source_table: Table the tool's evidence points at
        optional: False for baseline tools that always run
    """

    name: ToolName
    description: str
    source_table: str
    optional: bool = True

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "description": self.description,
            "source_table": self.source_table,
            "optional": self.optional,
        }
