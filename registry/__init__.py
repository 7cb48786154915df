"""
Registry module initialization.

This module contains tool definitions, schemas, and typed errors.
The ToolRegistry itself lives in registry.tools and is imported from
there, since it depends on the stores built on top of these types.
"""

from registry.base import DateRange, ToolContext, ToolName, ToolOutput, ToolResult
from registry.errors import AssistantError
from registry.schemas import AskInput, AskResult, EvidenceItem

__all__ = [
    "DateRange",
    "ToolContext",
    "ToolName",
    "ToolOutput",
    "ToolResult",
    "AssistantError",
    "AskInput",
    "AskResult",
    "EvidenceItem",
]
