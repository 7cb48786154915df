"""
Execution planner for assistant tool selection.

This module is responsible for deterministic, explainable planning
of which tools to execute for a question. It does NOT call an LLM -
planning is keyword-based and transparent. The vocabularies come from
AssistantConfig so they can be tuned without code changes.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Optional

from config import AssistantConfig, config
from registry.base import ToolName

logger = logging.getLogger(__name__)

BASELINE_TOOLS: tuple[ToolName, ...] = (
    ToolName.READ_CHANNEL_INFO,
    ToolName.READ_KPIS,
)


@dataclass
class ExecutionPlan:
    """
    Represents a planned execution sequence.

    Contains the tools to execute (always in the fixed execution order)
    and the reason each one was selected.
    """

    tools_to_execute: list[ToolName] = field(default_factory=list)
    reasoning: dict[ToolName, str] = field(default_factory=dict)
    normalized_question: str = ""

    def add_tool(self, tool_name: ToolName, reason: str) -> None:
        """Add a tool to the execution plan with reasoning."""
        if tool_name in self.tools_to_execute:
            return
        self.reasoning[tool_name] = reason
        order = ToolName.execution_order()
        self.tools_to_execute = sorted(
            [*self.tools_to_execute, tool_name], key=order.index)

    def includes(self, tool_name: ToolName) -> bool:
        return tool_name in self.tools_to_execute

    def to_dict(self) -> dict[str, Any]:
        """Convert plan to dictionary representation."""
        return {
            "tools": [tool.value for tool in self.tools_to_execute],
            "reasoning": {tool.value: reason for tool, reason in self.reasoning.items()},
        }


def normalize_question(text: str) -> str:
    """Decompose, strip diacritics and lowercase: 'Średnie' -> 'srednie'."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def _compile_vocabulary(keywords: list[str]) -> Optional[re.Pattern]:
    stems = [normalize_question(keyword) for keyword in keywords if keyword]
    if not stems:
        return None
    return re.compile("|".join(re.escape(stem) for stem in stems))


class ExecutionPlanner:
    """
    Deterministic planner for tool selection.

    The two baseline tools always run. read_top_videos is added when the
    question mentions videos or rankings, read_anomalies when it mentions
    risks or trends. Both checks are independent.
    """

    def __init__(self, settings: Optional[AssistantConfig] = None) -> None:
        """Initialize the planner."""
        settings = settings or config.assistant
        self._video_pattern = _compile_vocabulary(settings.video_keywords)
        self._risk_pattern = _compile_vocabulary(settings.risk_keywords)

    def create_plan(self, question: str) -> ExecutionPlan:
        """
        Create an execution plan for a question.

        Args:
            question: User's free-text question

        Returns:
            ExecutionPlan with tools and reasoning
        """
        plan = ExecutionPlan(normalized_question=normalize_question(question))

        for tool_name in BASELINE_TOOLS:
            plan.add_tool(tool_name, "baseline")

        video_match = self._search(self._video_pattern, plan.normalized_question)
        if video_match:
            plan.add_tool(
                ToolName.READ_TOP_VIDEOS, f"video/ranking keyword '{video_match}'")

        risk_match = self._search(self._risk_pattern, plan.normalized_question)
        if risk_match:
            plan.add_tool(
                ToolName.READ_ANOMALIES, f"risk/trend keyword '{risk_match}'")

        logger.info(f"Planned tools: {plan.to_dict()['tools']}")
        return plan

    def select_tools(self, question: str) -> list[ToolName]:
        """Ordered, de-duplicated tools for a question."""
        return list(self.create_plan(question).tools_to_execute)

    @staticmethod
    def _search(pattern: Optional[re.Pattern], text: str) -> Optional[str]:
        if pattern is None:
            return None
        match = pattern.search(text)
        return match.group(0) if match else None
