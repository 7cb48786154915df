"""
Answer synthesizer.

Runs the planned tools in the fixed execution order and merges their
output into one answer. The merge order is part of the determinism
contract: summaries and evidence are concatenated exactly in tool order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import AssistantConfig, config
from executor.formatter import build_answer
from executor.planner import ExecutionPlan
from registry.base import DateRange, ToolContext, ToolName
from registry.schemas import EvidenceItem
from registry.tools import ToolRegistry

logger = logging.getLogger(__name__)

GENERAL_FOLLOW_UPS: tuple[str, ...] = (
    "Would you like a comparison with the previous period?",
    "Should I break the results down day by day?",
)

OPTIONAL_TOOL_FOLLOW_UPS: tuple[tuple[ToolName, str], ...] = (
    (ToolName.READ_TOP_VIDEOS, "Should I show the top 5 videos with the most views?"),
    (ToolName.READ_ANOMALIES, "Should I describe the detected anomalies with a likely cause?"),
)


def resolve_date_range(
    date_from: Optional[str],
    date_to: Optional[str],
    now: datetime,
    days: int = 30,
) -> DateRange:
    """
    Use the caller's range when both ends are given.

    Otherwise return the trailing `days` days ending on the current UTC
    day, both ends inclusive.
    """
    if date_from and date_to:
        return DateRange(date_from=date_from, date_to=date_to)

    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    end = now.date()
    start = end - timedelta(days=days - 1)
    return DateRange(date_from=start.isoformat(), date_to=end.isoformat())


def calculate_confidence(
    evidence_count: int,
    high_min: int = 5,
    medium_min: int = 3,
) -> str:
    """Coarse reliability label from the amount of evidence."""
    if evidence_count >= high_min:
        return "high"
    if evidence_count >= medium_min:
        return "medium"
    return "low"


def build_follow_up_questions(tools: list[ToolName], limit: int = 4) -> list[str]:
    questions = list(GENERAL_FOLLOW_UPS)
    for tool_name, question in OPTIONAL_TOOL_FOLLOW_UPS:
        if tool_name in tools:
            questions.append(question)
    return questions[:limit]


@dataclass
class SynthesizedAnswer:
    answer: str
    confidence: str
    date_range: DateRange
    follow_up_questions: list[str] = field(default_factory=list)
    evidence: list[EvidenceItem] = field(default_factory=list)
    summary_lines: list[str] = field(default_factory=list)


class AnswerSynthesizer:
    """Executes a plan against the tool registry and builds the answer."""

    def __init__(
        self, registry: ToolRegistry, settings: Optional[AssistantConfig] = None
    ) -> None:
        self.registry = registry
        self.settings = settings or config.assistant

    def synthesize(self, plan: ExecutionPlan, context: ToolContext) -> SynthesizedAnswer:
        """
        Run every planned tool sequentially and merge the results.

        Raises:
            AssistantError: the first failing tool's error; later tools
                are not executed
        """
        summary_lines: list[str] = []
        evidence: list[EvidenceItem] = []

        for tool_name in ToolName.execution_order():
            if not plan.includes(tool_name):
                continue

            result = self.registry.execute_tool(tool_name, context)
            if not result.success:
                logger.warning(
                    f"Aborting synthesis at {tool_name.value}: {result.error}")
                raise result.error

            summary_lines.extend(result.output.summary_lines)
            evidence.extend(result.output.evidence)

        confidence = calculate_confidence(
            len(evidence),
            high_min=self.settings.high_confidence_min_evidence,
            medium_min=self.settings.medium_confidence_min_evidence,
        )
        follow_ups = build_follow_up_questions(
            plan.tools_to_execute, limit=self.settings.max_follow_up_questions)
        answer = build_answer(
            context.date_range.date_from, context.date_range.date_to, summary_lines)

        logger.info(
            f"Synthesized answer: {len(summary_lines)} summary lines, "
            f"{len(evidence)} evidence items, confidence={confidence}"
        )

        return SynthesizedAnswer(
            answer=answer,
            confidence=confidence,
            date_range=context.date_range,
            follow_up_questions=follow_ups,
            evidence=evidence,
            summary_lines=summary_lines,
        )
