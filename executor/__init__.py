"""
Executor module initialization.

This module contains the orchestration logic for assistant requests.
"""

from executor.execute import AssistantLiteService, get_service
from executor.planner import ExecutionPlanner
from executor.synthesizer import AnswerSynthesizer

__all__ = [
    "AssistantLiteService",
    "get_service",
    "ExecutionPlanner",
    "AnswerSynthesizer",
]
