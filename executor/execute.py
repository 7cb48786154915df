"""
Main orchestration entry point for assistant requests.

This module coordinates:
- Input validation
- Date range resolution against the injected clock
- Tool planning and execution
- Answer synthesis
- Atomic persistence of the exchange

All business logic flows through here.
"""

import logging
from typing import Any, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from analytics.kpis import MetricsQueryFacade, SqlMetricsQueries
from config import AssistantConfig, config
from executor.clock import Clock, SystemClock
from executor.formatter import truncate_title
from executor.planner import ExecutionPlanner
from executor.synthesizer import AnswerSynthesizer, resolve_date_range
from memory.analytics_store import AnalyticsStore
from memory.assistant_store import AssistantStore, Exchange
from registry.base import ToolContext
from registry.errors import (
    DependencyFailureError,
    OutputValidationError,
    ThreadNotFoundError,
    cause_code,
)
from registry.schemas import (
    AskInput,
    AskResult,
    ThreadListInput,
    ThreadListResult,
    ThreadMessagesInput,
    ThreadMessagesResult,
)
from registry.tools import ToolRegistry

logger = logging.getLogger(__name__)


def _validation_issues(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"path": ".".join(str(part) for part in issue["loc"]), "message": issue["msg"]}
        for issue in error.errors()
    ]


class AssistantLiteService:
    """
    Facade for the local stub assistant.

    Coordinates all components to answer a question:
    1. Resolve the date range
    2. Plan tool execution from the question keywords
    3. Execute the planned tools in fixed order
    4. Synthesize answer, confidence and follow-ups
    5. Persist thread, both messages and evidence in one transaction
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker[Session]] = None,
        metrics: Optional[MetricsQueryFacade] = None,
        clock: Optional[Clock] = None,
        settings: Optional[AssistantConfig] = None,
    ) -> None:
        """Initialize the service with all required components."""
        if session_factory is None:
            from db.session import SessionLocal
            session_factory = SessionLocal

        self.settings = settings or config.assistant
        self.clock = clock or SystemClock()
        self.metrics = metrics or SqlMetricsQueries(session_factory)

        self.analytics_store = AnalyticsStore(session_factory)
        self.assistant_store = AssistantStore(session_factory)
        self.planner = ExecutionPlanner(self.settings)
        self.tool_registry = ToolRegistry(
            self.analytics_store, self.metrics, self.settings)
        self.synthesizer = AnswerSynthesizer(self.tool_registry, self.settings)

    def ask(self, request: Union[AskInput, dict[str, Any]]) -> AskResult:
        """
        Answer one question and persist the exchange.

        Args:
            request: AskInput or its camelCase/snake_case dict form

        Returns:
            Validated AskResult

        Raises:
            pydantic.ValidationError: malformed request
            AssistantError: tool, persistence or output failure
        """
        if not isinstance(request, AskInput):
            request = AskInput.model_validate(request)

        now = self.clock.now()
        date_range = resolve_date_range(
            request.date_from,
            request.date_to,
            now,
            days=self.settings.default_range_days,
        )
        logger.info(
            f"Assistant ask for channel={request.channel_id} "
            f"range={date_range.date_from}..{date_range.date_to}"
        )

        plan = self.planner.create_plan(request.question)
        context = ToolContext(
            channel_id=request.channel_id,
            date_range=date_range,
            target_metric=request.target_metric,
        )
        synthesized = self.synthesizer.synthesize(plan, context)

        persisted = self.assistant_store.persist_exchange(Exchange(
            channel_id=request.channel_id,
            thread_id=request.thread_id,
            question=request.question,
            title=truncate_title(
                request.question, self.settings.thread_title_max_length),
            answer=synthesized.answer,
            confidence=synthesized.confidence,
            follow_up_questions=synthesized.follow_up_questions,
            evidence=synthesized.evidence,
            created_at=now,
        ))

        try:
            return AskResult(
                thread_id=persisted.thread_id,
                message_id=persisted.message_id,
                answer=synthesized.answer,
                confidence=synthesized.confidence,
                follow_up_questions=synthesized.follow_up_questions,
                evidence=synthesized.evidence,
                used_stub=True,
                created_at=persisted.created_at,
            )
        except ValidationError as e:
            logger.error(f"Assistant output failed validation: {e}")
            raise OutputValidationError(
                "LLM_ASSISTANT_OUTPUT_INVALID",
                "The assistant produced an invalid response.",
                {"issues": _validation_issues(e)},
                cause=e,
            )

    def list_threads(
        self, request: Union[ThreadListInput, dict[str, Any], None] = None
    ) -> ThreadListResult:
        """Threads ordered by last activity, optionally for one channel."""
        if request is None:
            request = ThreadListInput()
        elif not isinstance(request, ThreadListInput):
            request = ThreadListInput.model_validate(request)

        try:
            items = self.assistant_store.list_threads(
                channel_id=request.channel_id, limit=request.limit)
        except DependencyFailureError as e:
            raise DependencyFailureError(
                "LLM_ASSISTANT_THREADS_READ_FAILED",
                "Failed to read the assistant thread list.",
                {"channelId": request.channel_id, "causeErrorCode": cause_code(e)},
                cause=e,
            )

        try:
            return ThreadListResult(items=items)
        except ValidationError as e:
            logger.error(f"Thread list failed validation: {e}")
            raise OutputValidationError(
                "LLM_ASSISTANT_THREADS_INVALID",
                "The assistant thread list is invalid.",
                {"issues": _validation_issues(e)},
                cause=e,
            )

    def get_thread_messages(
        self, request: Union[ThreadMessagesInput, dict[str, Any], str]
    ) -> ThreadMessagesResult:
        """
        Full history of one thread.

        Raises:
            ThreadNotFoundError: no thread with that id
        """
        if isinstance(request, str):
            request = ThreadMessagesInput(thread_id=request)
        elif not isinstance(request, ThreadMessagesInput):
            request = ThreadMessagesInput.model_validate(request)

        try:
            payload = self.assistant_store.get_thread_messages(request.thread_id)
        except DependencyFailureError as e:
            raise DependencyFailureError(
                "LLM_ASSISTANT_THREAD_MESSAGES_READ_FAILED",
                "Failed to read the assistant thread messages.",
                {"threadId": request.thread_id, "causeErrorCode": cause_code(e)},
                cause=e,
            )

        if payload is None:
            raise ThreadNotFoundError(request.thread_id)

        try:
            return ThreadMessagesResult.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Thread messages failed validation: {e}")
            raise OutputValidationError(
                "LLM_ASSISTANT_THREAD_MESSAGES_INVALID",
                "The assistant thread messages are invalid.",
                {"threadId": request.thread_id, "issues": _validation_issues(e)},
                cause=e,
            )


# Global service instance
_service: Optional[AssistantLiteService] = None


def get_service() -> AssistantLiteService:
    """Get or create the global service instance."""
    global _service
    if _service is None:
        _service = AssistantLiteService()
    return _service
