"""
End-to-end tests for AssistantLiteService.

Runs the whole pipeline (plan, tools, synthesis, persistence) against
seeded in-memory databases with a fixed clock.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from conftest import count_rows, make_seeded_session_factory
from db.models import AssistantMessage, AssistantThread, MessageEvidence
from executor.clock import FixedClock
from executor.execute import AssistantLiteService
from registry.errors import (
    ChannelNotFoundError,
    DependencyFailureError,
    ThreadChannelMismatchError,
    ThreadNotFoundError,
)
from registry.schemas import AskInput

FILMS_QUESTION = "Jak szly moje filmy w ostatnim miesiacu?"
RANGE = {"dateFrom": "2026-01-17", "dateTo": "2026-02-15"}


def ask_films(service, **overrides):
    payload = {
        "channelId": "C1",
        "question": FILMS_QUESTION,
        "targetMetric": "views",
        **RANGE,
        **overrides,
    }
    return service.ask(payload)


class TestAskScenario:

    def test_polish_films_question(self, service):
        result = ask_films(service)

        assert result.used_stub is True
        assert len(result.evidence) > 0
        assert len(result.answer) > 20
        assert result.answer.startswith(
            "Based on the stored data (range 2026-01-17 - 2026-02-15): ")
        assert result.created_at == "2026-02-16T10:00:00.000Z"

        history = service.get_thread_messages(result.thread_id)
        assert len(history.messages) == 2
        assistant = history.messages[1]
        assert assistant.role == "assistant"
        assert assistant.message_id == result.message_id
        assert len(assistant.evidence) > 0

    def test_history_evidence_matches_ask_result_order(self, service):
        result = ask_films(service)

        assistant = service.get_thread_messages(result.thread_id).messages[1]

        assert len(result.evidence) == 7
        assert [e.evidence_id for e in assistant.evidence] == [
            e.evidence_id for e in result.evidence
        ]
        assert assistant.evidence == result.evidence

    def test_films_question_selects_top_videos(self, service):
        result = ask_films(service)

        tables = [item.source_table for item in result.evidence]
        assert tables == ["dim_channel"] + ["fact_channel_day"] * 3 + ["dim_video"] * 3
        assert result.confidence == "high"
        assert result.follow_up_questions == [
            "Would you like a comparison with the previous period?",
            "Should I break the results down day by day?",
            "Should I show the top 5 videos with the most views?",
        ]

    def test_anomaly_question_reads_ml_anomalies(self, service):
        result = service.ask({"channelId": "C1", "question": "Czy byly jakies anomalie?", **RANGE})

        assert "ml_anomalies" in {item.source_table for item in result.evidence}
        assert "dim_video" not in {item.source_table for item in result.evidence}
        assert result.follow_up_questions[-1] == (
            "Should I describe the detected anomalies with a likely cause?")

    def test_generic_question_reads_only_baseline_tables(self, service):
        result = service.ask({"channelId": "C1", "question": "How is my channel doing?", **RANGE})

        assert {item.source_table for item in result.evidence} == {
            "dim_channel", "fact_channel_day",
        }
        assert len(result.evidence) == 4
        assert result.confidence == "medium"
        assert len(result.follow_up_questions) == 2

    def test_default_range_comes_from_clock(self, service):
        result = service.ask(AskInput(channel_id="C1", question="How is my channel doing?"))
        assert result.answer.startswith(
            "Based on the stored data (range 2026-01-18 - 2026-02-16): ")

    def test_accepts_snake_case_input(self, service):
        result = service.ask({
            "channel_id": "C1",
            "question": "How is my channel doing?",
            "date_from": "2026-01-17",
            "date_to": "2026-02-15",
        })
        assert result.confidence == "medium"

    def test_serializes_camel_case(self, service):
        data = ask_films(service).model_dump(by_alias=True)
        assert {"threadId", "messageId", "followUpQuestions", "usedStub", "createdAt"} <= set(data)
        assert set(data["evidence"][0]) == {
            "evidenceId", "tool", "label", "value", "sourceTable", "sourceRecordId",
        }


class TestDeterminism:

    def test_identical_databases_give_identical_answers(self, fixed_clock, settings):
        results = []
        for _ in range(2):
            engine, session_factory = make_seeded_session_factory()
            service = AssistantLiteService(
                session_factory=session_factory, clock=fixed_clock, settings=settings)
            results.append(service.ask({
                "channelId": "C1",
                "question": "Top filmy i anomalie?",
                **RANGE,
            }))
            engine.dispose()

        first, second = results
        assert first.answer == second.answer
        assert first.confidence == second.confidence
        assert first.follow_up_questions == second.follow_up_questions
        assert [e.value for e in first.evidence] == [e.value for e in second.evidence]

    def test_repeated_question_in_same_database(self, service):
        first = ask_films(service)
        second = ask_films(service)
        assert first.answer == second.answer
        assert first.thread_id != second.thread_id


class TestThreads:

    def test_thread_grows_by_two_per_ask(self, service):
        thread_id = ask_films(service).thread_id
        for n in range(2, 5):
            ask_films(service, threadId=thread_id)
            messages = service.get_thread_messages(thread_id).messages
            assert len(messages) == 2 * n
            assert [m.role for m in messages] == ["user", "assistant"] * n

    def test_thread_title_is_truncated(self, service):
        question = "Jak szly moje filmy " + "bardzo " * 20
        result = service.ask({"channelId": "C1", "question": question, **RANGE})

        [item] = service.list_threads({"channelId": "C1"}).items
        assert item.thread_id == result.thread_id
        assert len(item.title) == 96
        assert item.title.endswith("...")
        assert item.last_question == question

    def test_mismatch_guard_leaves_counts_unchanged(self, service, session_factory):
        thread_id = ask_films(service).thread_id
        before = [
            count_rows(session_factory, model)
            for model in (AssistantThread, AssistantMessage, MessageEvidence)
        ]

        with pytest.raises(ThreadChannelMismatchError):
            ask_films(service, channelId="C2", threadId=thread_id)

        after = [
            count_rows(session_factory, model)
            for model in (AssistantThread, AssistantMessage, MessageEvidence)
        ]
        assert after == before

    def test_list_threads_defaults(self, service):
        ask_films(service)
        ask_films(service, channelId="C2")

        assert len(service.list_threads().items) == 2
        assert len(service.list_threads({"channelId": "C2"}).items) == 1

    def test_list_threads_validates_limit(self, service):
        with pytest.raises(ValidationError):
            service.list_threads({"limit": 0})

    def test_unknown_thread(self, service):
        with pytest.raises(ThreadNotFoundError) as exc_info:
            service.get_thread_messages("does-not-exist")
        assert exc_info.value.context == {"threadId": "does-not-exist"}

    def test_store_failure_on_list_is_wrapped(self, service):
        service.assistant_store = MagicMock()
        service.assistant_store.list_threads.side_effect = DependencyFailureError(
            "DB_ASSISTANT_THREADS_READ_FAILED", "down")

        with pytest.raises(DependencyFailureError) as exc_info:
            service.list_threads()

        assert exc_info.value.code == "LLM_ASSISTANT_THREADS_READ_FAILED"
        assert exc_info.value.context["causeErrorCode"] == "DB_ASSISTANT_THREADS_READ_FAILED"


class TestFailures:

    def test_unknown_channel_persists_nothing(self, service, session_factory):
        with pytest.raises(ChannelNotFoundError):
            service.ask({"channelId": "missing", "question": "Jak idzie?", **RANGE})
        assert count_rows(session_factory, AssistantThread) == 0

    def test_metrics_failure_aborts_before_persisting(self, session_factory, fixed_clock, settings):
        metrics = MagicMock()
        metrics.get_kpis.side_effect = DependencyFailureError("DB_KPI_READ_FAILED", "down")
        service = AssistantLiteService(
            session_factory=session_factory, metrics=metrics,
            clock=fixed_clock, settings=settings)

        with pytest.raises(DependencyFailureError) as exc_info:
            ask_films(service)

        assert exc_info.value.code == "LLM_ASSISTANT_READ_KPIS_FAILED"
        assert count_rows(session_factory, AssistantMessage) == 0

    @pytest.mark.parametrize("payload", [
        {"channelId": "C1", "question": ""},
        {"channelId": "C1", "question": "   "},
        {"channelId": "C1", "question": "x" * 2001},
        {"channelId": "C1", "question": "ok", "dateFrom": "16.02.2026", "dateTo": "2026-02-16"},
        {"channelId": "C1", "question": "ok", "targetMetric": "revenue"},
        {"channelId": "C" * 65, "question": "ok"},
        {"channelId": "C1", "question": "ok", "threadId": "t" * 65},
    ])
    def test_invalid_input_is_rejected(self, service, payload):
        with pytest.raises(ValidationError):
            service.ask(payload)

    def test_clock_is_the_only_time_source(self, session_factory, settings):
        clock = FixedClock(datetime(2030, 5, 1, 8, 30, 15, 250000, tzinfo=timezone.utc))
        service = AssistantLiteService(
            session_factory=session_factory, clock=clock, settings=settings)

        result = ask_films(service)
        assert result.created_at == "2030-05-01T08:30:15.250Z"

    def test_thread_id_at_column_width_is_accepted(self, service):
        thread_id = "t" * 64
        result = ask_films(service, threadId=thread_id)
        assert result.thread_id == thread_id

    def test_thread_lookup_rejects_overlong_id(self, service):
        with pytest.raises(ValidationError):
            service.get_thread_messages("t" * 65)
