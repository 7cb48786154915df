"""
Conversation store tests.

Exercises the atomic exchange write, the channel guard, rollback on
failure and the two read paths.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from db.models import AssistantMessage, AssistantThread, MessageEvidence
from memory.assistant_store import (
    AssistantStore,
    Exchange,
    decode_evidence_tool,
    decode_string_list,
    resolve_thread_id,
    to_iso_datetime,
)
from registry.errors import PersistenceError, ThreadChannelMismatchError
from registry.schemas import EvidenceItem
from conftest import count_rows

T0 = datetime(2026, 2, 16, 10, 0, tzinfo=timezone.utc)


def make_exchange(
    question="Jak idzie?",
    channel_id="C1",
    thread_id=None,
    created_at=T0,
    evidence=None,
):
    return Exchange(
        channel_id=channel_id,
        thread_id=thread_id,
        question=question,
        title=question,
        answer=f"Answer to: {question}",
        confidence="medium",
        follow_up_questions=["Would you like a comparison with the previous period?"],
        evidence=evidence if evidence is not None else [
            EvidenceItem(
                evidence_id="ev-channel-C1",
                tool="read_channel_info",
                label="Channel basics",
                value="Subscribers: 11,068, videos: 45",
                source_table="dim_channel",
                source_record_id="channel_id=C1",
            ),
        ],
        created_at=created_at,
    )


def row_counts(session_factory):
    return (
        count_rows(session_factory, AssistantThread),
        count_rows(session_factory, AssistantMessage),
        count_rows(session_factory, MessageEvidence),
    )


@pytest.fixture
def store(session_factory):
    return AssistantStore(session_factory)


class TestHelpers:

    def test_iso_datetime_has_millisecond_precision(self):
        value = datetime(2026, 2, 16, 10, 0, 0, 123456, tzinfo=timezone.utc)
        assert to_iso_datetime(value) == "2026-02-16T10:00:00.123Z"

    def test_iso_datetime_converts_to_utc(self):
        value = datetime(2026, 2, 16, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso_datetime(value) == "2026-02-16T10:00:00.000Z"

    def test_thread_id_is_trimmed(self):
        assert resolve_thread_id("  t-1  ") == "t-1"

    @pytest.mark.parametrize("requested", [None, "", "   "])
    def test_blank_thread_id_gets_uuid(self, requested):
        assert len(resolve_thread_id(requested)) == 36

    @pytest.mark.parametrize("raw,expected", [
        ('["a", "b"]', ["a", "b"]),
        ("not json", []),
        ('{"a": 1}', []),
        ('["ok", "", "  ", 3, null]', ["ok"]),
        (None, []),
    ])
    def test_decode_string_list(self, raw, expected):
        assert decode_string_list(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("read_kpis", "read_kpis"),
        ("read_top_videos", "read_top_videos"),
        ("read_revenue", "read_anomalies"),
        (None, "read_anomalies"),
    ])
    def test_decode_evidence_tool(self, raw, expected):
        assert decode_evidence_tool(raw) == expected


class TestPersistExchange:

    def test_writes_thread_pair_and_evidence(self, store, session_factory):
        persisted = store.persist_exchange(make_exchange())

        assert persisted.message_id >= 1
        assert persisted.created_at == "2026-02-16T10:00:00.000Z"
        assert row_counts(session_factory) == (1, 2, 1)

        payload = store.get_thread_messages(persisted.thread_id)
        user, assistant = payload["messages"]
        assert (user["role"], assistant["role"]) == ("user", "assistant")
        assert user["confidence"] is None
        assert user["follow_up_questions"] == []
        assert assistant["message_id"] == persisted.message_id
        assert assistant["confidence"] == "medium"
        assert assistant["evidence"][0]["evidence_id"] == "ev-channel-C1"

    def test_thread_grows_by_pairs(self, store):
        thread_id = store.persist_exchange(make_exchange("first")).thread_id
        for i in range(2):
            store.persist_exchange(make_exchange(
                f"next {i}", thread_id=thread_id, created_at=T0 + timedelta(minutes=i + 1)))

        messages = store.get_thread_messages(thread_id)["messages"]
        assert len(messages) == 6
        assert [m["role"] for m in messages] == ["user", "assistant"] * 3

    def test_existing_thread_keeps_title_and_touches_updated_at(self, store, session_factory):
        thread_id = store.persist_exchange(make_exchange("first")).thread_id
        store.persist_exchange(make_exchange(
            "second", thread_id=thread_id, created_at=T0 + timedelta(hours=1)))

        [item] = store.list_threads()
        assert item["title"] == "first"
        assert item["created_at"] == "2026-02-16T10:00:00.000Z"
        assert item["updated_at"] == "2026-02-16T11:00:00.000Z"

    def test_channel_mismatch_writes_nothing(self, store, session_factory):
        thread_id = store.persist_exchange(make_exchange(channel_id="C1")).thread_id
        before = row_counts(session_factory)

        with pytest.raises(ThreadChannelMismatchError) as exc_info:
            store.persist_exchange(make_exchange(channel_id="C2", thread_id=thread_id))

        assert exc_info.value.code == "LLM_ASSISTANT_THREAD_CHANNEL_MISMATCH"
        assert exc_info.value.context == {
            "threadId": thread_id,
            "expectedChannelId": "C1",
            "requestedChannelId": "C2",
        }
        assert row_counts(session_factory) == before

    def test_evidence_failure_rolls_back_everything(self, store, session_factory):
        broken = EvidenceItem.model_construct(
            evidence_id=None,
            tool="read_kpis",
            label="Total views",
            value="1",
            source_table="fact_channel_day",
            source_record_id="channel_id=C1",
        )

        with pytest.raises(PersistenceError) as exc_info:
            store.persist_exchange(make_exchange(thread_id="t-broken", evidence=[broken]))

        error = exc_info.value
        assert error.code == "LLM_ASSISTANT_PERSIST_FAILED"
        assert error.context["causeErrorCode"] == "DB_ASSISTANT_EVIDENCE_INSERT_FAILED"
        assert error.context["threadId"] == "t-broken"
        assert row_counts(session_factory) == (0, 0, 0)
        assert store.get_thread_messages("t-broken") is None


class TestReads:

    def test_list_orders_by_updated_at_then_thread_id(self, store):
        store.persist_exchange(make_exchange("b", thread_id="t-b"))
        store.persist_exchange(make_exchange("a", thread_id="t-a"))
        store.persist_exchange(make_exchange(
            "c", thread_id="t-c", created_at=T0 - timedelta(days=1)))

        assert [item["thread_id"] for item in store.list_threads()] == ["t-a", "t-b", "t-c"]

        store.persist_exchange(make_exchange(
            "c again", thread_id="t-c", created_at=T0 + timedelta(minutes=5)))

        items = store.list_threads()
        assert [item["thread_id"] for item in items] == ["t-c", "t-a", "t-b"]
        assert items[0]["last_question"] == "c again"

    def test_list_filters_by_channel_and_limit(self, store):
        store.persist_exchange(make_exchange("one", channel_id="C1", thread_id="t-1"))
        store.persist_exchange(make_exchange("two", channel_id="C2", thread_id="t-2"))
        store.persist_exchange(make_exchange("three", channel_id="C1", thread_id="t-3"))

        assert [i["thread_id"] for i in store.list_threads(channel_id="C2")] == ["t-2"]
        assert len(store.list_threads(channel_id="C1", limit=1)) == 1

    def test_missing_thread_returns_none(self, store):
        assert store.get_thread_messages("nope") is None

    def test_malformed_follow_ups_decode_to_empty(self, store, session_factory):
        persisted = store.persist_exchange(make_exchange())

        session = session_factory()
        try:
            session.execute(
                update(AssistantMessage)
                .where(AssistantMessage.id == persisted.message_id)
                .values(follow_up_questions_json="{broken")
            )
            session.commit()
        finally:
            session.close()

        messages = store.get_thread_messages(persisted.thread_id)["messages"]
        assert messages[1]["follow_up_questions"] == []

    def test_history_keeps_evidence_insertion_order(self, store):
        evidence = [
            EvidenceItem(
                evidence_id=f"ev-{name}",
                tool="read_kpis",
                label=name,
                value="1",
                source_table="fact_channel_day",
                source_record_id="channel_id=C1",
            )
            for name in ("zeta", "alpha", "mid", "beta")
        ]
        persisted = store.persist_exchange(make_exchange(evidence=evidence))

        messages = store.get_thread_messages(persisted.thread_id)["messages"]

        assert messages[0]["evidence"] == []
        assert [item["evidence_id"] for item in messages[1]["evidence"]] == [
            "ev-zeta", "ev-alpha", "ev-mid", "ev-beta",
        ]

    def test_unknown_stored_tool_reads_as_anomalies(self, store, session_factory):
        persisted = store.persist_exchange(make_exchange())

        session = session_factory()
        try:
            session.execute(
                update(MessageEvidence)
                .where(MessageEvidence.message_id == persisted.message_id)
                .values(tool_name="read_legacy_metric")
            )
            session.commit()
        finally:
            session.close()

        [item] = store.get_thread_messages(persisted.thread_id)["messages"][1]["evidence"]
        assert item["tool"] == "read_anomalies"
        assert item["evidence_id"] == "ev-channel-C1"
