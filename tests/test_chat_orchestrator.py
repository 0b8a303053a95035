import asyncio
import re

import pytest

from api.chat import ChatOrchestrator, Source
from api.session_store import SESSION_TTL_SECONDS, SessionStore
from src.errors import MissingInputError, UnconfiguredError, UpstreamError
from src.llm_client import Completion, TokenUsage
from src.search_client import SearchResult


class FakeSearch:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    async def search_docs(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return list(self.results)


class FakeLLM:
    def __init__(self):
        self.prompts = []

    async def complete(self, user_content):
        self.prompts.append(user_content)
        return Completion(text=f"answer {len(self.prompts)}", usage=TokenUsage())


def _orchestrator(clock, results=None, llm=True, search_error=None, **store_kwargs):
    store = SessionStore(clock=clock, **store_kwargs)
    search = FakeSearch(results, search_error)
    return ChatOrchestrator(search, FakeLLM() if llm else None, store), search, store


def test_missing_message_fails_before_any_work(clock):
    orchestrator, search, store = _orchestrator(clock)

    for message in (None, ""):
        with pytest.raises(MissingInputError):
            asyncio.run(orchestrator.handle(message, "thread_1"))

    assert search.queries == []
    assert len(store) == 0


def test_unconfigured_model(clock):
    orchestrator, search, store = _orchestrator(clock, llm=False)

    with pytest.raises(UnconfiguredError):
        asyncio.run(orchestrator.handle("hello"))

    assert search.queries == []


def test_new_thread_id_minted_and_session_created(clock):
    orchestrator, search, store = _orchestrator(clock)

    reply = asyncio.run(orchestrator.handle("hello"))

    assert re.fullmatch(r"thread_\d+", reply.thread_id)
    assert reply.message == "answer 1"
    assert search.queries == ["hello"]
    entries = store.get(reply.thread_id).entries
    assert [(e.role, e.text) for e in entries] == [("user", "hello"), ("assistant", "answer 1")]


def test_history_capped_to_most_recent_entries(clock):
    orchestrator, _, store = _orchestrator(clock)

    thread_id = None
    for i in range(5):
        thread_id = asyncio.run(orchestrator.handle(f"q{i}", thread_id)).thread_id

    entries = store.get(thread_id).entries
    assert [e.text for e in entries] == ["q3", "answer 4", "q4", "answer 5"]


def test_existing_history_feeds_prompt(clock):
    orchestrator, _, _ = _orchestrator(clock)

    thread_id = asyncio.run(orchestrator.handle("first question")).thread_id
    asyncio.run(orchestrator.handle("second question", thread_id))

    prompt = orchestrator.llm_client.prompts[-1]
    assert "<conversation_history>\nuser: first question\nassistant: answer 1\n</conversation_history>" in prompt
    assert prompt.endswith("\n\nsecond question")


def test_expired_thread_treated_as_empty_history(clock):
    orchestrator, _, store = _orchestrator(clock)

    thread_id = asyncio.run(orchestrator.handle("first")).thread_id
    clock.advance(SESSION_TTL_SECONDS + 1)
    reply = asyncio.run(orchestrator.handle("again", thread_id))

    assert reply.thread_id == thread_id
    assert "<conversation_history>" not in orchestrator.llm_client.prompts[-1]
    assert [e.text for e in store.get(thread_id).entries] == ["again", "answer 2"]


def test_unknown_thread_id_is_kept(clock):
    orchestrator, _, store = _orchestrator(clock)

    reply = asyncio.run(orchestrator.handle("hi", "client-chosen"))

    assert reply.thread_id == "client-chosen"
    assert "client-chosen" in store


def test_sources_only_include_results_with_path(clock):
    results = [
        SearchResult(title="Accounts", content="...", path="/protocol/account-model"),
        SearchResult(title="Orphan", content="...", path=""),
    ]
    orchestrator, _, _ = _orchestrator(clock, results=results)

    reply = asyncio.run(orchestrator.handle("accounts"))

    assert reply.sources == [Source(title="Accounts", path="/protocol/account-model")]
    assert '<doc index="2">' in orchestrator.llm_client.prompts[0]


def test_search_failure_propagates_without_session_write(clock):
    orchestrator, _, store = _orchestrator(clock, search_error=UpstreamError("search", "down"))

    with pytest.raises(UpstreamError):
        asyncio.run(orchestrator.handle("hello", "thread_1"))

    assert len(store) == 0


def test_capacity_evicts_oldest_thread(clock):
    orchestrator, _, store = _orchestrator(clock, max_sessions=3)

    for sid in ["t1", "t2", "t3", "t4"]:
        asyncio.run(orchestrator.handle("hi", sid))

    assert len(store) == 3
    assert "t1" not in store
