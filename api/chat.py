"""Chat turn orchestration: search, history, prompt, model call, session update."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from src.context import MAX_HISTORY_ENTRIES, HistoryEntry, assemble_prompt
from src.errors import MissingInputError, UnconfiguredError
from src.llm_client import LLMClient
from src.search_client import SearchClient

from .session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class Source:
    title: str
    path: str


@dataclass
class ChatReply:
    message: str
    thread_id: str
    sources: list[Source] = field(default_factory=list)


class ChatOrchestrator:
    def __init__(
        self,
        search_client: SearchClient,
        llm_client: LLMClient | None,
        store: SessionStore,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.search_client = search_client
        self.llm_client = llm_client
        self.store = store
        self._clock = clock

    async def handle(self, message: str | None, thread_id: str | None = None) -> ChatReply:
        if not message:
            raise MissingInputError()
        if self.llm_client is None:
            raise UnconfiguredError()

        t0 = self._clock()
        results = await self.search_client.search_docs(message)

        history: list[HistoryEntry] = []
        if thread_id:
            session = self.store.get(thread_id)
            if session is not None:
                self.store.touch(thread_id)
                history = session.entries

        prompt = assemble_prompt(message, results, history)
        completion = await self.llm_client.complete(prompt)

        thread_id = thread_id or self.store.new_session_id()
        entries = [
            *history,
            HistoryEntry(role="user", text=message),
            HistoryEntry(role="assistant", text=completion.text),
        ][-MAX_HISTORY_ENTRIES:]
        self.store.put(thread_id, entries)
        self.store.enforce_capacity()

        logger.info(
            "thread=%s search_hits=%d history=%d total=%.0fms",
            thread_id, len(results), len(history), (self._clock() - t0) * 1000,
        )

        return ChatReply(
            message=completion.text,
            thread_id=thread_id,
            sources=[Source(title=r.title, path=r.path) for r in results if r.path],
        )
