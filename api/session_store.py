"""In-memory session store for multi-turn chat history."""

import asyncio
import logging
import time
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Callable

from src.context import MAX_HISTORY_ENTRIES, HistoryEntry

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 30 * 60  # 30 minutes
SWEEP_INTERVAL_SECONDS = 5 * 60
MAX_SESSIONS = 100


@dataclass
class Session:
    entries: list[HistoryEntry] = field(default_factory=list)
    last_access: float = 0.0


class SessionStore:
    """
    Thread id -> bounded history, with idle expiry and a hard size cap.

    Reads do not refresh `last_access`; callers `touch` a session when they use
    it. When the store grows past `max_sessions`, the oldest-inserted key goes
    first (dict order), which is not a true LRU.
    """

    def __init__(
        self,
        ttl: float = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_sessions = max_sessions
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def new_session_id(self) -> str:
        return f"thread_{int(self._clock() * 1000)}"

    def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session, self._clock()):
            del self._sessions[session_id]
            return None
        return Session(entries=list(session.entries), last_access=session.last_access)

    def touch(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_access = self._clock()

    def put(
        self,
        session_id: str,
        entries: list[HistoryEntry],
        last_access: float | None = None,
    ) -> None:
        self._sessions[session_id] = Session(
            entries=list(entries)[-MAX_HISTORY_ENTRIES:],
            last_access=self._clock() if last_access is None else last_access,
        )

    def sweep_expired(self, now: float | None = None) -> None:
        now = self._clock() if now is None else now
        expired = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Swept %d expired session(s), %d remaining", len(expired), len(self._sessions))
        else:
            logger.debug("Sweep found no expired sessions")

    def enforce_capacity(self) -> None:
        if len(self._sessions) <= self.max_sessions:
            return
        oldest = next(iter(self._sessions))
        del self._sessions[oldest]
        logger.info("Session store over capacity, evicted %s", oldest)

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.last_access > self.ttl

    # ── Background sweep ────────────────────────────────────────────────────

    def start(self) -> None:
        if self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info("Session sweep started (every %ss, ttl %ss)", self.sweep_interval, self.ttl)

    async def stop(self) -> None:
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Session sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep_expired()
