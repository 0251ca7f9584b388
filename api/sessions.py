"""In-memory session store shared by the game routers."""

from __future__ import annotations

import logging
import random
import threading
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from config import MAX_SESSIONS

logger = logging.getLogger(__name__)


class Session:
    """One engine state plus the Random instance that drives its draws."""

    def __init__(self, state: Any, rng: random.Random):
        self.state = state
        self.rng = rng


class SessionStore:
    """Holds sessions by id.

    Engines are not thread-safe and FastAPI runs sync endpoints on a thread
    pool, so routes must hold `lock` around every engine call.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max_sessions
        self.lock = threading.RLock()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, state: Any, rng: random.Random) -> str:
        """Register a session and return its id.

        When the store is full, finished games are evicted oldest first
        to make room.

        Raises:
            HTTPException 429: If the store is full of running games.
        """
        with self.lock:
            if len(self._sessions) >= self.max_sessions:
                self._evict_finished(len(self._sessions) - self.max_sessions + 1)
            if len(self._sessions) >= self.max_sessions:
                raise HTTPException(status_code=429, detail="Too many active sessions")
            session_id = str(uuid4())
            self._sessions[session_id] = Session(state, rng)
            return session_id

    def _evict_finished(self, count: int) -> None:
        # Dicts keep insertion order, so this walks oldest first
        finished = [sid for sid, s in self._sessions.items() if s.state.is_game_over]
        for session_id in finished[:count]:
            del self._sessions[session_id]
            logger.info("Evicted finished session %s", session_id)

    def get(self, session_id: str) -> Session:
        """Look up a session.

        Raises:
            HTTPException 404: If the id is unknown.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
        return session

    def remove(self, session_id: str) -> bool:
        with self.lock:
            return self._sessions.pop(session_id, None) is not None
