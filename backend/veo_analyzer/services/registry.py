from __future__ import annotations
from typing import Callable, Dict

from veo_analyzer.core.exceptions import SessionNotFoundError
from veo_analyzer.core.logger import log_info
from veo_analyzer.services.session import Session


class SessionRegistry:
    """In-memory sessions keyed by id. Nothing is persisted."""

    def __init__(self, factory: Callable[[], Session]):
        self._factory = factory
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> Session:
        session = self._factory()
        self._sessions[session.id] = session
        log_info(f"SESSION id={session.id} created")
        return session

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def remove(self, session_id: str) -> None:
        session = self.get(session_id)
        del self._sessions[session_id]
        session.close()
        log_info(f"SESSION id={session_id} removed")

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)
