"""Per-session gate: at most one extraction in flight per session."""

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExtractionInProgress(Exception):
    """The session already has an extraction running."""


class ExtractionSession:
    """Holds only a lock; results are never kept on the session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def acquire(self):
        if not self._lock.acquire(blocking=False):
            logger.info("Rejected extraction: session %s already busy", self.session_id)
            raise ExtractionInProgress(
                "An analysis is already running for this session. Wait for it to finish."
            )

    def release(self):
        self._lock.release()

    def run(self, fn: Callable[..., T], *args, **kwargs) -> T:
        self.acquire()
        try:
            return fn(*args, **kwargs)
        finally:
            self.release()


class SessionRegistry:
    """Tracks the sessions that currently have an extraction running.

    An entry exists only while its session is busy: it is created and
    acquired, then released and removed, under the registry lock.
    """

    def __init__(self):
        self._sessions: dict[str, ExtractionSession] = {}
        self._lock = threading.Lock()

    def run(self, session_id: str, fn: Callable[..., T], *args, **kwargs) -> T:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = ExtractionSession(session_id)
            session.acquire()
            self._sessions[session_id] = session

        try:
            return fn(*args, **kwargs)
        finally:
            with self._lock:
                session.release()
                del self._sessions[session_id]

    def busy(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
