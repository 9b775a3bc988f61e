"""
Per-client session state: an opaque token mapped to a current directory.

The store is created once at startup and handed to whatever transport
serves requests. Sessions live as long as the store.
"""

import logging
import secrets
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from dirshell.filesystem.sandbox import normalize_virtual

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def new_session_id() -> str:
    """Return a random 128-bit token, hex encoded."""
    return secrets.token_hex(TOKEN_BYTES)


class _ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Session:
    """
    A client's current virtual directory.

    `cwd` reads and writes take the session's own lock, so two requests
    carrying the same token cannot interleave a `cd`.
    """

    def __init__(self, session_id: str, cwd: str = "/"):
        self.id = session_id
        self._cwd = normalize_virtual(cwd)
        self._lock = threading.Lock()

    @property
    def cwd(self) -> str:
        with self._lock:
            return self._cwd

    @cwd.setter
    def cwd(self, value: str) -> None:
        with self._lock:
            self._cwd = normalize_virtual(value)

    def __repr__(self) -> str:
        return f"Session(id={self.id[:8]}..., cwd={self.cwd!r})"


class SessionStore:
    """
    Thread-safe map from session token to Session.

    Usage:
        store = SessionStore()
        session, created = store.get_or_create(cookie_value)
        if created:
            set_cookie("sid", session.id)
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = _ReadWriteLock()

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        """Look up a session; None for unknown or missing tokens."""
        if not session_id:
            return None
        with self._lock.read():
            return self._sessions.get(session_id)

    def create(self) -> Session:
        """Create and register a session rooted at `/`."""
        session = Session(new_session_id())
        with self._lock.write():
            self._sessions[session.id] = session
        logger.debug(f"Created session {session.id[:8]}")
        return session

    def get_or_create(self, session_id: Optional[str]) -> tuple[Session, bool]:
        """
        Return the session for session_id, creating one if it is unknown.

        Returns:
            (session, created)
        """
        session = self.get(session_id)
        if session is not None:
            return session, False
        return self.create(), True

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None
