"""
Session Store

In-memory holder for ephemeral dialogue sessions (quiz, capacity interview)
with inactivity-based expiry.

Expiry is lazy: a session idle longer than the timeout is deleted when it
is next read. `cleanup()` performs the same check eagerly and is run
periodically by the application for memory hygiene.

Concurrency model:
- A map lock guards the session dictionary itself (short critical sections)
- A re-entrant per-key lock, taken via `locked(key)`, serialises a whole
  read-modify-write dialogue step for one user
- Different keys never contend on the per-key lock

Sessions do not survive a process restart.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterator, Optional

from ...models.assessment import Session, SessionKind

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = timedelta(minutes=30)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Per-key session holder for one session kind.

    The application keeps one store per SessionKind, so a user has at most
    one session of each kind.
    """

    def __init__(
        self,
        kind: SessionKind,
        timeout: timedelta = DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.kind = kind
        self.timeout = timeout
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._map_lock = threading.Lock()
        self._key_locks: Dict[str, threading.RLock] = {}

    # =========================================================================
    # LOCKING
    # =========================================================================

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        """Hold the per-key lock for the duration of one logical operation."""
        with self._map_lock:
            key_lock = self._key_locks.get(key)
            if key_lock is None:
                key_lock = threading.RLock()
                self._key_locks[key] = key_lock
        with key_lock:
            yield

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, key: str, state: Any) -> Session:
        """Create a session for key, replacing any existing one."""
        now = self._clock()
        session = Session(
            key=key,
            kind=self.kind,
            state=state,
            started_at=now,
            last_activity=now,
        )
        with self._map_lock:
            replaced = key in self._sessions
            self._sessions[key] = session
        if replaced:
            logger.info(f"Replaced existing {self.kind.value} session for {key}")
        else:
            logger.info(f"Created {self.kind.value} session for {key}")
        return session

    def get(self, key: str) -> Optional[Session]:
        """Return the live session for key, or None if absent or expired."""
        with self._map_lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            if self._is_expired(session):
                del self._sessions[key]
                logger.info(f"{self.kind.value} session for {key} expired")
                return None
            return session

    def update(self, key: str, **patch: Any) -> Optional[Session]:
        """
        Merge fields into the session state and refresh last_activity.

        Returns None when there is no live session for key.
        """
        session = self.get(key)
        if session is None:
            return None
        with self._map_lock:
            session.state = replace(session.state, **patch) if patch else session.state
            session.last_activity = self._clock()
        return session

    def touch(self, key: str) -> Optional[Session]:
        return self.update(key)

    def delete(self, key: str) -> bool:
        with self._map_lock:
            return self._sessions.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def cleanup(self) -> int:
        """Eagerly drop every expired session. Returns how many were removed."""
        with self._map_lock:
            expired = [k for k, s in self._sessions.items() if self._is_expired(s)]
            for key in expired:
                del self._sessions[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired {self.kind.value} sessions")
        return len(expired)

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._sessions)

    def _is_expired(self, session: Session) -> bool:
        return self._clock() - session.last_activity > self.timeout
