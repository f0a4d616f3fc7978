"""
In-Memory Session Store

Maps opaque session tokens to the authenticated username with a
per-session expiry.

Key features:
- Lazy eviction: an expired entry is removed by the read that finds it
- Optional periodic sweep to bound memory (SessionCleanupTask)
- Thread-safe via threading.Lock, so it can be shared by event-loop
  tasks and threadpool-dispatched handlers alike
- Injectable clock for deterministic tests
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from adminpanel.core.config import settings
from adminpanel.core.logging_config import mask_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """One authenticated session; expires_at is in epoch milliseconds."""

    username: str
    expires_at: int


class SessionStore:
    """
    Process-wide token -> session mapping with time-based expiry.

    Attributes:
        clock: Returns the current time in seconds since the epoch
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def _now_millis(self) -> int:
        return int(self.clock() * 1000)

    def set(self, token: str, username: str, max_age: int) -> None:
        """
        Store a session, replacing any existing one for the token.

        Re-setting an existing token resets its expiry.

        Args:
            token: Opaque session token
            username: Authenticated identity
            max_age: Lifetime in seconds

        Raises:
            ValueError: If max_age is negative
        """
        if max_age < 0:
            raise ValueError("max_age must not be negative")

        expires_at = self._now_millis() + max_age * 1000
        with self._lock:
            self._sessions[token] = Session(username=username, expires_at=expires_at)
        logger.debug("Session stored", extra={"session": mask_token(token)})

    def get(self, token: str) -> Optional[str]:
        """
        Return the username for a live session.

        An expired session is removed as a side effect and reported as absent.

        Returns:
            The username, or None if the token is unknown or expired
        """
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at > self._now_millis():
                return session.username
            del self._sessions[token]

        logger.debug("Session expired", extra={"session": mask_token(token)})
        return None

    def remove(self, token: str) -> None:
        """Delete a session. Removing an unknown token is a no-op."""
        with self._lock:
            self._sessions.pop(token, None)

    def cleanup_expired_sessions(self) -> int:
        """
        Remove every session whose expiry has passed.

        Returns:
            Number of sessions removed
        """
        now = self._now_millis()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.expires_at <= now]
            for token in expired:
                del self._sessions[token]

        if expired:
            logger.info("Expired sessions removed", extra={"removed": len(expired)})
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        """Raw presence check; does not evict or consider expiry."""
        with self._lock:
            return token in self._sessions

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


class SessionCleanupTask:
    """
    Background task calling cleanup_expired_sessions() every interval.

    Example:
        cleanup = SessionCleanupTask(session_store, interval_seconds=300)
        cleanup.start()
        ...
        await cleanup.stop()
    """

    def __init__(self, store: SessionStore, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-cleanup")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.store.cleanup_expired_sessions()


# Process-wide session store
session_store = SessionStore()


def create_cleanup_task(store: SessionStore = session_store) -> SessionCleanupTask:
    """Cleanup task for ``store`` using the configured sweep interval."""
    return SessionCleanupTask(store, settings.session_cleanup_interval_seconds)
