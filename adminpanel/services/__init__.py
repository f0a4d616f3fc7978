"""Session store and authentication services."""

from adminpanel.services.session_store import (
    Session,
    SessionCleanupTask,
    SessionStore,
    session_store,
)

__all__ = [
    "Session",
    "SessionCleanupTask",
    "SessionStore",
    "session_store",
]
