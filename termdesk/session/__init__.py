"""Session lifecycle and recent-session persistence."""

from termdesk.session.controller import Session, SessionController, SessionState
from termdesk.session.recent_store import MAX_RECENT_SESSIONS, RecentSession, RecentSessionStore

__all__ = [
    "MAX_RECENT_SESSIONS",
    "RecentSession",
    "RecentSessionStore",
    "Session",
    "SessionController",
    "SessionState",
]
