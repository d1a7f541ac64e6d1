"""Persistence helpers for login session history."""

from .sessions import (
    clear_sessions,
    known_addresses,
    list_sessions,
    record_session,
    revoke_other_sessions,
    revoke_session,
)

__all__ = [
    "clear_sessions",
    "known_addresses",
    "list_sessions",
    "record_session",
    "revoke_other_sessions",
    "revoke_session",
]
