"""API routes package."""

from questlog.api.routes import (
    auth,
    data,
    goals,
    kv_sessions,
    pips,
    sessions,
    settings,
    subjects,
    templates,
)

__all__ = [
    "auth",
    "data",
    "goals",
    "kv_sessions",
    "pips",
    "sessions",
    "settings",
    "subjects",
    "templates",
]
