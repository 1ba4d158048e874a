"""Async client and two-tier progress store for the Questlog API."""

from questlog.client.api import QuestlogClient, StoreUnavailable
from questlog.client.stores import (
    LocalCache,
    PendingWrite,
    RemoteStore,
    StorePolicy,
    SubjectProgressStore,
    SyncResult,
    TieredProgressStore,
    UnknownSubject,
)

__all__ = [
    "LocalCache",
    "PendingWrite",
    "QuestlogClient",
    "RemoteStore",
    "StorePolicy",
    "StoreUnavailable",
    "SubjectProgressStore",
    "SyncResult",
    "TieredProgressStore",
    "UnknownSubject",
]
