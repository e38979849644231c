"""Sync-Modul: Abgleich WebUntis-Schuljahr → Klassen und Kurse."""

from .errors import (
    AuthenticationFailed,
    NoConfiguration,
    PersistenceFailure,
    SyncError,
    UpstreamUnavailable,
)
from .reconciler import SyncStats, TimetableReconciler
from .syncer import RunStatus, SchoolyearSyncer, SyncRunReport

__all__ = [
    "AuthenticationFailed",
    "NoConfiguration",
    "PersistenceFailure",
    "SyncError",
    "UpstreamUnavailable",
    "SyncStats",
    "TimetableReconciler",
    "RunStatus",
    "SchoolyearSyncer",
    "SyncRunReport",
]
