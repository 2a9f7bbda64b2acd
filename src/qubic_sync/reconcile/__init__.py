"""
Source tree reconciliation.

Aligns the compile-time epoch and tick constants of a node source checkout
with the epoch of a downloaded snapshot.
"""

from .config import ARTIFACT_PATH, MAX_SEARCH_DEPTH
from .history import GitHistory, InMemoryHistory, RevisionHistory
from .markers import (
    EpochSourceRecord,
    VersionMarkers,
    parse_markers,
    patch_define,
    read_define,
    read_markers,
    write_markers,
)
from .reconciler import (
    EpochSourceReconciler,
    MissingEpochPolicy,
    ReconcileOutcome,
    ReconcileResult,
    patch_max_processors,
    reconcile_source,
)

__all__ = [
    # Reconciler
    "EpochSourceReconciler",
    "MissingEpochPolicy",
    "ReconcileOutcome",
    "ReconcileResult",
    "reconcile_source",
    "patch_max_processors",
    # History
    "RevisionHistory",
    "GitHistory",
    "InMemoryHistory",
    # Markers
    "VersionMarkers",
    "EpochSourceRecord",
    "parse_markers",
    "read_define",
    "read_markers",
    "write_markers",
    "patch_define",
    # Constants
    "ARTIFACT_PATH",
    "MAX_SEARCH_DEPTH",
]
