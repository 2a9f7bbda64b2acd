"""
Epoch source reconciliation.

Why Reconcile?
--------------
The node binary embeds the epoch and its initial tick as compile-time
constants. A snapshot downloaded for epoch N only works with a binary built
for epoch N; a mismatch makes the node misbehave in ways that are hard to
diagnose. The source checkout is usually at HEAD, which may already have
moved on to a newer epoch than the newest published snapshot.

How It Works
------------
1. Read the working tree's epoch marker. Equal to the target: nothing to do.
2. Walk the artifact's history, newest first, bounded by the search depth.
   Nothing in the working tree changes while scanning.
3. The first revision whose epoch equals the target provides the committed
   ``(epoch, tick)`` pair. Both constants always change in the same commit,
   so that pair is self-consistent.
4. Patch only those two constants into the working tree. Local edits to the
   rest of the tree survive.
5. Not found: either warn and leave the tree untouched, or fail, depending on
   the configured policy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Literal

from qubic_sync.types import EpochNotFoundError

from .config import ARTIFACT_PATH, MAX_PROCESSORS_MARKER, MAX_SEARCH_DEPTH
from .history import GitHistory, RevisionHistory
from .markers import (
    EpochSourceRecord,
    VersionMarkers,
    parse_markers,
    patch_define,
    read_markers,
    write_markers,
)

logger = logging.getLogger(__name__)

MissingEpochPolicy = Literal["warn", "fail"]
"""What to do when the target epoch is not in the searched history."""


class ReconcileOutcome(Enum):
    """How a reconciliation ended."""

    SKIPPED = auto()
    """No target epoch was given; the tree builds from whatever it holds."""

    ALREADY_ALIGNED = auto()
    """The working tree already carried the target epoch."""

    PATCHED = auto()
    """The markers were rewritten from a historical revision."""

    NOT_FOUND = auto()
    """The target epoch was not found; the tree was left untouched."""


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """The working tree's markers after reconciliation and how they got there."""

    outcome: ReconcileOutcome
    """How the reconciliation ended."""

    markers: VersionMarkers
    """Working-tree markers after the run."""

    revision: str | None = None
    """Revision the markers were taken from, when patched."""

    @property
    def changed(self) -> bool:
        """True if the working tree was modified."""
        return self.outcome is ReconcileOutcome.PATCHED


@dataclass(frozen=True, slots=True)
class EpochSourceReconciler:
    """Aligns a source checkout's version markers with a target epoch."""

    source_dir: Path
    """Root of the source checkout."""

    history: RevisionHistory
    """History of the version artifact."""

    artifact: str = ARTIFACT_PATH
    """Artifact path relative to ``source_dir``."""

    max_search_depth: int = MAX_SEARCH_DEPTH
    """Maximum revisions inspected when searching."""

    on_missing: MissingEpochPolicy = "warn"
    """Warn and keep the tree as-is, or raise ``EpochNotFoundError``."""

    def __post_init__(self) -> None:
        if self.max_search_depth < 1:
            raise ValueError(f"max_search_depth must be at least 1, got {self.max_search_depth}")

    @property
    def artifact_path(self) -> Path:
        """Absolute location of the working-tree artifact."""
        return self.source_dir / self.artifact

    def current_markers(self) -> VersionMarkers:
        """Read the working tree's markers."""
        return read_markers(self.artifact_path)

    def find_epoch(self, target_epoch: int) -> EpochSourceRecord | None:
        """
        Search the artifact's history for the newest revision pinned to ``target_epoch``.

        Revisions whose artifact cannot be read or lacks a marker are skipped.

        Returns:
            The matching record, or None if no inspected revision matches.
        """
        for revision in self.history.revisions(self.max_search_depth)[: self.max_search_depth]:
            content = self.history.read_artifact(revision)
            if content is None:
                continue
            markers = parse_markers(content)
            if markers is None:
                logger.debug("Revision %s has no version markers", revision[:8])
                continue
            if markers.epoch == target_epoch:
                return EpochSourceRecord(epoch=markers.epoch, tick=markers.tick, revision=revision)
        return None

    def reconcile(self, target_epoch: int | None) -> ReconcileResult:
        """
        Bring the working tree's markers in line with ``target_epoch``.

        Args:
            target_epoch: Epoch of the downloaded snapshot, or None to build from
                whatever the tree holds.

        Returns:
            The resulting markers and outcome.

        Raises:
            VersionMarkerError: If the working-tree artifact is missing or malformed.
            EpochNotFoundError: If the epoch is not found and the policy is "fail".
        """
        current = self.current_markers()

        if target_epoch is None:
            logger.info("No target epoch; building from current source (epoch %d)", current.epoch)
            return ReconcileResult(ReconcileOutcome.SKIPPED, current)

        if current.epoch == target_epoch:
            logger.info("Source already at epoch %d", target_epoch)
            return ReconcileResult(ReconcileOutcome.ALREADY_ALIGNED, current)

        logger.info("Searching for epoch %d in source history...", target_epoch)
        record = self.find_epoch(target_epoch)

        if record is None:
            if self.on_missing == "fail":
                raise EpochNotFoundError(target_epoch, self.max_search_depth)
            logger.warning(
                "Could not find epoch %d in the last %d revisions; keeping epoch %d, tick %d",
                target_epoch,
                self.max_search_depth,
                current.epoch,
                current.tick,
            )
            return ReconcileResult(ReconcileOutcome.NOT_FOUND, current)

        write_markers(self.artifact_path, record.markers)
        logger.info(
            "Patched markers to epoch %d, tick %d from %s",
            record.epoch,
            record.tick,
            record.revision[:8],
        )
        return ReconcileResult(ReconcileOutcome.PATCHED, record.markers, record.revision)


def reconcile_source(
    source_dir: Path | str,
    target_epoch: int | None,
    *,
    max_search_depth: int = MAX_SEARCH_DEPTH,
    on_missing: MissingEpochPolicy = "warn",
) -> ReconcileResult:
    """Reconcile a git checkout against ``target_epoch`` using its own history."""
    source_dir = Path(source_dir)
    reconciler = EpochSourceReconciler(
        source_dir=source_dir,
        history=GitHistory(repo=source_dir),
        max_search_depth=max_search_depth,
        on_missing=on_missing,
    )
    return reconciler.reconcile(target_epoch)


def patch_max_processors(source_dir: Path | str, max_processors: int) -> bool:
    """
    Cap the number of worker processors compiled into the node.

    Returns:
        True if the constant was found and rewritten.
    """
    if max_processors < 1:
        raise ValueError(f"max_processors must be positive, got {max_processors}")
    path = Path(source_dir) / ARTIFACT_PATH
    patched = patch_define(path, MAX_PROCESSORS_MARKER, max_processors)
    if patched:
        logger.info("Patched %s to %d", MAX_PROCESSORS_MARKER, max_processors)
    else:
        logger.warning("%s not found in %s", MAX_PROCESSORS_MARKER, path)
    return patched
