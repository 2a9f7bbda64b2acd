"""Tests for epoch source reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from qubic_sync.reconcile import (
    ARTIFACT_PATH,
    EpochSourceReconciler,
    InMemoryHistory,
    ReconcileOutcome,
    VersionMarkers,
    patch_max_processors,
    read_define,
    read_markers,
)
from qubic_sync.types import EpochNotFoundError, VersionMarkerError


class TestReconcile:
    """The reconciliation algorithm over a synthetic history."""

    def test_patches_markers_from_history(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
    ) -> None:
        """Target epoch 6 is found and its committed tick is applied."""
        root = source_tree(7, 200)
        reconciler = EpochSourceReconciler(source_dir=root, history=history)

        result = reconciler.reconcile(6)

        assert result.outcome is ReconcileOutcome.PATCHED
        assert result.markers == VersionMarkers(6, 150)
        assert result.revision == "c6" * 20
        assert result.changed
        assert read_markers(root / ARTIFACT_PATH) == VersionMarkers(6, 150)

    def test_other_content_survives(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
    ) -> None:
        """Local edits outside the two markers are kept."""
        root = source_tree(7, 200)
        artifact = root / ARTIFACT_PATH
        artifact.write_text(
            artifact.read_text(encoding="utf-8") + "#define LOCAL_TWEAK 1\n", encoding="utf-8"
        )

        EpochSourceReconciler(source_dir=root, history=history).reconcile(5)

        text = artifact.read_text(encoding="utf-8")
        assert read_define(text, "LOCAL_TWEAK") == 1
        assert read_markers(artifact) == VersionMarkers(5, 100)

    def test_already_aligned_is_noop(
        self,
        source_tree: Callable[[int, int], Path],
    ) -> None:
        """No history is consulted when the tree already matches."""

        class ExplodingHistory:
            def revisions(self, limit: int) -> list[str]:
                raise AssertionError("history must not be searched")

            def read_artifact(self, revision: str) -> str | None:
                raise AssertionError("history must not be read")

        root = source_tree(7, 200)
        result = EpochSourceReconciler(source_dir=root, history=ExplodingHistory()).reconcile(7)

        assert result.outcome is ReconcileOutcome.ALREADY_ALIGNED
        assert result.markers == VersionMarkers(7, 200)
        assert not result.changed

    def test_absent_epoch_warns_and_keeps_tree(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Epoch 9 is absent: markers stay as they were, epoch is not forced."""
        root = source_tree(7, 200)
        before = (root / ARTIFACT_PATH).read_bytes()

        with caplog.at_level(logging.WARNING):
            result = EpochSourceReconciler(source_dir=root, history=history).reconcile(9)

        assert result.outcome is ReconcileOutcome.NOT_FOUND
        assert result.markers == VersionMarkers(7, 200)
        assert (root / ARTIFACT_PATH).read_bytes() == before
        assert any("epoch 9" in r.getMessage() for r in caplog.records)

    def test_absent_epoch_fails_closed(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
    ) -> None:
        """With the fail policy a missing epoch raises and the tree is untouched."""
        root = source_tree(7, 200)
        reconciler = EpochSourceReconciler(
            source_dir=root, history=history, max_search_depth=3, on_missing="fail"
        )

        with pytest.raises(EpochNotFoundError) as exc_info:
            reconciler.reconcile(9)

        assert exc_info.value.epoch == 9
        assert exc_info.value.depth == 3
        assert read_markers(root / ARTIFACT_PATH) == VersionMarkers(7, 200)

    def test_search_depth_bounds_the_scan(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
    ) -> None:
        """Epoch 5 lies beyond a depth of two revisions."""
        root = source_tree(7, 200)
        reconciler = EpochSourceReconciler(source_dir=root, history=history, max_search_depth=2)

        assert reconciler.find_epoch(6) is not None
        assert reconciler.find_epoch(5) is None
        assert reconciler.reconcile(5).outcome is ReconcileOutcome.NOT_FOUND

    def test_unreadable_revisions_are_skipped(
        self,
        source_tree: Callable[[int, int], Path],
        make_header: Callable[..., str],
    ) -> None:
        """Revisions without markers or content do not stop the search."""
        history = InMemoryHistory(
            entries=[
                ("broken", "// no markers here\n"),
                ("gone", make_header(1, 1)),
                ("good", make_header(4, 80)),
            ]
        )

        class MissingContent(InMemoryHistory):
            def read_artifact(self, revision: str) -> str | None:
                if revision == "gone":
                    return None
                return InMemoryHistory.read_artifact(self, revision)

        root = source_tree(7, 200)
        reconciler = EpochSourceReconciler(
            source_dir=root, history=MissingContent(entries=history.entries)
        )

        record = reconciler.find_epoch(4)
        assert record is not None
        assert record.revision == "good"
        assert record.tick == 80

    def test_newest_matching_revision_wins(
        self,
        source_tree: Callable[[int, int], Path],
        make_header: Callable[..., str],
    ) -> None:
        """When several revisions share the epoch, the most recent one is used."""
        history = InMemoryHistory(
            entries=[("new", make_header(6, 151)), ("old", make_header(6, 150))]
        )
        root = source_tree(7, 200)

        result = EpochSourceReconciler(source_dir=root, history=history).reconcile(6)

        assert result.revision == "new"
        assert result.markers == VersionMarkers(6, 151)

    def test_no_target_skips(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
    ) -> None:
        """Without a target epoch the tree builds as-is."""
        root = source_tree(7, 200)

        result = EpochSourceReconciler(source_dir=root, history=history).reconcile(None)

        assert result.outcome is ReconcileOutcome.SKIPPED
        assert result.markers == VersionMarkers(7, 200)

    def test_missing_artifact_is_fatal(self, tmp_path: Path, history: InMemoryHistory) -> None:
        """A checkout without the settings header is not a source tree."""
        with pytest.raises(VersionMarkerError):
            EpochSourceReconciler(source_dir=tmp_path, history=history).reconcile(6)


class TestPatchMaxProcessors:
    """Tests for the processor cap patch."""

    def test_patches_constant(self, source_tree: Callable[[int, int], Path]) -> None:
        """The processor cap is rewritten."""
        root = source_tree(7, 200)

        assert patch_max_processors(root, 4) is True
        text = (root / ARTIFACT_PATH).read_text(encoding="utf-8")
        assert read_define(text, "MAX_NUMBER_OF_PROCESSORS") == 4

    def test_rejects_non_positive(self, source_tree: Callable[[int, int], Path]) -> None:
        """Zero processors is invalid."""
        with pytest.raises(ValueError):
            patch_max_processors(source_tree(7, 200), 0)


class TestReconcilerValidation:
    """Construction-time checks."""

    @pytest.mark.parametrize("depth", [0, -1])
    def test_rejects_non_positive_depth(
        self,
        source_tree: Callable[[int, int], Path],
        history: InMemoryHistory,
        depth: int,
    ) -> None:
        """A search depth below one is invalid."""
        with pytest.raises(ValueError):
            EpochSourceReconciler(
                source_dir=source_tree(7, 200), history=history, max_search_depth=depth
            )
