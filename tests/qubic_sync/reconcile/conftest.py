"""Shared fixtures for source reconciliation tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from qubic_sync.reconcile import ARTIFACT_PATH, InMemoryHistory


def settings_header(epoch: int, tick: int, processors: int = 8) -> str:
    """A minimal settings header with the version markers."""
    return (
        "#pragma once\n"
        "\n"
        f"#define MAX_NUMBER_OF_PROCESSORS {processors}\n"
        "// Epoch and initial tick are updated together.\n"
        f"#define EPOCH {epoch}\n"
        f"#define TICK {tick}\n"
        "#define TICK_DURATION 1000\n"
    )


@pytest.fixture
def make_header() -> Callable[..., str]:
    """Settings header factory."""
    return settings_header


@pytest.fixture
def source_tree(tmp_path: Path) -> Callable[[int, int], Path]:
    """Create a checkout whose working tree carries the given markers."""

    def factory(epoch: int, tick: int) -> Path:
        artifact = tmp_path / ARTIFACT_PATH
        artifact.parent.mkdir(parents=True, exist_ok=True)
        artifact.write_text(settings_header(epoch, tick), encoding="utf-8")
        return tmp_path

    return factory


@pytest.fixture
def history() -> InMemoryHistory:
    """Three revisions, newest first: epochs 7, 6, 5."""
    return InMemoryHistory(
        entries=[
            ("c7" * 20, settings_header(7, 200)),
            ("c6" * 20, settings_header(6, 150)),
            ("c5" * 20, settings_header(5, 100)),
        ]
    )
