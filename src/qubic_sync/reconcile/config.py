"""
Source reconciliation constants.

Where the version markers live and how far back history is searched.
"""

from __future__ import annotations

from typing import Final

ARTIFACT_PATH: Final = "src/public_settings.h"
"""Version-indicator artifact, relative to the source checkout root."""

EPOCH_MARKER: Final = "EPOCH"
"""Name of the compile-time epoch constant."""

TICK_MARKER: Final = "TICK"
"""Name of the compile-time initial tick constant."""

MAX_PROCESSORS_MARKER: Final = "MAX_NUMBER_OF_PROCESSORS"
"""Name of the compile-time worker processor cap."""

MAX_SEARCH_DEPTH: Final = 100
"""Maximum revisions of the artifact inspected when searching for an epoch."""

GIT_TIMEOUT: Final[float] = 30.0
"""Timeout for a single git invocation in seconds."""
