"""
Snapshot download progress.

The download agent writes the archive to disk, extracts it, and deletes it.
All this tracker can see is the file: how big it is now, and whether it is
still there. A vanished file is the end of the download. Telling a finished
download from a failed one is the agent's job, not ours.

A file that stops growing is reported as flat progress, never as an error:
from the outside, "slow" and "stuck" look the same.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .config import BAR_WIDTH

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
"""Bytes per displayed megabyte."""

SizeFn = Callable[[Path], int | None]
"""Returns a file's size in bytes, or None if it does not exist."""


def file_size(path: Path) -> int | None:
    """Current size of ``path``, or None once it has disappeared."""
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return None


def format_size(num_bytes: int) -> str:
    """Render a byte count in whole megabytes (kilobytes below one megabyte)."""
    if num_bytes < MIB:
        return f"{num_bytes // 1024}KB"
    return f"{num_bytes // MIB}MB"


def render_bar(percent: float, width: int = BAR_WIDTH) -> str:
    """A fixed-width bar filled in proportion to ``percent``."""
    filled = int(width * min(max(percent, 0.0), 100.0) / 100)
    return "[" + "█" * filled + "░" * (width - filled) + "]"


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    """One observation of a partially written archive."""

    bytes_written: int
    """Size of the file when observed."""

    total_bytes: int | None
    """Expected final size, if known."""

    source_path: Path
    """The file being observed."""

    @property
    def percent(self) -> float | None:
        """Completion to one decimal, capped at 100. None when the total is unknown."""
        if not self.total_bytes:
            return None
        return round(min(100.0, self.bytes_written * 100 / self.total_bytes), 1)

    def describe(self, width: int = BAR_WIDTH) -> str:
        """Human-facing progress line."""
        written = format_size(self.bytes_written)
        percent = self.percent
        if percent is None or self.total_bytes is None:
            return f"{written} downloaded, total unknown"
        total = format_size(self.total_bytes)
        return f"{render_bar(percent, width)} {percent}% ({written} / {total})"


@dataclass(slots=True)
class SnapshotProgressTracker:
    """Samples an archive's size while it exists."""

    path: Path
    """Archive being written."""

    total_bytes: int | None = None
    """Expected final size, obtained out of band. None if unknown."""

    size_fn: SizeFn = file_size
    """File size probe (injectable for testing)."""

    stalled_polls: int = field(default=0, init=False)
    """Consecutive samples in which the file did not grow."""

    last: DownloadProgress | None = field(default=None, init=False)
    """Most recent observation."""

    finished: bool = field(default=False, init=False)
    """True once the file has disappeared."""

    def sample(self) -> DownloadProgress | None:
        """
        Observe the file once.

        Returns:
            The current progress, or None once the file no longer exists.
        """
        size = self.size_fn(self.path)
        if size is None:
            if not self.finished:
                logger.info("%s is gone; no longer downloading", self.path.name)
            self.finished = True
            return None

        if self.last is not None and size <= self.last.bytes_written:
            self.stalled_polls += 1
        else:
            self.stalled_polls = 0

        self.last = DownloadProgress(
            bytes_written=size,
            total_bytes=self.total_bytes,
            source_path=self.path,
        )
        return self.last
