"""
Snapshot storage and download progress.

Finds the newest published epoch snapshot and reports progress while its
archive is being downloaded and extracted.
"""

from .config import BAR_WIDTH, PROGRESS_INTERVAL, STORAGE_URL
from .progress import (
    DownloadProgress,
    SnapshotProgressTracker,
    file_size,
    format_size,
    render_bar,
)
from .storage import archive_name, archive_size, archive_url, latest_epoch, parse_epochs

__all__ = [
    # Progress
    "SnapshotProgressTracker",
    "DownloadProgress",
    "file_size",
    "format_size",
    "render_bar",
    # Storage
    "archive_name",
    "archive_url",
    "archive_size",
    "latest_epoch",
    "parse_epochs",
    # Constants
    "BAR_WIDTH",
    "PROGRESS_INTERVAL",
    "STORAGE_URL",
]
