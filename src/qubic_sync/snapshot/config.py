"""
Snapshot storage and progress constants.
"""

from __future__ import annotations

from typing import Final

STORAGE_URL: Final = "https://storage.qubic.li/network"
"""Root of the epoch-indexed snapshot storage."""

ARCHIVE_TEMPLATE: Final = "ep{epoch}-full.zip"
"""File name of the full-state archive of one epoch."""

LISTING_TIMEOUT: Final[float] = 15.0
"""Timeout for the storage listing request in seconds."""

PROBE_TIMEOUT: Final[float] = 15.0
"""Timeout for the archive size probe in seconds."""

DETECT_ATTEMPTS: Final = 3
"""Attempts at listing storage before giving up on epoch detection."""

DETECT_RETRY_DELAY: Final[float] = 5.0
"""Seconds between listing attempts."""

PROGRESS_INTERVAL: Final[float] = 2.0
"""Seconds between two file size samples."""

BAR_WIDTH: Final = 30
"""Character width of the progress bar."""
