"""
Snapshot storage.

Snapshots are published one directory per epoch::

    <storage>/187/ep187-full.zip
    <storage>/188/ep188-full.zip

The storage index lists the archive names; the current epoch is the largest
number among them.
"""

from __future__ import annotations

import logging
import re

import httpx

from qubic_sync import config
from qubic_sync.client import fetch_text, probe_content_length
from qubic_sync.retry import RetryPolicy
from qubic_sync.types import EndpointUnavailableError

from .config import (
    ARCHIVE_TEMPLATE,
    DETECT_ATTEMPTS,
    DETECT_RETRY_DELAY,
    LISTING_TIMEOUT,
    PROBE_TIMEOUT,
    STORAGE_URL,
)

logger = logging.getLogger(__name__)

_ARCHIVE_NAME = re.compile(r"\bep(\d+)-full\.zip\b")


def archive_name(epoch: int) -> str:
    """File name of the archive for ``epoch``."""
    return ARCHIVE_TEMPLATE.format(epoch=epoch)


def archive_url(epoch: int, storage_url: str = STORAGE_URL) -> str:
    """Download URL of the archive for ``epoch``."""
    return f"{storage_url.rstrip('/')}/{epoch}/{archive_name(epoch)}"


def parse_epochs(listing: str) -> list[int]:
    """Extract the epochs of every archive named in a storage listing, ascending."""
    return sorted({int(m.group(1)) for m in _ARCHIVE_NAME.finditer(listing)})


def latest_epoch(
    client: httpx.Client,
    storage_url: str = STORAGE_URL,
    policy: RetryPolicy | None = None,
) -> int | None:
    """
    Find the newest epoch with a published snapshot.

    Testnet nodes start without snapshots, so detection is skipped there.

    Returns:
        The largest epoch listed, or None if storage could not be listed or
        lists no archives.
    """
    if config.QUBIC_NETWORK == "testnet":
        logger.info("Testnet: skipping epoch detection")
        return None

    if policy is None:
        policy = RetryPolicy(max_attempts=DETECT_ATTEMPTS, delay=DETECT_RETRY_DELAY)

    index_url = f"{storage_url.rstrip('/')}/"

    def attempt(_: int) -> int | None:
        try:
            epochs = parse_epochs(fetch_text(client, index_url, LISTING_TIMEOUT))
        except EndpointUnavailableError as exc:
            logger.debug("Storage listing failed: %s", exc.message)
            return None
        return epochs[-1] if epochs else None

    epoch = policy.run(attempt, label="Detecting latest epoch")
    if epoch is None:
        logger.warning("Could not detect epoch, building from current source")
    else:
        logger.info("Detected epoch: %d", epoch)
    return epoch


def archive_size(client: httpx.Client, epoch: int, storage_url: str = STORAGE_URL) -> int | None:
    """Size in bytes of the archive for ``epoch``, or None if the server does not say."""
    return probe_content_length(client, archive_url(epoch, storage_url), PROBE_TIMEOUT)
