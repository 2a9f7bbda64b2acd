"""Tool settings loader.

Loads operator overrides from a YAML file. Every key is optional; an empty
file yields the built-in defaults.

    peers:
      api_url: https://api.qubic.global/random-peers?service=bobNode&litePeers=8
      limit: 8
    monitor:
      node: lite
      poll_interval: 3.0
    snapshot:
      storage_url: https://storage.qubic.li/network
    reconcile:
      max_search_depth: 100
      on_missing: fail
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field

from qubic_sync.monitor.config import (
    ENDPOINT_TIMEOUT,
    NETWORK_TICK_INFO_URL,
    POLL_INTERVAL,
)
from qubic_sync.peers.config import (
    DISCOVERY_ATTEMPTS,
    DISCOVERY_RETRY_DELAY,
    MAX_DISCOVERED_PEERS,
    PEERS_API,
)
from qubic_sync.reconcile.config import MAX_SEARCH_DEPTH
from qubic_sync.snapshot.config import PROGRESS_INTERVAL, STORAGE_URL
from qubic_sync.types import CamelModel


class SettingsModel(CamelModel):
    """An immutable settings section. Unknown keys are rejected to catch typos."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
    }


class PeerSettings(SettingsModel):
    """Peer discovery settings."""

    api_url: str = PEERS_API
    """Discovery endpoint."""

    limit: int = Field(default=MAX_DISCOVERED_PEERS, ge=1)
    """Maximum peers taken from each discovery list."""

    attempts: int = Field(default=DISCOVERY_ATTEMPTS, ge=1)
    """Discovery attempts before giving up."""

    retry_delay: float = Field(default=DISCOVERY_RETRY_DELAY, ge=0)
    """Seconds between discovery attempts."""


class MonitorSettings(SettingsModel):
    """Sync monitor settings."""

    node: Literal["bob", "lite"] = "bob"
    """Which node flavor runs locally."""

    local_url: str | None = None
    """Override for the local tick endpoint. None uses the flavor's default."""

    network_url: str = NETWORK_TICK_INFO_URL
    """Reference tick endpoint."""

    poll_interval: float = Field(default=POLL_INTERVAL, gt=0)
    """Seconds between polls."""

    timeout: float = Field(default=ENDPOINT_TIMEOUT, gt=0)
    """Per-request timeout in seconds."""


class SnapshotSettings(SettingsModel):
    """Snapshot storage and progress settings."""

    storage_url: str = STORAGE_URL
    """Root of the epoch-indexed snapshot storage."""

    poll_interval: float = Field(default=PROGRESS_INTERVAL, gt=0)
    """Seconds between file size samples."""


class ReconcileSettings(SettingsModel):
    """Source reconciliation settings."""

    max_search_depth: int = Field(default=MAX_SEARCH_DEPTH, ge=1)
    """Maximum revisions searched for the target epoch."""

    on_missing: Literal["warn", "fail"] = "fail"
    """Keep building with stale markers, or stop, when the epoch is not found."""


class ToolConfig(SettingsModel):
    """All operator-tunable settings."""

    peers: PeerSettings = Field(default_factory=PeerSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> ToolConfig:
        """
        Load settings from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml(cls, content: str) -> ToolConfig:
        """
        Load settings from a YAML string.

        Useful for testing or programmatic config generation.
        """
        data = yaml.safe_load(content)
        return cls.model_validate(data or {})
