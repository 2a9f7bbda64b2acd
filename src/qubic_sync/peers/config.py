"""
Peer configuration constants.

Default ports, the no-passcode sentinel and discovery service parameters.
"""

from __future__ import annotations

from typing import Final

AUTHENTICATED_PREFIX: Final = "BM"
"""Token prefix of core-protocol peers that carry a passcode."""

SIMPLE_PREFIX: Final = "bob"
"""Token prefix of lightweight relay peers."""

AUTHENTICATED_DEFAULT_PORT: Final = 21841
"""Core P2P port, used when an authenticated peer omits its port."""

SIMPLE_DEFAULT_PORT: Final = 21842
"""Bob server port, used when a simple peer omits its port."""

NO_PASSCODE: Final = "0-0-0-0"
"""Passcode sentinel for peers that do not require one."""

PEERS_API: Final = "https://api.qubic.global/random-peers?service=bobNode&litePeers=8"
"""Discovery service returning random live peers."""

DISCOVERY_TIMEOUT: Final[float] = 15.0
"""Timeout for a single discovery request in seconds."""

DISCOVERY_ATTEMPTS: Final = 3
"""Attempts before giving up on automatic peer discovery."""

DISCOVERY_RETRY_DELAY: Final[float] = 5.0
"""Seconds between discovery attempts."""

MAX_DISCOVERED_PEERS: Final = 8
"""Maximum peers taken from each discovery list."""
