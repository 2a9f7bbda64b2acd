"""
Sync monitor configuration constants.

Default endpoints, poll cadence and timeouts.
"""

from __future__ import annotations

from typing import Final

BOB_API_PORT: Final = 40420
"""Local RPC port of a Bob node."""

LITE_HTTP_PORT: Final = 41841
"""Local HTTP port of a Lite node."""

BOB_STATUS_URL: Final = f"http://localhost:{BOB_API_PORT}/status"
"""Bob status endpoint reporting the fetching tick."""

LITE_TICK_INFO_URL: Final = f"http://localhost:{LITE_HTTP_PORT}/tick-info"
"""Lite tick-info endpoint reporting tick, epoch and node identity."""

NETWORK_TICK_INFO_URL: Final = "https://rpc.qubic.org/v1/tick-info"
"""Public RPC reporting the network's current tick."""

POLL_INTERVAL: Final[float] = 3.0
"""Seconds between two tick samples."""

ENDPOINT_TIMEOUT: Final[float] = 5.0
"""Timeout for a single tick endpoint request in seconds."""

INFO_TIMEOUT: Final[float] = 10.0
"""Timeout for the one-shot node info request in seconds."""
