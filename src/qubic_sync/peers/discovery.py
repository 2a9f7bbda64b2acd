"""
Peer discovery client.

Asks the public discovery service for a handful of live peers and maps its
answer into the peer token grammar understood by the normalizer.

The service answers with two lists of IPv4 literals::

    {"litePeers": ["1.2.3.4", ...], "bobPeers": ["5.6.7.8", ...]}

Lite peers are full core nodes and become bare ``host`` tokens
(authenticated, default port). Bob peers are relays and become
``bob:host`` tokens.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from qubic_sync.client import fetch_json
from qubic_sync.retry import RetryPolicy
from qubic_sync.types import EndpointUnavailableError, ResponseModel

from .address import PeerKind
from .config import (
    DISCOVERY_ATTEMPTS,
    DISCOVERY_RETRY_DELAY,
    DISCOVERY_TIMEOUT,
    MAX_DISCOVERED_PEERS,
)

logger = logging.getLogger(__name__)


class PeerDiscoveryResponse(ResponseModel):
    """Body of the discovery service. Either list may be missing."""

    lite_peers: list[str] | None = None
    """Full data-serving peers."""

    bob_peers: list[str] | None = None
    """Lightweight relay peers."""

    def to_tokens(self, limit: int = MAX_DISCOVERED_PEERS) -> list[str]:
        """Map both lists into peer tokens, keeping at most ``limit`` from each."""
        lite = [host.strip() for host in (self.lite_peers or [])[:limit]]
        bob = [host.strip() for host in (self.bob_peers or [])[:limit]]
        return [host for host in lite if host] + [
            f"{PeerKind.SIMPLE.prefix}:{host}" for host in bob if host
        ]


def fetch_peer_tokens(
    client: httpx.Client,
    url: str,
    policy: RetryPolicy | None = None,
    *,
    limit: int = MAX_DISCOVERED_PEERS,
    timeout: float = DISCOVERY_TIMEOUT,
) -> list[str] | None:
    """
    Fetch peer tokens from the discovery service, retrying on failure.

    An attempt fails when the service is unreachable, answers with something
    that is not the expected shape, or answers with no peers at all.

    Args:
        client: HTTP client to issue requests with.
        url: Discovery endpoint.
        policy: Retry behaviour. Defaults to three attempts five seconds apart.
        limit: Maximum peers taken from each list.
        timeout: Per-request timeout in seconds.

    Returns:
        Peer tokens ready for ``normalize_peers``, or None if every attempt failed.
    """
    if policy is None:
        policy = RetryPolicy(max_attempts=DISCOVERY_ATTEMPTS, delay=DISCOVERY_RETRY_DELAY)

    def attempt(_: int) -> list[str] | None:
        try:
            body = fetch_json(client, url, timeout)
            response = PeerDiscoveryResponse.model_validate(body)
        except EndpointUnavailableError as exc:
            logger.debug("Discovery attempt failed: %s", exc.message)
            return None
        except ValidationError as exc:
            logger.debug("Discovery response has unexpected shape: %s", exc)
            return None

        tokens = response.to_tokens(limit)
        if not tokens:
            logger.debug("Discovery response listed no peers")
            return None
        logger.info("Got %d peers", len(tokens))
        return tokens

    result = policy.run(attempt, label="Fetching peers")
    if result is None:
        logger.warning("Could not fetch peers automatically")
    return result
