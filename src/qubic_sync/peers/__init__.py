"""
Peer address handling.

Turns operator-supplied or discovered peer strings into the canonical,
validated peer list embedded in node configuration.
"""

from .address import PASSCODE_PATTERN, PeerAddress, PeerKind
from .config import (
    AUTHENTICATED_DEFAULT_PORT,
    NO_PASSCODE,
    PEERS_API,
    SIMPLE_DEFAULT_PORT,
)
from .discovery import PeerDiscoveryResponse, fetch_peer_tokens
from .normalizer import PeerList, normalize_peers, parse_peer_token, split_tokens

__all__ = [
    # Addresses
    "PeerAddress",
    "PeerKind",
    "PASSCODE_PATTERN",
    # Normalization
    "PeerList",
    "normalize_peers",
    "parse_peer_token",
    "split_tokens",
    # Discovery
    "PeerDiscoveryResponse",
    "fetch_peer_tokens",
    # Constants
    "AUTHENTICATED_DEFAULT_PORT",
    "SIMPLE_DEFAULT_PORT",
    "NO_PASSCODE",
    "PEERS_API",
]
