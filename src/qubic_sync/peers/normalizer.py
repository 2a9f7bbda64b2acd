"""
Peer address normalization.

Operators hand peers to the installer in whatever shape they copied them:
bare IPs, ``ip:port`` pairs, or fully qualified entries with a kind prefix
and passcode. The node wants one canonical list.

Grammar
-------
Each comma-separated token is trimmed and matched against these forms in
order. The first match wins::

    KIND:host:port:passcode   fully qualified, kept as-is
    KIND:host:port            passcode defaults to 0-0-0-0
    bob:host                  simple peers only, default simple port
    host:port                 authenticated, passcode defaults to 0-0-0-0
    host                      authenticated, default port and passcode

Tokens that match nothing are skipped with a warning. Running out of peers
entirely is fatal: a node without an entry point cannot start.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import ValidationError

from qubic_sync.types import NoUsablePeersError, PeerFormatError

from .address import PeerAddress, PeerKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PeerList:
    """The outcome of normalizing a peer string."""

    authenticated: tuple[PeerAddress, ...] = ()
    """Authenticated peers, in input order."""

    simple: tuple[PeerAddress, ...] = ()
    """Simple peers, in input order."""

    skipped: tuple[str, ...] = ()
    """Tokens that did not match the grammar."""

    def __len__(self) -> int:
        """Return the number of usable peers."""
        return len(self.authenticated) + len(self.simple)

    @property
    def skipped_count(self) -> int:
        """Number of rejected tokens."""
        return len(self.skipped)

    def all(self) -> tuple[PeerAddress, ...]:
        """Authenticated peers followed by simple peers."""
        return self.authenticated + self.simple

    def to_option(self) -> str:
        """Comma-joined canonical tokens, as passed to the node's ``--peers`` flag."""
        return ",".join(peer.to_token() for peer in self.all())

    def endpoints(self, kind: PeerKind | None = None) -> list[str]:
        """Plain ``host:port`` pairs, optionally restricted to one kind."""
        return [peer.endpoint() for peer in self.all() if kind is None or peer.kind is kind]


def _parse_port(text: str, token: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise PeerFormatError(token, f"port {text!r} is not a number")
    return int(text)


def _build(token: str, kind: PeerKind, host: str, port: int, passcode: str | None) -> PeerAddress:
    fields: dict[str, object] = {"kind": kind, "host": host, "port": port}
    if passcode is not None:
        fields["passcode"] = passcode
    try:
        return PeerAddress(**fields)
    except ValidationError as exc:
        # Report only the first problem; one is enough to reject the token.
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise PeerFormatError(token, f"{location}: {error['msg']}") from exc


def parse_peer_token(token: str) -> PeerAddress:
    """
    Parse a single peer token into a validated address.

    Args:
        token: One entry of the peer grammar. Surrounding whitespace is ignored.

    Returns:
        The parsed address with defaults filled in.

    Raises:
        PeerFormatError: If the token matches none of the grammar forms.
    """
    token = token.strip()
    if not token:
        raise PeerFormatError(token, "empty token")

    parts = token.split(":")
    kind = PeerKind.from_prefix(parts[0])

    match len(parts):
        case 4:
            if kind is None:
                raise PeerFormatError(token, f"unknown peer kind {parts[0]!r}")
            return _build(token, kind, parts[1], _parse_port(parts[2], token), parts[3])
        case 3:
            if kind is None:
                raise PeerFormatError(token, f"unknown peer kind {parts[0]!r}")
            return _build(token, kind, parts[1], _parse_port(parts[2], token), None)
        case 2 if kind is PeerKind.SIMPLE:
            return _build(token, kind, parts[1], kind.default_port, None)
        case 2:
            return _build(
                token,
                PeerKind.AUTHENTICATED,
                parts[0],
                _parse_port(parts[1], token),
                None,
            )
        case 1:
            return _build(
                token,
                PeerKind.AUTHENTICATED,
                parts[0],
                PeerKind.AUTHENTICATED.default_port,
                None,
            )
        case _:
            raise PeerFormatError(token, "too many ':'-separated fields")


def split_tokens(raw: str | Iterable[str]) -> list[str]:
    """Split a comma-separated peer string (or several) into trimmed, non-empty tokens."""
    chunks = [raw] if isinstance(raw, str) else list(raw)
    return [token.strip() for chunk in chunks for token in chunk.split(",") if token.strip()]


def normalize_peers(raw: str | Iterable[str]) -> PeerList:
    """
    Normalize a peer string into canonical authenticated and simple lists.

    Args:
        raw: A comma-separated token string, or several such strings.

    Returns:
        The normalized peers and the tokens that were skipped.

    Raises:
        NoUsablePeersError: If no token yielded a usable peer.
    """
    authenticated: list[PeerAddress] = []
    simple: list[PeerAddress] = []
    skipped: list[str] = []

    for token in split_tokens(raw):
        try:
            peer = parse_peer_token(token)
        except PeerFormatError as exc:
            logger.warning("Skipping peer: %s", exc.message)
            skipped.append(token)
            continue

        if peer.kind is PeerKind.AUTHENTICATED:
            authenticated.append(peer)
        else:
            simple.append(peer)

    result = PeerList(
        authenticated=tuple(authenticated),
        simple=tuple(simple),
        skipped=tuple(skipped),
    )
    if len(result) == 0:
        raise NoUsablePeersError(result.skipped)

    logger.info(
        "Normalized %d peers (%d authenticated, %d simple, %d skipped)",
        len(result),
        len(result.authenticated),
        len(result.simple),
        result.skipped_count,
    )
    return result
