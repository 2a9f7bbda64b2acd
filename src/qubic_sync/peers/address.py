"""
Peer Address
============

The canonical, validated form of a single peer entry.
"""

from __future__ import annotations

import ipaddress
from enum import Enum

from pydantic import Field, field_validator

from qubic_sync.types import StrictBaseModel

from .config import (
    AUTHENTICATED_DEFAULT_PORT,
    AUTHENTICATED_PREFIX,
    NO_PASSCODE,
    SIMPLE_DEFAULT_PORT,
    SIMPLE_PREFIX,
)

PASSCODE_PATTERN = r"^[0-9]+-[0-9]+-[0-9]+-[0-9]+$"
"""Four dash-separated segments of ASCII digits."""


class PeerKind(Enum):
    """The two kinds of peer a node can be pointed at."""

    AUTHENTICATED = AUTHENTICATED_PREFIX
    """Core-protocol peer. Connections are gated by a passcode."""

    SIMPLE = SIMPLE_PREFIX
    """Lightweight relay peer serving data over the Bob protocol."""

    @property
    def prefix(self) -> str:
        """Canonical token prefix."""
        return self.value

    @property
    def default_port(self) -> int:
        """Well-known port used when a token omits one."""
        if self is PeerKind.AUTHENTICATED:
            return AUTHENTICATED_DEFAULT_PORT
        return SIMPLE_DEFAULT_PORT

    @classmethod
    def from_prefix(cls, text: str) -> PeerKind | None:
        """Look up a kind by token prefix, ignoring case."""
        lowered = text.lower()
        for kind in cls:
            if kind.prefix.lower() == lowered:
                return kind
        return None


class PeerAddress(StrictBaseModel):
    """
    A validated peer entry.

    Instances are immutable. They are created by the normalizer from raw
    tokens and consumed when serialized into node configuration.
    """

    kind: PeerKind
    """Which protocol the peer speaks."""

    host: str
    """IPv4 literal of the peer."""

    port: int = Field(ge=1, le=65535)
    """TCP port of the peer."""

    passcode: str = Field(default=NO_PASSCODE, pattern=PASSCODE_PATTERN)
    """Connection passcode, or the no-passcode sentinel."""

    @field_validator("host")
    @classmethod
    def check_ipv4(cls, v: str) -> str:
        """Only dotted-quad IPv4 literals are accepted; hostnames are rejected."""
        try:
            ipaddress.IPv4Address(v)
        except ValueError as exc:
            raise ValueError(f"host must be an IPv4 literal, got {v!r}") from exc
        return v

    @property
    def has_passcode(self) -> bool:
        """True when the peer carries a real passcode."""
        return self.passcode != NO_PASSCODE

    def endpoint(self) -> str:
        """Return the ``host:port`` pair."""
        return f"{self.host}:{self.port}"

    def to_token(self) -> str:
        """
        Serialize to the fully qualified ``KIND:host:port:passcode`` form.

        Parsing the result yields an equal address.
        """
        return f"{self.kind.prefix}:{self.host}:{self.port}:{self.passcode}"
