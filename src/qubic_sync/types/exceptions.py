"""Exception hierarchy for sync-state reconciliation and monitoring."""

from __future__ import annotations

from pathlib import Path


class QubicSyncError(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class PeerFormatError(QubicSyncError):
    """
    Raised when a single peer token does not match the peer grammar.

    The normalizer recovers from this locally by skipping the token.

    Attributes:
        token: The offending token, already trimmed.
        reason: Why the token was rejected.
    """

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"Invalid peer {token!r}: {reason}")


class NoUsablePeersError(QubicSyncError):
    """
    Raised when normalization leaves no peers at all.

    The node cannot start without an entry point, so this aborts configuration.

    Attributes:
        skipped: Tokens that were rejected on the way.
    """

    def __init__(self, skipped: tuple[str, ...] = ()) -> None:
        self.skipped = skipped
        if skipped:
            msg = f"No valid peers could be derived from input ({len(skipped)} skipped)"
        else:
            msg = "No valid peers could be derived from input"
        super().__init__(msg)


class EpochNotFoundError(QubicSyncError):
    """
    Raised when the target epoch is absent from the searched source history.

    Attributes:
        epoch: The epoch that was searched for.
        depth: How many revisions were inspected.
    """

    def __init__(self, epoch: int, depth: int) -> None:
        self.epoch = epoch
        self.depth = depth
        super().__init__(f"Epoch {epoch} not found in the last {depth} revisions")


class VersionMarkerError(QubicSyncError):
    """
    Raised when the working-tree version artifact is missing or malformed.

    Attributes:
        path: The artifact that was read.
        marker: The marker that could not be found, if any.
    """

    def __init__(self, path: Path | str, marker: str | None = None) -> None:
        self.path = Path(path)
        self.marker = marker
        if marker is None:
            msg = f"Cannot read version artifact {self.path}"
        else:
            msg = f"Version artifact {self.path} has no {marker} marker"
        super().__init__(msg)


class EndpointUnavailableError(QubicSyncError):
    """
    Raised when an HTTP endpoint times out or returns unusable content.

    Pollers treat this as "no data this round", never as a loop failure.

    Attributes:
        url: The endpoint that was queried.
        reason: Short description of the failure.
        malformed: True when the endpoint answered but the body was unusable.
    """

    def __init__(self, url: str, reason: str, *, malformed: bool = False) -> None:
        self.url = url
        self.reason = reason
        self.malformed = malformed
        super().__init__(f"{url} unavailable: {reason}")
