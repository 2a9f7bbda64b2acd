"""Reusable type definitions shared by every component."""

from .base import CamelModel, ResponseModel, StrictBaseModel
from .exceptions import (
    EndpointUnavailableError,
    EpochNotFoundError,
    NoUsablePeersError,
    PeerFormatError,
    QubicSyncError,
    VersionMarkerError,
)

__all__ = [
    # Models
    "CamelModel",
    "ResponseModel",
    "StrictBaseModel",
    # Exceptions
    "QubicSyncError",
    "PeerFormatError",
    "NoUsablePeersError",
    "EpochNotFoundError",
    "VersionMarkerError",
    "EndpointUnavailableError",
]
