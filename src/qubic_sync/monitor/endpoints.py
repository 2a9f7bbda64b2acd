"""
Tick-reporting endpoints.

Three kinds of endpoint report a tick number, each in its own shape:

- Bob ``/status``: ``{"currentFetchingTick": 123, "currentProcessingEpoch": 187, ...}``
- Lite ``/tick-info``: ``{"tick": 123, "epoch": 187, "alias": "...", ...}``
- Network RPC ``/v1/tick-info``: ``{"tickInfo": {"tick": 123, "epoch": 187, ...}}``

Each shape is a response model whose fields are all optional. A reading
therefore ends in one of four ways: a tick, an endpoint that did not answer,
an answer that could not be parsed, or a well-formed answer without a tick.
The last two are different problems and are reported separately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import httpx
from pydantic import Field, ValidationError

from qubic_sync.client import fetch_json
from qubic_sync.types import EndpointUnavailableError, ResponseModel

from .config import (
    BOB_STATUS_URL,
    ENDPOINT_TIMEOUT,
    INFO_TIMEOUT,
    LITE_TICK_INFO_URL,
    NETWORK_TICK_INFO_URL,
)

logger = logging.getLogger(__name__)


class BobStatus(ResponseModel):
    """Body of a Bob node's status endpoint."""

    current_fetching_tick: int | None = Field(default=None, ge=0)
    """Tick the node is currently fetching."""

    current_processing_epoch: int | None = Field(default=None, ge=0)
    """Epoch the node is currently processing."""


class NodeInfo(ResponseModel):
    """Body of a Lite node's tick-info endpoint, also the inner object of the network RPC."""

    tick: int | None = Field(default=None, ge=0)
    """Current tick."""

    epoch: int | None = Field(default=None, ge=0)
    """Current epoch."""

    alias: str | None = None
    """Operator-chosen node name."""

    operator: str | None = None
    """Operator identity."""

    version: str | None = None
    """Node software version."""

    uptime: int | None = Field(default=None, ge=0)
    """Seconds since the node started."""


class NetworkTickInfo(ResponseModel):
    """Body of the public RPC tick-info endpoint."""

    tick_info: NodeInfo | None = None
    """Network tick and epoch."""


class EndpointFlavor(Enum):
    """Which response shape an endpoint speaks."""

    BOB = "bob"
    LITE = "lite"
    NETWORK = "network"


class ReadOutcome(Enum):
    """How a tick reading ended."""

    OK = auto()
    """A tick was read."""

    UNREACHABLE = auto()
    """Timeout, transport error or error status."""

    MALFORMED = auto()
    """The endpoint answered with something that does not fit its schema."""

    FIELD_ABSENT = auto()
    """The answer fit the schema but carried no tick."""


@dataclass(frozen=True, slots=True)
class TickReading:
    """One attempt at reading a tick from an endpoint."""

    outcome: ReadOutcome
    """How the attempt ended."""

    tick: int | None = None
    """The tick, when read."""

    epoch: int | None = None
    """The epoch, when the endpoint reports one."""

    detail: str = ""
    """Why the reading failed, for logs."""

    @property
    def available(self) -> bool:
        """True when a tick was read."""
        return self.outcome is ReadOutcome.OK


@dataclass(frozen=True, slots=True)
class TickEndpoint:
    """A tick-reporting URL and the shape it answers in."""

    url: str
    """Full endpoint URL."""

    flavor: EndpointFlavor
    """Response shape."""

    timeout: float = ENDPOINT_TIMEOUT
    """Per-request timeout in seconds."""

    @classmethod
    def bob(cls, url: str = BOB_STATUS_URL) -> TickEndpoint:
        """Local Bob node status endpoint."""
        return cls(url=url, flavor=EndpointFlavor.BOB)

    @classmethod
    def lite(cls, url: str = LITE_TICK_INFO_URL) -> TickEndpoint:
        """Local Lite node tick-info endpoint."""
        return cls(url=url, flavor=EndpointFlavor.LITE)

    @classmethod
    def network(cls, url: str = NETWORK_TICK_INFO_URL) -> TickEndpoint:
        """Public network tick reference."""
        return cls(url=url, flavor=EndpointFlavor.NETWORK)

    def parse(self, body: Any) -> NodeInfo:
        """
        Map a decoded body onto the common info shape.

        Raises:
            ValidationError: If the body does not fit this endpoint's schema.
        """
        match self.flavor:
            case EndpointFlavor.BOB:
                status = BobStatus.model_validate(body)
                return NodeInfo(
                    tick=status.current_fetching_tick,
                    epoch=status.current_processing_epoch,
                )
            case EndpointFlavor.LITE:
                return NodeInfo.model_validate(body)
            case EndpointFlavor.NETWORK:
                return NetworkTickInfo.model_validate(body).tick_info or NodeInfo()


def read_tick(client: httpx.Client, endpoint: TickEndpoint) -> TickReading:
    """
    Read the current tick from ``endpoint``. Never raises.

    A failed read is reported through the reading's outcome so a poll loop
    can carry on to the next round.
    """
    try:
        body = fetch_json(client, endpoint.url, endpoint.timeout)
    except EndpointUnavailableError as exc:
        outcome = ReadOutcome.MALFORMED if exc.malformed else ReadOutcome.UNREACHABLE
        logger.debug("Tick read failed: %s", exc.message)
        return TickReading(outcome, detail=exc.reason)

    try:
        info = endpoint.parse(body)
    except ValidationError as exc:
        logger.debug("Tick response from %s does not fit schema: %s", endpoint.url, exc)
        return TickReading(ReadOutcome.MALFORMED, detail=f"{exc.error_count()} schema errors")

    if info.tick is None:
        return TickReading(ReadOutcome.FIELD_ABSENT, epoch=info.epoch, detail="no tick field")
    return TickReading(ReadOutcome.OK, tick=info.tick, epoch=info.epoch)


def read_node_info(client: httpx.Client, endpoint: TickEndpoint) -> NodeInfo:
    """
    Fetch the node's identity and position in one shot.

    Raises:
        EndpointUnavailableError: If the endpoint cannot be reached or its
            answer does not fit the schema.
    """
    body = fetch_json(client, endpoint.url, max(endpoint.timeout, INFO_TIMEOUT))
    try:
        return endpoint.parse(body)
    except ValidationError as exc:
        raise EndpointUnavailableError(
            endpoint.url, "response does not match the expected schema", malformed=True
        ) from exc
