"""
Sync health monitoring.

A node reports the tick it has reached. Sampling that number twice, a few
seconds apart, tells whether the node is alive and advancing; comparing it
with the network's tick tells how far it still has to go.

State Machine
-------------
::

    CHECKING --> SYNCING <--> NOT_TICKING
        |           |              |
        +-----------+--> SYNCED <--+

- **CHECKING**: fewer than two local samples so far.
- **SYNCED**: the latest local tick has reached the reference tick.
- **SYNCING**: the last two samples show the tick advancing.
- **NOT_TICKING**: the last two samples show no progress (or a regression).

The reference tick is re-read on every poll. When it is unavailable the
classification still works from local samples alone; only the distance and
ETA figures are dropped.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import httpx

from .config import POLL_INTERVAL
from .endpoints import TickEndpoint, read_tick

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Classification of a node's sync progress."""

    CHECKING = "CHECKING"
    """Not enough samples yet."""

    SYNCED = "SYNCED"
    """Caught up with the network."""

    SYNCING = "SYNCING"
    """Behind, but advancing."""

    NOT_TICKING = "NOT TICKING"
    """Stalled or regressing."""

    @property
    def label(self) -> str:
        """Human-facing name."""
        return self.value


@dataclass(frozen=True, slots=True)
class TickSample:
    """A local tick and when we observed it."""

    tick: int
    """Tick reported by the node."""

    taken_at: float
    """Local observation time in seconds."""


@dataclass(frozen=True, slots=True)
class SyncReport:
    """Everything one poll knows about sync progress."""

    status: SyncStatus
    """Current classification."""

    local_tick: int | None = None
    """Latest local tick, if the node answered."""

    reference_tick: int | None = None
    """Latest network tick, if the reference answered."""

    rate: float | None = None
    """Ticks per second between the last two samples."""

    behind: int | None = None
    """Ticks left to the reference, floored at zero."""

    percent: float | None = None
    """Local tick as a percentage of the reference, one decimal."""

    eta_seconds: int | None = None
    """Seconds until synced at the current rate. None when not advancing."""

    local_epoch: int | None = None
    """Epoch reported alongside the local tick, if any."""


def assess(
    previous: TickSample | None,
    current: TickSample | None,
    reference_tick: int | None,
    poll_interval: float = POLL_INTERVAL,
    local_epoch: int | None = None,
) -> SyncReport:
    """
    Classify sync progress from the sample window and the reference tick.

    Args:
        previous: The older of the two retained samples.
        current: The newest sample, or None if the node did not answer.
        reference_tick: Network tick, or None if unavailable.
        poll_interval: Used as the elapsed time when the two samples carry
            the same timestamp.
        local_epoch: Epoch reported by the node, passed through to the report.

    Returns:
        The report for this window.
    """
    if current is None:
        return SyncReport(SyncStatus.CHECKING, reference_tick=reference_tick)

    # Rate needs two samples.
    rate: float | None = None
    delta: int | None = None
    elapsed = poll_interval
    if previous is not None:
        delta = current.tick - previous.tick
        if current.taken_at > previous.taken_at:
            elapsed = current.taken_at - previous.taken_at
        rate = delta / elapsed

    # Classification.
    if reference_tick is not None and current.tick >= reference_tick:
        status = SyncStatus.SYNCED
    elif previous is None:
        status = SyncStatus.CHECKING
    elif current.tick > previous.tick:
        status = SyncStatus.SYNCING
    else:
        status = SyncStatus.NOT_TICKING

    # Distance figures need the reference.
    behind: int | None = None
    percent: float | None = None
    eta: int | None = None
    if reference_tick is not None:
        behind = max(0, reference_tick - current.tick)
        if reference_tick > 0:
            percent = min(100.0, round(current.tick * 100 / reference_tick, 1))
        if delta is not None and delta > 0:
            eta = math.ceil(behind * elapsed / delta)

    return SyncReport(
        status=status,
        local_tick=current.tick,
        reference_tick=reference_tick,
        rate=rate,
        behind=behind,
        percent=percent,
        eta_seconds=eta,
        local_epoch=local_epoch,
    )


@dataclass(slots=True)
class SyncHealthMonitor:
    """
    Polls a node and a reference and keeps the last two local samples.

    Each ``poll`` performs one read of each endpoint. A failed read never
    raises: an unavailable node resets the window (continuity is lost) and an
    unavailable reference only suppresses the distance figures.
    """

    client: httpx.Client
    """HTTP client used for both endpoints."""

    local: TickEndpoint
    """The node being monitored."""

    reference: TickEndpoint | None = None
    """Network tick source. None disables distance figures."""

    poll_interval: float = POLL_INTERVAL
    """Seconds between polls."""

    clock: Callable[[], float] = time.monotonic
    """Observation clock (injectable for testing)."""

    _previous: TickSample | None = field(default=None, init=False)
    _current: TickSample | None = field(default=None, init=False)

    @property
    def samples(self) -> tuple[TickSample, ...]:
        """The retained samples, oldest first."""
        return tuple(s for s in (self._previous, self._current) if s is not None)

    def reset(self) -> None:
        """Forget all samples."""
        self._previous = None
        self._current = None

    def record(
        self,
        local_tick: int | None,
        reference_tick: int | None,
        *,
        taken_at: float | None = None,
        local_epoch: int | None = None,
    ) -> SyncReport:
        """
        Fold one observation into the window and assess it.

        Args:
            local_tick: The node's tick, or None if it did not answer.
            reference_tick: The network tick, or None if unavailable.
            taken_at: Observation time. Defaults to the monitor's clock.
            local_epoch: Epoch the node reported, if any.
        """
        if local_tick is None:
            self.reset()
        else:
            if taken_at is None:
                taken_at = self.clock()
            sample = TickSample(tick=local_tick, taken_at=taken_at)
            self._previous, self._current = self._current, sample

        return assess(
            self._previous,
            self._current,
            reference_tick,
            self.poll_interval,
            local_epoch=local_epoch,
        )

    def poll(self) -> SyncReport:
        """Read both endpoints once and return the updated report."""
        local = read_tick(self.client, self.local)
        if not local.available:
            logger.warning("Node tick unavailable (%s): %s", local.outcome.name, local.detail)

        reference_tick: int | None = None
        if self.reference is not None:
            reference = read_tick(self.client, self.reference)
            if reference.available:
                reference_tick = reference.tick
            else:
                logger.debug("Reference tick unavailable (%s)", reference.outcome.name)

        return self.record(local.tick, reference_tick, local_epoch=local.epoch)
