"""Tests for sync status classification and the health monitor."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from qubic_sync.monitor import (
    SyncHealthMonitor,
    SyncStatus,
    TickEndpoint,
    TickSample,
    assess,
)

LOCAL = "http://node.test/tick-info"
NETWORK = "https://rpc.test/v1/tick-info"


class TestAssess:
    """Classification from a two-sample window."""

    def test_syncing_figures(self) -> None:
        """100 then 130 ticks three seconds apart, network at 1000."""
        report = assess(TickSample(100, 0.0), TickSample(130, 3.0), 1000, poll_interval=3.0)

        assert report.status is SyncStatus.SYNCING
        assert report.rate == pytest.approx(10.0)
        assert report.behind == 870
        assert report.percent == 13.0
        assert report.eta_seconds == 87

    def test_not_ticking(self) -> None:
        """No progress between samples means not ticking and no ETA."""
        report = assess(TickSample(100, 0.0), TickSample(100, 3.0), 1000)

        assert report.status is SyncStatus.NOT_TICKING
        assert report.rate == 0.0
        assert report.behind == 900
        assert report.eta_seconds is None

    def test_regression_is_not_ticking(self) -> None:
        """A tick going backwards is not progress."""
        report = assess(TickSample(130, 0.0), TickSample(120, 3.0), 1000)

        assert report.status is SyncStatus.NOT_TICKING
        assert report.eta_seconds is None

    def test_single_sample_is_checking(self) -> None:
        """One sample cannot tell whether the node advances."""
        report = assess(None, TickSample(100, 0.0), 1000)

        assert report.status is SyncStatus.CHECKING
        assert report.rate is None
        assert report.behind == 900
        assert report.eta_seconds is None

    def test_synced_needs_only_one_sample(self) -> None:
        """Reaching the reference tick is enough to be synced."""
        report = assess(None, TickSample(1000, 0.0), 1000)

        assert report.status is SyncStatus.SYNCED
        assert report.behind == 0
        assert report.percent == 100.0

    def test_ahead_of_reference(self) -> None:
        """A node ahead of a lagging reference is synced, capped at 100%."""
        report = assess(TickSample(1000, 0.0), TickSample(1010, 3.0), 1005)

        assert report.status is SyncStatus.SYNCED
        assert report.behind == 0
        assert report.percent == 100.0

    def test_reference_unavailable(self) -> None:
        """Classification still works; distance figures are dropped."""
        report = assess(TickSample(100, 0.0), TickSample(130, 3.0), None)

        assert report.status is SyncStatus.SYNCING
        assert report.rate == pytest.approx(10.0)
        assert report.behind is None
        assert report.percent is None
        assert report.eta_seconds is None

    def test_same_timestamp_uses_poll_interval(self) -> None:
        """Identical timestamps fall back to the poll interval as elapsed time."""
        report = assess(TickSample(100, 5.0), TickSample(106, 5.0), 1000, poll_interval=2.0)

        assert report.rate == pytest.approx(3.0)

    def test_no_local_sample(self) -> None:
        """Without a local tick nothing can be said."""
        report = assess(None, None, 1000)

        assert report.status is SyncStatus.CHECKING
        assert report.local_tick is None
        assert report.reference_tick == 1000

    def test_status_labels(self) -> None:
        """Labels are the human-facing names."""
        assert SyncStatus.NOT_TICKING.label == "NOT TICKING"
        assert SyncStatus.SYNCED.label == "SYNCED"


class TestRecord:
    """The monitor's sample window."""

    def _monitor(self, make_client: Callable[..., httpx.Client]) -> SyncHealthMonitor:
        client = make_client(lambda request: httpx.Response(500))
        return SyncHealthMonitor(client=client, local=TickEndpoint.lite(LOCAL))

    def test_window_keeps_two_samples(self, make_client: Callable[..., httpx.Client]) -> None:
        """Only the last two samples are retained."""
        monitor = self._monitor(make_client)

        monitor.record(100, 1000, taken_at=0.0)
        monitor.record(110, 1000, taken_at=3.0)
        report = monitor.record(130, 1000, taken_at=6.0)

        assert [s.tick for s in monitor.samples] == [110, 130]
        assert report.rate == pytest.approx(20 / 3)

    def test_first_record_is_checking(self, make_client: Callable[..., httpx.Client]) -> None:
        """The first observation only starts the window."""
        assert self._monitor(make_client).record(100, 1000).status is SyncStatus.CHECKING

    def test_unavailable_local_resets(self, make_client: Callable[..., httpx.Client]) -> None:
        """Losing the node breaks continuity: classification starts over."""
        monitor = self._monitor(make_client)
        monitor.record(100, 1000, taken_at=0.0)
        monitor.record(130, 1000, taken_at=3.0)

        lost = monitor.record(None, 1000)
        back = monitor.record(160, 1000, taken_at=9.0)

        assert lost.status is SyncStatus.CHECKING
        assert back.status is SyncStatus.CHECKING
        assert monitor.samples == (TickSample(160, 9.0),)

    def test_clock_is_used(self, make_client: Callable[..., httpx.Client]) -> None:
        """Samples are stamped by the injected clock."""
        times = iter([10.0, 12.0])
        client = make_client(lambda request: httpx.Response(500))
        monitor = SyncHealthMonitor(
            client=client, local=TickEndpoint.lite(LOCAL), clock=lambda: next(times)
        )

        monitor.record(100, None)
        report = monitor.record(110, None)

        assert report.rate == pytest.approx(5.0)


class TestPoll:
    """End-to-end polling through a mock transport."""

    def test_poll_reads_both_endpoints(self, make_client: Callable[..., httpx.Client]) -> None:
        """Two polls against a lite node and the network give a syncing report."""
        local_ticks = iter([100, 130])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "node.test":
                return httpx.Response(200, json={"tick": next(local_ticks), "epoch": 187})
            return httpx.Response(200, json={"tickInfo": {"tick": 1000, "epoch": 187}})

        times = iter([0.0, 3.0])
        monitor = SyncHealthMonitor(
            client=make_client(handler),
            local=TickEndpoint.lite(LOCAL),
            reference=TickEndpoint.network(NETWORK),
            clock=lambda: next(times),
        )

        first = monitor.poll()
        second = monitor.poll()

        assert first.status is SyncStatus.CHECKING
        assert second.status is SyncStatus.SYNCING
        assert second.eta_seconds == 87
        assert second.local_epoch == 187

    def test_poll_survives_unreachable_reference(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        """A dead reference only drops the distance figures."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "node.test":
                return httpx.Response(200, json={"currentFetchingTick": 500})
            raise httpx.ConnectError("down", request=request)

        monitor = SyncHealthMonitor(
            client=make_client(handler),
            local=TickEndpoint.bob(LOCAL),
            reference=TickEndpoint.network(NETWORK),
        )

        report = monitor.poll()

        assert report.local_tick == 500
        assert report.reference_tick is None
        assert report.behind is None

    def test_poll_unreachable_node(self, make_client: Callable[..., httpx.Client]) -> None:
        """An unreachable node yields a checking report without raising."""
        monitor = SyncHealthMonitor(
            client=make_client(lambda request: httpx.Response(503)),
            local=TickEndpoint.lite(LOCAL),
        )

        report = monitor.poll()

        assert report.status is SyncStatus.CHECKING
        assert report.local_tick is None
