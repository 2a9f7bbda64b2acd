"""
Node sync monitoring.

Samples a node's tick over time, compares it with the network, and derives
a sync status and an estimated time to completion.
"""

from .config import BOB_STATUS_URL, LITE_TICK_INFO_URL, NETWORK_TICK_INFO_URL, POLL_INTERVAL
from .endpoints import (
    BobStatus,
    EndpointFlavor,
    NetworkTickInfo,
    NodeInfo,
    ReadOutcome,
    TickEndpoint,
    TickReading,
    read_node_info,
    read_tick,
)
from .format import format_eta, format_number, render_report
from .health import SyncHealthMonitor, SyncReport, SyncStatus, TickSample, assess

__all__ = [
    # Monitor
    "SyncHealthMonitor",
    "SyncReport",
    "SyncStatus",
    "TickSample",
    "assess",
    # Endpoints
    "TickEndpoint",
    "EndpointFlavor",
    "TickReading",
    "ReadOutcome",
    "BobStatus",
    "NodeInfo",
    "NetworkTickInfo",
    "read_tick",
    "read_node_info",
    # Rendering
    "format_eta",
    "format_number",
    "render_report",
    # Constants
    "BOB_STATUS_URL",
    "LITE_TICK_INFO_URL",
    "NETWORK_TICK_INFO_URL",
    "POLL_INTERVAL",
]
