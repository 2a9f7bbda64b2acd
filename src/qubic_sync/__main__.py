"""
Node sync tooling CLI entry point.

Keeps a node's peer list, source build and local state consistent with the
network and with the published epoch snapshots.

Usage::

    python -m qubic_sync peers --peers "1.2.3.4,bob:5.6.7.8,BM:9.9.9.9:21841:1-2-3-4"
    python -m qubic_sync peers --discover
    python -m qubic_sync epoch
    python -m qubic_sync reconcile --source ./qubic-core-lite --epoch 187
    python -m qubic_sync status --node lite --watch
    python -m qubic_sync info --node lite
    python -m qubic_sync progress --file ./data/ep187-full.zip --epoch 187

Commands:
    peers      Normalize peers (given or discovered) into the canonical list
    epoch      Print the newest epoch with a published snapshot
    reconcile  Align the source tree's EPOCH/TICK constants with an epoch
    status     Sample the node's tick and report sync status and ETA
    info       Show node info (tick, epoch, alias, operator)
    progress   Follow a snapshot archive download until it disappears
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

import httpx

from qubic_sync.monitor import (
    EndpointFlavor,
    SyncHealthMonitor,
    TickEndpoint,
    read_node_info,
    render_report,
)
from qubic_sync.peers import fetch_peer_tokens, normalize_peers
from qubic_sync.polling import PollLoop
from qubic_sync.reconcile import (
    EpochSourceReconciler,
    GitHistory,
    patch_max_processors,
)
from qubic_sync.retry import RetryPolicy
from qubic_sync.settings import MonitorSettings, ToolConfig
from qubic_sync.snapshot import SnapshotProgressTracker, archive_size, latest_epoch
from qubic_sync.types import QubicSyncError

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = self.formatTime(record, self.datefmt)
        colored_time = f"{self.CYAN}{timestamp}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{colored_time} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the CLI with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def positive_int(value: str) -> int:
    """Argparse type for integers of at least one."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def local_endpoint(settings: MonitorSettings, node: str | None, url: str | None) -> TickEndpoint:
    """Pick the local tick endpoint from flags, falling back to settings."""
    flavor = node or settings.node
    override = url or settings.local_url
    endpoint = TickEndpoint.lite() if flavor == "lite" else TickEndpoint.bob()
    return TickEndpoint(
        url=override or endpoint.url,
        flavor=endpoint.flavor,
        timeout=settings.timeout,
    )


def cmd_peers(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Normalize given or discovered peers and print the canonical list."""
    raw: list[str] = list(args.peers)
    if args.discover or not raw:
        policy = RetryPolicy(
            max_attempts=config.peers.attempts,
            delay=config.peers.retry_delay,
        )
        tokens = fetch_peer_tokens(client, config.peers.api_url, policy, limit=config.peers.limit)
        if tokens is not None:
            raw.extend(tokens)

    peers = normalize_peers(raw)
    print(peers.to_option())
    return 0


def cmd_epoch(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Print the newest published epoch."""
    epoch = latest_epoch(client, config.snapshot.storage_url)
    if epoch is None:
        return 1
    print(epoch)
    return 0


def cmd_reconcile(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Align the source tree with the target epoch."""
    source: Path = args.source
    target = args.epoch
    if target is None and not args.no_epoch:
        target = latest_epoch(client, config.snapshot.storage_url)

    depth = args.max_search_depth or config.reconcile.max_search_depth
    on_missing = "warn" if args.allow_stale else config.reconcile.on_missing
    reconciler = EpochSourceReconciler(
        source_dir=source,
        history=GitHistory(repo=source),
        max_search_depth=depth,
        on_missing=on_missing,
    )
    result = reconciler.reconcile(target)
    print(f"{result.outcome.name} epoch={result.markers.epoch} tick={result.markers.tick}")

    if args.max_processors is not None:
        patch_max_processors(source, args.max_processors)
    return 0


def cmd_status(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Sample the node and print its sync status."""
    settings = config.monitor
    interval = args.interval or settings.poll_interval
    reference = TickEndpoint(
        url=args.network_url or settings.network_url,
        flavor=EndpointFlavor.NETWORK,
        timeout=settings.timeout,
    )
    monitor = SyncHealthMonitor(
        client=client,
        local=local_endpoint(settings, args.node, args.local_url),
        reference=reference,
        poll_interval=interval,
    )

    def step(iteration: int) -> bool:
        report = monitor.poll()
        if args.watch or iteration > 0:
            print("\n".join(render_report(report)))
        return True

    # Two samples give one rate measurement; watch mode keeps sampling.
    PollLoop(interval=interval, max_iterations=None if args.watch else 2).run(step)
    return 0


def cmd_info(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Show node identity and position."""
    endpoint = local_endpoint(config.monitor, args.node, args.local_url)
    info = read_node_info(client, endpoint)
    for label, value in (
        ("Alias", info.alias),
        ("Operator", info.operator),
        ("Epoch", info.epoch),
        ("Tick", info.tick),
        ("Version", info.version),
        ("Uptime", None if info.uptime is None else f"{info.uptime}s"),
    ):
        if value is not None:
            print(f"  {label + ':':<10} {value}")
    return 0


def cmd_progress(args: argparse.Namespace, config: ToolConfig, client: httpx.Client) -> int:
    """Follow an archive until it disappears."""
    total = args.total
    if total is None and args.epoch is not None:
        total = archive_size(client, args.epoch, config.snapshot.storage_url)
    tracker = SnapshotProgressTracker(path=args.file, total_bytes=total)

    def step(_: int) -> bool:
        progress = tracker.sample()
        if progress is None:
            print("No longer downloading")
            return False
        line = progress.describe()
        if tracker.stalled_polls:
            line += f" (no growth for {tracker.stalled_polls} polls)"
        print(line)
        return True

    PollLoop(interval=args.interval or config.snapshot.poll_interval).run(step)
    return 0


COMMANDS = {
    "peers": cmd_peers,
    "epoch": cmd_epoch,
    "reconcile": cmd_reconcile,
    "status": cmd_status,
    "info": cmd_info,
    "progress": cmd_progress,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="qubic-sync",
        description="Node sync tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML settings file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    peers = sub.add_parser("peers", help="Normalize peers into the canonical list")
    peers.add_argument(
        "--peers",
        action="append",
        default=[],
        help="Comma-separated peers (can be repeated)",
    )
    peers.add_argument(
        "--discover",
        action="store_true",
        help="Also fetch peers from the discovery service",
    )

    sub.add_parser("epoch", help="Print the newest published epoch")

    reconcile = sub.add_parser("reconcile", help="Align source markers with an epoch")
    reconcile.add_argument("--source", type=Path, required=True, help="Source checkout root")
    reconcile.add_argument(
        "--epoch",
        type=int,
        default=None,
        help="Target epoch (detected if omitted)",
    )
    reconcile.add_argument(
        "--no-epoch",
        action="store_true",
        help="Do not detect an epoch; build from the current source",
    )
    reconcile.add_argument(
        "--allow-stale",
        action="store_true",
        help="Keep going with the current markers if the epoch is not in history",
    )
    reconcile.add_argument(
        "--max-search-depth",
        type=positive_int,
        default=None,
        help="Revisions of the settings header to search",
    )
    reconcile.add_argument(
        "--max-processors",
        type=positive_int,
        default=None,
        help="Also cap MAX_NUMBER_OF_PROCESSORS",
    )

    for name, help_text in (("status", "Report sync status and ETA"), ("info", "Show node info")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--node", choices=["bob", "lite"], default=None, help="Local node flavor")
        cmd.add_argument("--local-url", default=None, help="Override the local tick endpoint")
        if name == "status":
            cmd.add_argument(
                "--network-url", default=None, help="Override the network tick endpoint"
            )
            cmd.add_argument("--interval", type=float, default=None, help="Seconds between samples")
            cmd.add_argument("--watch", action="store_true", help="Keep polling until interrupted")

    progress = sub.add_parser("progress", help="Follow a snapshot archive download")
    progress.add_argument("--file", type=Path, required=True, help="Archive being written")
    progress.add_argument("--total", type=int, default=None, help="Expected size in bytes")
    progress.add_argument(
        "--epoch", type=int, default=None, help="Probe the size of this epoch's archive"
    )
    progress.add_argument("--interval", type=float, default=None, help="Seconds between samples")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    config = ToolConfig.from_yaml_file(args.config) if args.config else ToolConfig()

    try:
        with httpx.Client() as client:
            return COMMANDS[args.command](args, config, client)
    except QubicSyncError as e:
        logger.error("%s", e.message)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
