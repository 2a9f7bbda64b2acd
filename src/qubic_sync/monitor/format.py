"""Human-facing rendering of sync reports."""

from __future__ import annotations

from .health import SyncReport, SyncStatus


def format_number(value: int) -> str:
    """Group thousands with commas."""
    return f"{value:,}"


def format_eta(seconds: int) -> str:
    """
    Render a duration as a coarse estimate.

    Under a minute reads ``< 1 min``; then minutes, hours and minutes, or
    days and hours, each prefixed with ``~``.
    """
    if seconds < 60:
        return "< 1 min"
    if seconds < 3600:
        return f"~{seconds // 60} min"
    if seconds < 86400:
        return f"~{seconds // 3600}h {(seconds % 3600) // 60}m"
    return f"~{seconds // 86400}d {(seconds % 86400) // 3600}h"


def render_report(report: SyncReport) -> list[str]:
    """Render a report as aligned ``Label: value`` lines."""
    status = f"● {report.status.label}"
    if report.status is SyncStatus.SYNCING:
        status += " (ticking)"
    lines = [f"  Status:    {status}"]

    if report.local_tick is None:
        lines.append("  Node Tick: unavailable")
        return lines

    lines.append(f"  Node Tick: {format_number(report.local_tick)}")
    if report.local_epoch is not None:
        lines.append(f"  Epoch:     {report.local_epoch}")

    if report.reference_tick is None:
        lines.append("  Net Tick:  unavailable")
        return lines

    lines.append(f"  Net Tick:  {format_number(report.reference_tick)}")
    if report.behind:
        lines.append(
            f"  Behind:    {format_number(report.behind)} ticks ({report.percent}% synced)"
        )
        if report.eta_seconds is not None:
            lines.append(f"  ETA:       {format_eta(report.eta_seconds)}")
    return lines
