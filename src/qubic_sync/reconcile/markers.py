"""
Version markers.

The node's source tree pins the epoch it was built for through two integer
preprocessor constants in a settings header::

    #define EPOCH 187
    #define TICK 29000000

Both always change together in the project's history. This module reads and
rewrites those values without touching any other byte of the file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from qubic_sync.types import VersionMarkerError

from .config import EPOCH_MARKER, TICK_MARKER


@dataclass(frozen=True, slots=True)
class VersionMarkers:
    """The epoch and tick constants of a settings header."""

    epoch: int
    """Epoch the source is built for."""

    tick: int
    """Initial tick of that epoch."""


@dataclass(frozen=True, slots=True)
class EpochSourceRecord:
    """The markers as committed in one historical revision."""

    epoch: int
    """Epoch marker at that revision."""

    tick: int
    """Tick marker at that revision."""

    revision: str
    """Opaque revision identifier (a commit hash for git)."""

    @property
    def markers(self) -> VersionMarkers:
        """The record's markers without the revision."""
        return VersionMarkers(epoch=self.epoch, tick=self.tick)


def _define_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"^(?P<head>[ \t]*#define[ \t]+{re.escape(name)}[ \t]+)(?P<value>\d+)\b",
        re.MULTILINE,
    )


def read_define(text: str, name: str) -> int | None:
    """Return the integer value of ``#define <name> <n>``, or None if absent."""
    match = _define_pattern(name).search(text)
    if match is None:
        return None
    return int(match.group("value"))


def replace_define(text: str, name: str, value: int) -> tuple[str, int]:
    """
    Rewrite every ``#define <name> <n>`` line to carry ``value``.

    Returns:
        The new text and the number of lines rewritten.
    """
    return _define_pattern(name).subn(lambda m: f"{m.group('head')}{value}", text)


def parse_markers(text: str) -> VersionMarkers | None:
    """Extract both markers from header text. None if either is missing."""
    epoch = read_define(text, EPOCH_MARKER)
    tick = read_define(text, TICK_MARKER)
    if epoch is None or tick is None:
        return None
    return VersionMarkers(epoch=epoch, tick=tick)


def _read(path: Path) -> str:
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise VersionMarkerError(path) from exc


def _write(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)


def read_markers(path: Path | str) -> VersionMarkers:
    """
    Read the working tree's markers.

    Raises:
        VersionMarkerError: If the file cannot be read or lacks a marker.
    """
    path = Path(path)
    text = _read(path)
    epoch = read_define(text, EPOCH_MARKER)
    if epoch is None:
        raise VersionMarkerError(path, EPOCH_MARKER)
    tick = read_define(text, TICK_MARKER)
    if tick is None:
        raise VersionMarkerError(path, TICK_MARKER)
    return VersionMarkers(epoch=epoch, tick=tick)


def write_markers(path: Path | str, markers: VersionMarkers) -> None:
    """
    Patch both markers in place. Everything else in the file is preserved.

    Raises:
        VersionMarkerError: If the file cannot be read or lacks a marker.
    """
    path = Path(path)
    text = _read(path)
    for name, value in ((EPOCH_MARKER, markers.epoch), (TICK_MARKER, markers.tick)):
        text, count = replace_define(text, name, value)
        if count == 0:
            raise VersionMarkerError(path, name)
    _write(path, text)


def patch_define(path: Path | str, name: str, value: int) -> bool:
    """
    Set a single integer ``#define`` in place.

    Returns:
        True if the constant was found and rewritten, False if the file has no such constant.

    Raises:
        VersionMarkerError: If the file cannot be read.
    """
    path = Path(path)
    text, count = replace_define(_read(path), name, value)
    if count == 0:
        return False
    _write(path, text)
    return True
