"""Tests for reading and patching version markers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from qubic_sync.reconcile import (
    VersionMarkers,
    parse_markers,
    patch_define,
    read_define,
    read_markers,
    write_markers,
)
from qubic_sync.types import VersionMarkerError


class TestParsing:
    """Extracting marker values from header text."""

    def test_parse_markers(self, make_header: Callable[..., str]) -> None:
        """Both markers are read."""
        assert parse_markers(make_header(187, 29_000_000)) == VersionMarkers(187, 29_000_000)

    def test_similar_names_do_not_match(self) -> None:
        """TICK_DURATION is not TICK."""
        text = "#define TICK_DURATION 1000\n#define EPOCH 3\n"

        assert read_define(text, "TICK") is None
        assert parse_markers(text) is None

    def test_indented_and_tabbed_defines(self) -> None:
        """Leading whitespace and tabs are tolerated."""
        text = "  #define\tEPOCH\t12\n#define TICK 34 // comment\n"

        assert parse_markers(text) == VersionMarkers(12, 34)


class TestWorkingTree:
    """Reading and writing the artifact on disk."""

    def test_read_markers(self, tmp_path: Path, make_header: Callable[..., str]) -> None:
        """Markers are read from the file."""
        path = tmp_path / "settings.h"
        path.write_text(make_header(5, 100), encoding="utf-8")

        assert read_markers(path) == VersionMarkers(5, 100)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing artifact is a marker error."""
        with pytest.raises(VersionMarkerError) as exc_info:
            read_markers(tmp_path / "absent.h")
        assert exc_info.value.marker is None

    def test_missing_marker(self, tmp_path: Path) -> None:
        """The missing marker is named."""
        path = tmp_path / "settings.h"
        path.write_text("#define EPOCH 5\n", encoding="utf-8")

        with pytest.raises(VersionMarkerError) as exc_info:
            read_markers(path)
        assert exc_info.value.marker == "TICK"

    def test_write_preserves_other_content(
        self, tmp_path: Path, make_header: Callable[..., str]
    ) -> None:
        """Only the two values change; every other byte is preserved."""
        path = tmp_path / "settings.h"
        original = make_header(7, 200).replace("\n", "\r\n")
        path.write_bytes(original.encode("utf-8"))

        write_markers(path, VersionMarkers(6, 150))

        expected = make_header(6, 150).replace("\n", "\r\n")
        assert path.read_bytes() == expected.encode("utf-8")

    def test_patch_define(self, tmp_path: Path, make_header: Callable[..., str]) -> None:
        """A single constant can be patched."""
        path = tmp_path / "settings.h"
        path.write_text(make_header(7, 200, processors=8), encoding="utf-8")

        assert patch_define(path, "MAX_NUMBER_OF_PROCESSORS", 4) is True
        assert read_define(path.read_text(encoding="utf-8"), "MAX_NUMBER_OF_PROCESSORS") == 4
        assert read_markers(path) == VersionMarkers(7, 200)

    def test_patch_define_absent(self, tmp_path: Path) -> None:
        """Patching a constant that is not there leaves the file alone."""
        path = tmp_path / "settings.h"
        path.write_text("#define EPOCH 1\n", encoding="utf-8")

        assert patch_define(path, "MAX_NUMBER_OF_PROCESSORS", 4) is False
        assert path.read_text(encoding="utf-8") == "#define EPOCH 1\n"

    def test_undecodable_file(self, tmp_path: Path, make_header: Callable[..., str]) -> None:
        """A header that is not UTF-8 is a marker error, not a decode crash."""
        path = tmp_path / "settings.h"
        path.write_bytes(b"// caf\xe9\n" + make_header(5, 100).encode("utf-8"))

        with pytest.raises(VersionMarkerError) as exc_info:
            read_markers(path)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
