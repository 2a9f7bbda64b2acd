"""
Revision history of the version artifact.

The reconciler only needs two things from version control: the list of
revisions that touched the artifact (newest first) and the artifact's
content at one of those revisions. Neither operation touches the working tree.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .config import ARTIFACT_PATH, GIT_TIMEOUT

logger = logging.getLogger(__name__)


class RevisionHistory(Protocol):
    """Read-only view of the artifact's history."""

    def revisions(self, limit: int) -> list[str]:
        """Up to ``limit`` revisions that changed the artifact, most recent first."""
        ...

    def read_artifact(self, revision: str) -> str | None:
        """The artifact's content at ``revision``, or None if it cannot be read."""
        ...


@dataclass(frozen=True, slots=True)
class InMemoryHistory:
    """
    A synthetic history built from ``(revision, content)`` pairs.

    Entries are given most recent first, exactly as ``revisions`` returns them.
    """

    entries: Sequence[tuple[str, str]] = ()
    """Revision identifiers and artifact contents, newest first."""

    def revisions(self, limit: int) -> list[str]:
        """Return the first ``limit`` revision identifiers."""
        return [revision for revision, _ in self.entries[:limit]]

    def read_artifact(self, revision: str) -> str | None:
        """Return the content stored for ``revision``."""
        for candidate, content in self.entries:
            if candidate == revision:
                return content
        return None


@dataclass(frozen=True, slots=True)
class GitHistory:
    """History backed by the ``git`` command line in a local checkout."""

    repo: Path
    """Root of the source checkout."""

    artifact: str = ARTIFACT_PATH
    """Artifact path relative to ``repo``, in git's forward-slash form."""

    git: str = "git"
    """Git executable."""

    timeout: float = GIT_TIMEOUT
    """Timeout for each git invocation in seconds."""

    run: Callable[..., subprocess.CompletedProcess[str]] = field(default=subprocess.run)
    """Process runner (injectable for testing)."""

    def _git(self, *args: str) -> str | None:
        cmd = [self.git, "-C", str(self.repo), *args]
        kwargs: dict[str, Any] = {
            "capture_output": True,
            "text": True,
            "errors": "replace",
            "timeout": self.timeout,
            "check": False,
        }
        try:
            result = self.run(cmd, **kwargs)
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("git %s failed: %s", args[0], exc)
            return None
        if result.returncode != 0:
            logger.debug("git %s exited %d: %s", args[0], result.returncode, result.stderr.strip())
            return None
        return result.stdout

    def revisions(self, limit: int) -> list[str]:
        """List commits on any ref that touched the artifact, newest first."""
        out = self._git("log", "--all", "--format=%H", "-n", str(limit), "--", self.artifact)
        if out is None:
            return []
        return [line.strip() for line in out.splitlines() if line.strip()]

    def read_artifact(self, revision: str) -> str | None:
        """Show the artifact as committed in ``revision``."""
        return self._git("show", f"{revision}:{self.artifact}")
