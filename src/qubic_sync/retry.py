"""
Retry Policy
============

Bounded retry-with-delay for calls against flaky remote services.

The peer discovery service and snapshot storage are both public endpoints
that occasionally time out. Callers describe how hard to try with a
``RetryPolicy`` and hand it the operation; the policy owns the sleeping.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    How many times to try an operation and how long to wait between tries.

    The delay grows geometrically by ``multiplier`` after every failed attempt.
    A multiplier of 1.0 gives a fixed delay.
    """

    max_attempts: int = 3
    """Total attempts, including the first one."""

    delay: float = 5.0
    """Seconds to wait after the first failed attempt."""

    multiplier: float = 1.0
    """Factor applied to the delay after each failed attempt."""

    sleep: Callable[[float], None] = time.sleep
    """Sleep function (injectable for testing)."""

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must be non-negative, got {self.delay}")
        if self.multiplier < 1.0:
            raise ValueError(f"multiplier must be at least 1.0, got {self.multiplier}")

    def delays(self) -> list[float]:
        """Delays slept between consecutive attempts (one fewer than attempts)."""
        return [self.delay * self.multiplier**i for i in range(self.max_attempts - 1)]

    def run(self, operation: Callable[[int], T | None], *, label: str = "operation") -> T | None:
        """
        Call ``operation`` until it returns a non-None value or attempts run out.

        Args:
            operation: Called with the 1-based attempt number. Returns None on failure.
            label: Name used in log messages.

        Returns:
            The first non-None result, or None when every attempt failed.
        """
        waits = self.delays()
        for attempt in range(1, self.max_attempts + 1):
            logger.info("%s (attempt %d/%d)...", label, attempt, self.max_attempts)
            result = operation(attempt)
            if result is not None:
                return result
            if attempt < self.max_attempts:
                self.sleep(waits[attempt - 1])
        logger.warning("%s failed after %d attempts", label, self.max_attempts)
        return None
