"""
Cooperative polling loop.

Monitors in this package do one round of I/O per iteration, render, then
sleep. The loop below is the only suspension point: it never runs two steps
at once and stops cleanly on interrupt at an iteration boundary.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PollStep = Callable[[int], bool]
"""One poll. Receives the 0-based iteration and returns False to stop the loop."""


@dataclass(frozen=True, slots=True)
class PollLoop:
    """Runs a poll step at a fixed interval."""

    interval: float
    """Seconds to sleep between iterations."""

    max_iterations: int | None = None
    """Stop after this many iterations. None runs until the step says stop."""

    sleep: Callable[[float], None] = time.sleep
    """Sleep function (injectable for testing)."""

    def run(self, step: PollStep) -> int:
        """
        Drive ``step`` until it returns False, the bound is hit, or the user interrupts.

        Returns:
            Number of completed iterations.
        """
        iteration = 0
        try:
            while self.max_iterations is None or iteration < self.max_iterations:
                keep_going = step(iteration)
                iteration += 1
                if not keep_going:
                    break
                if self.max_iterations is not None and iteration >= self.max_iterations:
                    break
                self.sleep(self.interval)
        except KeyboardInterrupt:
            logger.info("Polling interrupted after %d iterations", iteration)
        return iteration
