"""Periodic execution of processing runs with graceful shutdown."""

import logging
import signal
from collections.abc import Callable
from time import monotonic, sleep

logger = logging.getLogger(__name__)


class PeriodicRunner:
    """Runs a task immediately and then once every interval.

    A failing run is logged and the schedule continues. SIGINT and SIGTERM
    request a shutdown, which takes effect after the current run finishes
    or immediately when the runner is waiting for the next one.

    Attributes:
        task: Callable executed on every tick
        interval_minutes: Minutes between the start of consecutive runs
        max_runs: Stop after this many runs (None runs until shutdown)
        poll_interval: Seconds between shutdown checks while waiting
        shutdown_requested: Flag for graceful shutdown
    """

    def __init__(
        self,
        task: Callable[[], object],
        interval_minutes: float = 60,
        max_runs: int | None = None,
        poll_interval: float = 1,
    ):
        self.task = task
        self.interval_minutes = interval_minutes
        self.max_runs = max_runs
        self.poll_interval = poll_interval
        self.shutdown_requested = False
        self.runs = 0
        self.failures = 0

    def _handle_shutdown(self, signum, frame) -> None:
        logger.info("Shutdown signal received, will exit after current run")
        self.shutdown_requested = True

    def run_once(self) -> bool:
        """Execute the task once.

        Returns:
            True if the task completed, False if it raised
        """
        self.runs += 1
        try:
            self.task()
            return True
        except Exception as e:
            self.failures += 1
            logger.error(f"Scheduled run {self.runs} failed: {e}")
            return False

    def run_forever(self) -> None:
        """Run on schedule until shutdown is requested or max_runs is reached."""
        previous = {
            sig: signal.signal(sig, self._handle_shutdown)
            for sig in (signal.SIGTERM, signal.SIGINT)
        }
        logger.info(f"Scheduling processing every {self.interval_minutes} minutes")

        try:
            while not self.shutdown_requested:
                started = monotonic()
                self.run_once()
                if self.max_runs is not None and self.runs >= self.max_runs:
                    break
                self._wait(started + self.interval_minutes * 60)
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        logger.info(f"Scheduler exiting after {self.runs} runs ({self.failures} failed)")

    def _wait(self, deadline: float) -> None:
        while not self.shutdown_requested:
            remaining = deadline - monotonic()
            if remaining <= 0:
                return
            sleep(min(self.poll_interval, remaining))
