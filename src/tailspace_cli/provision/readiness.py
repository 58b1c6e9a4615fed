"""Readiness polling for external dependencies.

This module provides a bounded, fixed-interval poll used to wait for
the Docker daemon to become responsive.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from .host import command_succeeds


@dataclass
class ReadinessResult:
    """Result of a readiness poll."""

    ready: bool
    attempts: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


class ReadinessPoller:
    """Poll a predicate until it holds or the attempt budget is spent."""

    def __init__(
        self,
        max_attempts: int = 30,
        interval_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize readiness poller.

        Args:
            max_attempts: Maximum number of checks.
            interval_seconds: Seconds between checks.
            sleep: Sleep function (injectable for tests).
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds
        self._sleep = sleep

    def poll(
        self,
        predicate: Callable[[], bool],
        on_attempt: Callable[[int, int], None] | None = None,
    ) -> ReadinessResult:
        """Check ``predicate`` until true or ``max_attempts`` checks fail.

        Args:
            predicate: Readiness check; an exception counts as not ready.
            on_attempt: Optional callback called with (attempt, max_attempts)
                       after each failed check that will be retried.

        Returns:
            ReadinessResult; ``attempts`` is the number of checks made.
        """
        start = datetime.now()
        last_error: str | None = None
        attempt = 0

        while True:
            try:
                if predicate():
                    elapsed = (datetime.now() - start).total_seconds()
                    return ReadinessResult(
                        ready=True, attempts=attempt + 1, elapsed_seconds=elapsed
                    )
                last_error = None
            except Exception as e:
                last_error = str(e)

            attempt += 1
            if attempt >= self.max_attempts:
                break

            if on_attempt:
                on_attempt(attempt, self.max_attempts)
            self._sleep(self.interval_seconds)

        elapsed = (datetime.now() - start).total_seconds()
        error = "did not become ready within timeout"
        if last_error:
            error = f"{error}. Last error: {last_error}"
        return ReadinessResult(
            ready=False,
            attempts=attempt,
            elapsed_seconds=elapsed,
            error=error,
        )


def docker_daemon_ready() -> bool:
    """True when ``docker info`` succeeds."""
    return command_succeeds(["docker", "info"])
