"""Bounded polling with backoff — "wait until ready or fail after N seconds".

Used for barriers such as waiting until every participant has published,
and for health-check style probes. The probe is retried while it returns a
falsy value or raises one of the *transient* exception types; any other
exception propagates immediately. Once the deadline passes,
:class:`WaitTimeout` is raised. Nothing here ever blocks indefinitely.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from genesisctl.errors import WaitTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Backoff(StrEnum):
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class PollPolicy:
    """Deadline and pacing for :func:`wait_until`."""

    timeout: float
    interval: float = 1.0
    backoff: Backoff = Backoff.FIXED
    max_interval: float = 30.0

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must be non-negative")
        if self.interval <= 0:
            raise ValueError("interval must be positive")

    def delay(self, attempt: int) -> float:
        """Delay after the *attempt*-th failed probe (1-based)."""
        if self.backoff == Backoff.EXPONENTIAL:
            delay = self.interval * (2 ** (attempt - 1))
        else:
            delay = self.interval
        return min(delay, self.max_interval)


def wait_until(
    probe: Callable[[], T],
    policy: PollPolicy,
    *,
    what: str = "condition",
    transient: tuple[type[Exception], ...] = (),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call *probe* until it returns a truthy value, then return that value.

    Raises:
        WaitTimeout: the deadline elapsed first. The last transient error,
            if any, is chained as ``__cause__``.
    """
    deadline = clock() + policy.timeout
    attempt = 0
    last_error: Exception | None = None
    while True:
        attempt += 1
        try:
            result = probe()
        except transient as exc:
            last_error = exc
            logger.debug("Probe for %s failed (attempt %d): %s", what, attempt, exc)
        else:
            if result:
                return result
            logger.debug("Probe for %s not ready (attempt %d)", what, attempt)

        remaining = deadline - clock()
        if remaining <= 0:
            raise WaitTimeout(
                f"Timed out after {policy.timeout:g}s waiting for {what}",
                what=what,
                attempts=attempt,
                timeout=policy.timeout,
            ) from last_error
        sleep(min(policy.delay(attempt), remaining))
