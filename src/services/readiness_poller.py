"""
Readiness Poller
Bounded, strictly sequential status polling after deployment creation
"""

import math
import time
from dataclasses import dataclass
from typing import Callable

from src.api.exceptions import APIError
from src.models.deployment import DeploymentState
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PollOutcome:
    """Last observed state; ``timed_out`` means no terminal state was seen"""
    state: DeploymentState
    attempts: int
    timed_out: bool


class ReadinessPoller:
    """
    Calls a status check on a fixed interval until it reports READY or
    ERROR, or until ``max_wait_seconds`` is used up.

    The check runs at most ``ceil(max_wait / interval)`` times, and no new
    check starts once ``max_wait_seconds`` of wall time have passed, so slow
    status calls cannot stretch the wait. A check that raises a provider
    error counts as an attempt and polling goes on.
    Running out of time is reported, not raised: callers decide what a
    timeout means.
    """

    def __init__(
        self,
        interval_seconds: float = 2.0,
        max_wait_seconds: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        if max_wait_seconds <= 0:
            raise ValueError("max_wait_seconds must be greater than zero")

        self.interval_seconds = interval_seconds
        self.max_wait_seconds = max_wait_seconds
        self._sleep = sleep
        self._clock = clock

    @property
    def max_attempts(self) -> int:
        return max(1, math.ceil(self.max_wait_seconds / self.interval_seconds))

    def poll(self, deployment_id: str, check: Callable[[str], DeploymentState]) -> PollOutcome:
        """
        Poll ``check(deployment_id)`` until a terminal state or until polling runs out.

        Args:
            deployment_id: Provider deployment id
            check: One-shot status function, usually ``provider.poll_status``

        Returns:
            PollOutcome
        """
        state = DeploymentState.BUILDING
        max_attempts = self.max_attempts
        deadline = self._clock() + self.max_wait_seconds

        logger.info(
            f"Waiting for {deployment_id} to become ready "
            f"(every {self.interval_seconds}s, up to {self.max_wait_seconds}s)"
        )

        for attempt in range(1, max_attempts + 1):
            try:
                state = check(deployment_id)
            except APIError as e:
                logger.warning(f"Status check {attempt}/{max_attempts} failed: {e}")
                state = DeploymentState.BUILDING

            if state in (DeploymentState.READY, DeploymentState.ERROR):
                logger.info(f"Deployment {deployment_id} is {state.value} after {attempt} checks")
                return PollOutcome(state=state, attempts=attempt, timed_out=False)

            if self._clock() >= deadline:
                break
            if attempt < max_attempts:
                self._sleep(self.interval_seconds)

        logger.warning(
            f"⏱️  Deployment {deployment_id} not ready after {self.max_wait_seconds}s ({attempt} checks)"
        )
        return PollOutcome(state=state, attempts=attempt, timed_out=True)
