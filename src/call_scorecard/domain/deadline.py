"""Wall-clock budget for a single stage invocation."""

import time
from collections.abc import Callable

from call_scorecard.exceptions import StageTimeoutError


class Deadline:
    """Tracks the time left in one invocation's budget."""

    def __init__(
        self,
        stage: str,
        budget_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stage = stage
        self.budget_seconds = budget_seconds
        self._clock = clock
        self._expires_at = clock() + budget_seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def ensure_time_left(self) -> None:
        """Raises StageTimeoutError once the budget is spent."""
        if self.expired:
            raise StageTimeoutError(self.stage, self.budget_seconds)
