"""Rate limit domain entities."""

import math
from dataclasses import dataclass


@dataclass
class RateLimitState:
    """Per-caller request counter for the current window.

    Attributes:
        count: Requests accepted in the current window
        window_start: Clock reading when the window opened
    """

    count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed
        reset_in: Seconds until the caller's window resets (0 when allowed)
    """

    allowed: bool
    reset_in: float = 0.0

    @property
    def retry_after(self) -> int:
        """Whole seconds to wait before retrying, never below 1 when denied."""
        if self.allowed:
            return 0
        return max(1, math.ceil(self.reset_in))
