"""Per-caller request ceiling with a resetting window.

Algorithm:
    - First request from a caller opens a window with count=1.
    - A request arriving after the window length has elapsed opens a new
      window with count=1.
    - Otherwise the request is denied once the count has reached the ceiling
      (reporting the time left until the window resets), else the count is
      incremented.

State is process-local and best-effort: it is lost on restart and not shared
between workers. Callers are tracked in an OrderedDict bounded by
``max_keys``; the least recently seen caller is dropped first.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from threadcraft.config import settings
from threadcraft.entities import RateLimitDecision, RateLimitState


class RateLimitService:
    """In-process rate limiter keyed by caller identity.

    Example:
        ```python
        limiter = RateLimitService(max_requests=20, window_seconds=600)
        decision = limiter.check("203.0.113.7")
        if not decision.allowed:
            print(f"retry in {decision.retry_after}s")
        ```
    """

    def __init__(
        self,
        max_requests: int | None = None,
        window_seconds: float | None = None,
        max_keys: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            max_requests: Requests allowed per window. Defaults to settings.
            window_seconds: Window length in seconds. Defaults to settings.
            max_keys: Ceiling on tracked callers. Defaults to settings.
            clock: Monotonic time source (injectable for tests).
        """
        self._max_requests = max_requests or settings.rate_limit_max_requests
        self._window = window_seconds or settings.rate_limit_window_seconds
        self._max_keys = max_keys or settings.rate_limit_max_keys
        self._clock = clock
        self._states: OrderedDict[str, RateLimitState] = OrderedDict()
        # Read-modify-write must be atomic when handlers run on several threads
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        max_requests: int | None = None,
        window_seconds: float | None = None,
    ) -> "RateLimitService":
        """Factory method to create RateLimitService with defaults from settings."""
        return cls(max_requests=max_requests, window_seconds=window_seconds)

    def check(self, caller_id: str) -> RateLimitDecision:
        """Record a request from caller_id and decide whether it may proceed.

        Args:
            caller_id: Best-effort caller identity (usually an IP string)

        Returns:
            RateLimitDecision; when denied, reset_in is the time left in the window
        """
        now = self._clock()
        with self._lock:
            state = self._states.get(caller_id)

            if state is None or now - state.window_start > self._window:
                self._states[caller_id] = RateLimitState(count=1, window_start=now)
                self._touch(caller_id)
                return RateLimitDecision(allowed=True)

            self._states.move_to_end(caller_id)
            if state.count >= self._max_requests:
                reset_in = self._window - (now - state.window_start)
                return RateLimitDecision(allowed=False, reset_in=max(0.0, reset_in))

            state.count += 1
            return RateLimitDecision(allowed=True)

    def _touch(self, caller_id: str) -> None:
        self._states.move_to_end(caller_id)
        while len(self._states) > self._max_keys:
            self._states.popitem(last=False)

    def state_for(self, caller_id: str) -> RateLimitState | None:
        """Get the current state for a caller (for testing and stats)."""
        return self._states.get(caller_id)

    def reset(self) -> None:
        """Forget every tracked caller."""
        with self._lock:
            self._states.clear()

    def get_stats(self) -> dict:
        """Get limiter statistics."""
        return {
            "tracked_callers": len(self._states),
            "max_requests": self._max_requests,
            "window_seconds": self._window,
        }
