import threading
from dataclasses import dataclass, field


@dataclass
class PerformanceMetrics:
    """Track cache and model-call counters for the running process."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    llm_calls: int = 0
    llm_failures: int = 0
    total_llm_time_ms: float = 0.0
    stub_responses: int = 0
    normalizer_fallbacks: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests

    @property
    def avg_llm_time_ms(self) -> float:
        """Calculate average model call duration."""
        if self.llm_calls == 0:
            return 0.0
        return self.total_llm_time_ms / self.llm_calls

    def record_hit(self) -> None:
        """Record a cache hit."""
        with self._lock:
            self.total_requests += 1
            self.cache_hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        with self._lock:
            self.total_requests += 1
            self.cache_misses += 1

    def record_llm_call(self, duration_ms: float, failed: bool = False) -> None:
        """Record an LLM API call."""
        with self._lock:
            self.llm_calls += 1
            self.total_llm_time_ms += duration_ms
            if failed:
                self.llm_failures += 1

    def record_stub(self) -> None:
        """Record a response generated without provider credentials."""
        with self._lock:
            self.stub_responses += 1

    def record_fallback(self) -> None:
        """Record model output that had to be replaced by the default payload."""
        with self._lock:
            self.normalizer_fallbacks += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "llm_calls": self.llm_calls,
            "llm_failures": self.llm_failures,
            "avg_llm_time_ms": self.avg_llm_time_ms,
            "stub_responses": self.stub_responses,
            "normalizer_fallbacks": self.normalizer_fallbacks,
        }
