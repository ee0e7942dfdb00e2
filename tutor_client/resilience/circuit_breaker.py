"""
Circuit breaker for backend calls.

Stops hammering an unreachable backend: after a run of consecutive
transport failures the breaker opens and the gateway short-circuits
requests until a cool-down has passed.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many transport failures, requests are refused
- HALF_OPEN: Cool-down elapsed, the next request probes the backend
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpenError(Exception):
    """Raised when a request is refused because the circuit is OPEN."""
    pass


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker.

    Only transport failures are recorded by the gateway; HTTP error
    responses prove the backend is reachable and count as success.

    Examples:
        >>> breaker = CircuitBreaker(failure_threshold=5, reset_timeout=30)
        >>> breaker.before_request()  # raises CircuitBreakerOpenError if OPEN
        >>> breaker.record_failure()
        >>> breaker.record_success()
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening
            reset_timeout: Seconds to wait before probing again
            clock: Monotonic time source
        """
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock

        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self.state = CircuitState.CLOSED

    def before_request(self):
        """
        Check whether a request may be sent.

        Raises:
            CircuitBreakerOpenError: If the circuit is OPEN and the
                cool-down has not elapsed
        """
        if self.state != CircuitState.OPEN:
            return

        elapsed = self._clock() - (self.opened_at or 0.0)
        if elapsed >= self.reset_timeout:
            logger.info("Circuit breaker: Entering HALF_OPEN state")
            self.state = CircuitState.HALF_OPEN
            return

        raise CircuitBreakerOpenError(
            f"Circuit breaker is OPEN (failures: {self.failure_count}, "
            f"retry in {self.reset_timeout - elapsed:.0f}s)"
        )

    def record_success(self):
        """Record a request that reached the backend."""
        if self.state != CircuitState.CLOSED:
            logger.info("Circuit breaker: Back to CLOSED state")
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at = None

    def record_failure(self):
        """Record a transport failure."""
        self.failure_count += 1

        logger.warning(
            f"Circuit breaker: Failure #{self.failure_count} "
            f"(threshold={self.failure_threshold})"
        )

        # A failed probe re-opens immediately.
        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                logger.error(
                    f"Circuit breaker: OPEN after {self.failure_count} failures"
                )
            self.state = CircuitState.OPEN
            self.opened_at = self._clock()

    def reset(self):
        """Manually reset circuit breaker to CLOSED state."""
        logger.info("Circuit breaker: Manual reset to CLOSED")
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at = None

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    @property
    def is_closed(self) -> bool:
        return self.state == CircuitState.CLOSED

    @property
    def is_half_open(self) -> bool:
        return self.state == CircuitState.HALF_OPEN

    def get_state_info(self) -> dict:
        """Get current circuit breaker state information."""
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "failure_threshold": self.failure_threshold,
            "reset_timeout": self.reset_timeout,
        }
