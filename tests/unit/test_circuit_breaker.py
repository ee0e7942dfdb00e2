"""
Unit tests for the backend circuit breaker.
"""

import pytest

from tutor_client.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    CircuitBreakerOpenError
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCircuitBreaker:
    """Test cases for CircuitBreaker."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def breaker(self, clock):
        return CircuitBreaker(failure_threshold=3, reset_timeout=30, clock=clock)

    def test_initial_state_closed(self, breaker):
        assert breaker.state == CircuitState.CLOSED
        assert breaker.is_closed
        assert breaker.failure_count == 0
        breaker.before_request()

    def test_opens_after_threshold(self, breaker):
        for _ in range(3):
            breaker.record_failure()

        assert breaker.is_open
        with pytest.raises(CircuitBreakerOpenError):
            breaker.before_request()

    def test_success_resets_count(self, breaker):
        breaker.record_failure()
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert breaker.is_closed
        assert breaker.failure_count == 1

    def test_half_open_after_timeout(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()

        clock.now += 31
        breaker.before_request()

        assert breaker.is_half_open

    def test_half_open_success_closes(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.now += 31
        breaker.before_request()

        breaker.record_success()

        assert breaker.is_closed
        assert breaker.failure_count == 0

    def test_half_open_failure_reopens(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.now += 31
        breaker.before_request()

        breaker.record_failure()

        assert breaker.is_open
        with pytest.raises(CircuitBreakerOpenError):
            breaker.before_request()

    def test_manual_reset(self, breaker):
        for _ in range(3):
            breaker.record_failure()

        breaker.reset()

        assert breaker.is_closed
        breaker.before_request()

    def test_get_state_info(self, breaker):
        breaker.record_failure()

        info = breaker.get_state_info()

        assert info["state"] == "closed"
        assert info["failure_count"] == 1
        assert info["failure_threshold"] == 3
