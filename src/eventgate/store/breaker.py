"""Circuit breaker guarding document store calls."""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from eventgate.utils.time import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Calls pass through
    OPEN = "open"  # Calls fail fast
    HALF_OPEN = "half_open"  # Probing for recovery


@dataclass
class CircuitBreakerConfig:
    """Circuit breaker configuration."""

    failure_threshold: int = 5
    reset_timeout_seconds: int = 30
    half_open_max_calls: int = 1
    success_threshold: int = 1
    # Only these exceptions count against the circuit
    failure_types: tuple[type[BaseException], ...] = (Exception,)


class CircuitOpen(Exception):
    """Raised when the circuit is open and the call was not attempted."""

    def __init__(self, name: str, retry_after: int):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker open for {name}, retry after {retry_after}s")


class CircuitBreaker:
    """
    Fail fast while a dependency is known to be down.

    State transitions:
    - CLOSED -> OPEN: after failure_threshold consecutive counted failures
    - OPEN -> HALF_OPEN: after reset_timeout_seconds
    - HALF_OPEN -> CLOSED: after success_threshold successes
    - HALF_OPEN -> OPEN: on any counted failure
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._successes = 0
        self._half_open_calls = 0
        self._opened_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run `func` through the breaker."""
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if self._seconds_until_half_open() > 0:
                    raise CircuitOpen(self.name, self._seconds_until_half_open())
                self._to_half_open()

            in_half_open = self._state == CircuitState.HALF_OPEN
            if in_half_open:
                if self._half_open_calls >= self.config.half_open_max_calls:
                    raise CircuitOpen(self.name, max(1, self._seconds_until_half_open()))
                self._half_open_calls += 1

        try:
            result = await func()
        except self.config.failure_types as exc:
            await self._on_failure(exc)
            raise
        except Exception:
            # The dependency answered; the error belongs to the caller
            await self._on_success()
            raise
        except BaseException:
            # Cancelled before an outcome; hand the half-open slot back
            if in_half_open:
                self._release_half_open_slot()
            raise
        await self._on_success()
        return result

    async def _on_success(self) -> None:
        async with self._lock:
            self._failures = 0
            if self._state == CircuitState.HALF_OPEN:
                self._successes += 1
                if self._successes >= self.config.success_threshold:
                    self._to_closed()

    async def _on_failure(self, error: BaseException) -> None:
        async with self._lock:
            self._failures += 1
            self._successes = 0
            logger.warning(
                f"Circuit {self.name} failure ({self._failures}/"
                f"{self.config.failure_threshold}): {error!r}"
            )
            if self._state == CircuitState.HALF_OPEN:
                self._to_open()
            elif self._failures >= self.config.failure_threshold:
                self._to_open()

    def _release_half_open_slot(self) -> None:
        if self._state == CircuitState.HALF_OPEN and self._half_open_calls > 0:
            self._half_open_calls -= 1

    def _to_open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = utc_now()
        self._half_open_calls = 0
        logger.error(f"Circuit {self.name} opened after {self._failures} failures")

    def _to_half_open(self) -> None:
        self._state = CircuitState.HALF_OPEN
        self._successes = 0
        self._half_open_calls = 0
        logger.info(f"Circuit {self.name} entering half-open state")

    def _to_closed(self) -> None:
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._successes = 0
        self._opened_at = None
        self._half_open_calls = 0
        logger.info(f"Circuit {self.name} closed after recovery")

    def _seconds_until_half_open(self) -> int:
        if not self._opened_at:
            return 0
        elapsed = (utc_now() - self._opened_at).total_seconds()
        return math.ceil(max(0.0, self.config.reset_timeout_seconds - elapsed))

    async def reset(self) -> None:
        """Manually close the circuit."""
        async with self._lock:
            self._to_closed()
