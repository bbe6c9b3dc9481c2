"""Bounded retry loop for eventually consistent AWS operations.

A retried function signals how its failure should be handled by raising
``RetryableError`` (try again until the time budget is spent) or
``NonRetryableError`` (stop immediately). Any other exception propagates
unchanged.
"""

import logging
import time
from typing import Callable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

INITIAL_DELAY_SECONDS = 0.5
MAX_DELAY_SECONDS = 10.0


class RetryableError(Exception):
    """Wraps an error that may succeed when retried."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


class NonRetryableError(Exception):
    """Wraps an error that must be surfaced without retrying."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


class RetryTimeoutError(Exception):
    """Raised when the retry budget is spent on retryable errors."""

    def __init__(self, timeout_seconds: float, last_error: Optional[BaseException]) -> None:
        super().__init__(
            f"timeout while waiting for state to become successful "
            f"({timeout_seconds}s): {last_error}"
        )
        self.timeout_seconds = timeout_seconds
        self.last_error = last_error


def retry(
    func: Callable[[], T],
    timeout_seconds: float,
    sleep: Optional[Callable[[float], None]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> T:
    """Call ``func`` until it succeeds or the time budget runs out.

    Args:
        func: Callable taking no arguments
        timeout_seconds: Total time budget for all attempts
        sleep: Sleep function, defaults to time.sleep
        clock: Monotonic clock, defaults to time.monotonic

    Returns:
        Whatever ``func`` returns on its first successful attempt

    Raises:
        RetryTimeoutError: When only retryable errors occurred within the budget
        BaseException: The wrapped error of a NonRetryableError
    """
    sleep = sleep or time.sleep
    clock = clock or time.monotonic
    deadline = clock() + timeout_seconds
    delay = INITIAL_DELAY_SECONDS
    attempt = 0

    while True:
        attempt += 1
        try:
            return func()
        except NonRetryableError as e:
            raise e.error
        except RetryableError as e:
            remaining = deadline - clock()
            if remaining <= 0:
                raise RetryTimeoutError(timeout_seconds, e.error) from e.error

            wait = min(delay, remaining)
            logger.debug(f"Attempt {attempt} failed with retryable error: {e}; retrying in {wait:.1f}s")
            sleep(wait)
            delay = min(delay * 2, MAX_DELAY_SECONDS)
