"""Retry-with-exponential-backoff executor."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _retry_everything(_error: BaseException) -> bool:
    return True


def execute_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
    multiplier: float = 2.0,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run operation, retrying on exception with geometric backoff.

    Delay before attempt n+1 is min(initial_delay * multiplier ** (n - 1), max_delay).
    No jitter is applied. After the final attempt the last exception is
    re-raised unchanged.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total attempts including the first one
        initial_delay: Seconds to wait after the first failure
        max_delay: Upper bound for a single wait, in seconds
        multiplier: Growth factor between consecutive waits
        should_retry: Predicate deciding whether an exception is retriable
        sleep: Sleep function, injectable for tests

    Returns:
        The operation result
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=multiplier, max=max_delay),
        retry=retry_if_exception(should_retry or _retry_everything),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return retrying(operation)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff parameters bundled for injection."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    multiplier: float = 2.0

    def execute(
        self,
        operation: Callable[[], T],
        should_retry: Optional[Callable[[BaseException], bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        return execute_with_backoff(
            operation,
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            multiplier=self.multiplier,
            should_retry=should_retry,
            sleep=sleep,
        )


SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)
