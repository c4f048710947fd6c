"""Bounded retry with exponential backoff and jitter"""

import random
import time
from typing import Callable, TypeVar

from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TerminalError(Exception):
    """Marker base for errors that must never be retried"""


def is_terminal(error: BaseException) -> bool:
    """Default classification: only TerminalError subclasses abort immediately"""
    return isinstance(error, TerminalError)


class RetryPolicy:
    """
    Runs a fallible operation up to `max_attempts` times.

    The policy holds configuration only, so one instance can be shared by
    nested or concurrent callers.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        backoff_factor: float = 1.5,
        jitter: tuple = (1.0, 1.5),
        classify_terminal: Callable[[BaseException], bool] = is_terminal,
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[float, float], float] = random.uniform,
    ):
        """
        Args:
            max_attempts: Total attempts before giving up (>= 1)
            base_delay: Delay in seconds after the first failed attempt
            backoff_factor: Growth of the delay per attempt
            jitter: Range the computed delay is multiplied by
            classify_terminal: Returns True for errors that must not be retried
            sleep: Sleep primitive (injected for tests)
            rand: Uniform random source (injected for tests)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.classify_terminal = classify_terminal
        self.sleep = sleep
        self.rand = rand

    def delay_for(self, attempt: int) -> float:
        """Backoff before the next try, after `attempt` (1-based) has failed"""
        delay = self.base_delay * (self.backoff_factor ** (attempt - 1))
        return delay * self.rand(*self.jitter)

    def call(self, operation: Callable[[], T], description: str = "operation") -> T:
        """
        Execute operation, retrying retryable failures.

        Terminal errors propagate on first occurrence. After the last attempt
        the final error propagates with `retries_exhausted` set on it.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except Exception as e:
                if self.classify_terminal(e):
                    logger.warning(f"{description} failed with terminal error: {e}")
                    raise

                logger.warning(f"{description}: attempt {attempt}/{self.max_attempts} failed: {e}")
                if attempt == self.max_attempts:
                    logger.error(f"{description}: all {self.max_attempts} attempts failed")
                    e.retries_exhausted = True
                    e.attempts = attempt
                    raise

                delay = self.delay_for(attempt)
                logger.info(f"{description}: retrying in {delay:.1f}s")
                self.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise RuntimeError("retry loop exited without a result")

