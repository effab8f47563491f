"""Retry policy for chunk submission."""
from dataclasses import dataclass
from typing import Callable, Tuple, Type

from ..core.exceptions import DisperserConnectionError, NotFoundError, RemoteError, ValidationError
from ..utils.config import BlobPolicy

Backoff = Callable[[int], float]


def no_backoff(attempt: int) -> float:
    return 0.0


def constant_backoff(delay: float) -> Backoff:
    """Wait ``delay`` seconds before every retry."""
    def backoff(attempt: int) -> float:
        return delay
    return backoff


def exponential_backoff(base: float = 1.0, factor: float = 2.0, max_delay: float = 30.0) -> Backoff:
    """Wait ``base * factor ** (attempt - 1)`` seconds, capped at ``max_delay``."""
    def backoff(attempt: int) -> float:
        return min(max_delay, base * factor ** max(0, attempt - 1))
    return backoff


@dataclass(frozen=True)
class RetryPolicy:
    """When and how long to wait before re-sending a failed chunk.

    ``max_attempts`` counts the first try, so the default of 1 never retries.
    Validation failures and unknown references are never retried.

    Args:
        max_attempts: Total attempts per chunk
        backoff: Maps the number of the attempt that just failed to a delay in seconds
        retry_on: Exception types considered transient
    """
    max_attempts: int = 1
    backoff: Backoff = no_backoff
    retry_on: Tuple[Type[BaseException], ...] = (DisperserConnectionError, RemoteError)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    @classmethod
    def from_blob_policy(cls, policy: BlobPolicy) -> "RetryPolicy":
        """``max_retries`` retries after the first attempt, ``retry_delay`` apart."""
        return cls(max_attempts=policy.max_retries + 1, backoff=constant_backoff(policy.retry_delay))

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Whether to try again after ``error`` ended attempt number ``attempt``."""
        if attempt >= self.max_attempts:
            return False
        if isinstance(error, (ValidationError, NotFoundError)):
            return False
        return isinstance(error, self.retry_on)

    def delay(self, attempt: int) -> float:
        return max(0.0, self.backoff(attempt))
