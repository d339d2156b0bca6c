"""
Retry policy for the transport executor.

Exponential backoff bounded by [min_wait, max_wait], capped at max_attempts
total attempts. Only transport failures and 5xx responses (except 501) are
retried.

Author: cosmosrest contributors
"""

from dataclasses import dataclass
from typing import Optional

from cosmosrest.response import expect_status_class


class RetryConfig:
    """Retry defaults."""

    MAX_ATTEMPTS = 5
    MIN_WAIT = 0.01  # seconds
    MAX_WAIT = 0.05  # seconds
    BACKOFF_MULTIPLIER = 2.0  # exponential backoff


_is_server_error = expect_status_class(500)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry tuning for the executor.

    Attributes:
        min_wait: First backoff delay in seconds
        max_wait: Upper bound for any backoff delay in seconds
        max_attempts: Total attempts, including the first one
    """

    min_wait: float = RetryConfig.MIN_WAIT
    max_wait: float = RetryConfig.MAX_WAIT
    max_attempts: int = RetryConfig.MAX_ATTEMPTS

    @classmethod
    def from_settings(
        cls,
        min_wait: Optional[float] = None,
        max_wait: Optional[float] = None,
        max_attempts: Optional[int] = None
    ) -> "RetryPolicy":
        """Build a policy, replacing zero or missing values with the defaults."""
        return cls(
            min_wait=min_wait or RetryConfig.MIN_WAIT,
            max_wait=max_wait or RetryConfig.MAX_WAIT,
            max_attempts=max_attempts or RetryConfig.MAX_ATTEMPTS,
        )

    def backoff(self, attempt: int) -> float:
        """
        Delay before the attempt following ``attempt``.

        Args:
            attempt: Number of the attempt that just failed (1-based)

        Returns:
            Delay in seconds
        """
        delay = self.min_wait * (RetryConfig.BACKOFF_MULTIPLIER ** (attempt - 1))
        return min(delay, self.max_wait)

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        return _is_server_error(status_code) and status_code != 501
