# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Fetch Retry Policy

Single responsibility: Run a network fetch a bounded number of times and
classify each failure as retryable or fatal.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from smcget.core.errors import ConnectionTimedOutError, DownloadFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FetchResult(Generic[T]):
    """Outcome of a retried fetch"""
    value: Optional[T] = None
    error: Optional[DownloadFailedError] = None
    attempts: int = 0
    fatal: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RetryPolicy:
    """
    Bounded retry loop for downloads.

    A DownloadFailedError is transient and retried until `max_tries`
    attempts have been made. A ConnectionTimedOutError is fatal and ends the
    loop at once. Any other exception propagates unchanged.
    """
    max_tries: int = 3
    retry_delay: float = 0.0
    backoff_multiplier: float = 2.0
    max_retry_delay: float = 30.0

    def __post_init__(self):
        if self.max_tries < 1:
            raise ValueError("max_tries must be at least 1")

    def run(
        self,
        operation: Callable[[], T],
        description: str,
        on_retry: Optional[Callable[[DownloadFailedError, int], Any]] = None
    ) -> FetchResult[T]:
        """
        Execute operation until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument callable performing one fetch attempt
            description: What is fetched (for logging)
            on_retry: Called with the failure and the number of the next
                      attempt before every retry

        Returns:
            FetchResult holding either the value or the last failure
        """
        delay = self.retry_delay
        last_error: Optional[DownloadFailedError] = None

        for attempt in range(1, self.max_tries + 1):
            try:
                value = operation()
            except ConnectionTimedOutError as e:
                logger.error(f"Fetching {description} failed fatally: {e.message}")
                return FetchResult(error=e, attempts=attempt, fatal=True)
            except DownloadFailedError as e:
                last_error = e
                if attempt == self.max_tries:
                    logger.error(
                        f"Final attempt {attempt}/{self.max_tries} failed for {description}: {e.message}"
                    )
                    break

                logger.warning(
                    f"Attempt {attempt}/{self.max_tries} failed for {description}: {e.message}"
                )
                if on_retry is not None:
                    on_retry(e, attempt + 1)
                if delay > 0:
                    time.sleep(delay)
                    delay = min(delay * self.backoff_multiplier, self.max_retry_delay)
                continue

            if attempt > 1:
                logger.info(f"Retry successful for {description} after {attempt} attempts")
            return FetchResult(value=value, attempts=attempt)

        return FetchResult(error=last_error, attempts=self.max_tries)
