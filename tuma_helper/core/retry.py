# tuma_helper/core/retry.py
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Tuple, Type, TypeVar

from sqlalchemy.exc import DisconnectionError, OperationalError

from tuma_helper.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STORE_ERRORS: Tuple[Type[BaseException], ...] = (OperationalError, DisconnectionError)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry a call on transient errors.

    delay for attempt n (1-based) is `delay * backoff ** (n - 1)`, so the
    default backoff of 1.0 waits the same fixed delay between every attempt.
    """

    max_attempts: int = 3
    delay: float = 1.0
    backoff: float = 1.0
    retry_on: Tuple[Type[BaseException], ...] = field(default=TRANSIENT_STORE_ERRORS)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def wait_for(self, attempt: int) -> float:
        return self.delay * (self.backoff ** (attempt - 1))

    def call(self, fn: Callable[[], T], on_retry: Callable[[BaseException], None] | None = None) -> T:
        attempt = 1
        while True:
            try:
                return fn()
            except self.retry_on as exc:
                if attempt >= self.max_attempts:
                    logger.error("Giving up after %d attempts: %s", attempt, exc)
                    raise
                wait = self.wait_for(attempt)
                logger.warning("Transient store error (attempt %d/%d), retrying in %.2fs: %s",
                               attempt, self.max_attempts, wait, exc)
                if on_retry is not None:
                    on_retry(exc)
                self.sleep(wait)
                attempt += 1


def default_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        delay=settings.retry_delay_seconds,
        backoff=settings.retry_backoff_factor,
    )
