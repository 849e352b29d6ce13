"""
Retry / Backoff Controller

Wraps a single transport send with exponential backoff and jitter.

    delay = base_delay * 2**attempt_index * uniform(0.8, 1.2)

- RATE_LIMITED / TRANSIENT: retried up to max_attempts total calls
- DEVELOPER_FIXABLE / PLATFORM_ENFORCED: returned after one call
- Exhausted: last SendErr with retries_exhausted=True

WARNING - sends are NOT idempotent. If a request reached Meta but the
response was lost (timeout, dropped connection), retrying delivers the
message twice. There is no deduplication here. Callers that need
exactly-once delivery must track issued message IDs themselves and check
them before retrying, especially across process restarts.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from transport.whatsapp.base import MessageTransport

from .classifier import is_retryable
from .types import OutboundRequest, SendCancelled, SendErr, SendOk, SendOutcome

logger = logging.getLogger(__name__)


# wait(seconds, cancel) -> True if cancelled during the wait
WaitFn = Callable[[float, Optional[threading.Event]], bool]


def cancellable_wait(seconds: float, cancel: Optional[threading.Event] = None) -> bool:
    """Sleep for seconds; return True early if cancel gets set."""
    if cancel is None:
        time.sleep(seconds)
        return False
    return cancel.wait(seconds)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Backoff configuration.

    Defaults: 5 attempts, 1s base delay, +/-20% multiplicative jitter.
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    jitter_min: float = 0.8
    jitter_max: float = 1.2

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")
        if not 0 <= self.jitter_min <= self.jitter_max:
            raise ValueError(
                f"jitter range must satisfy 0 <= min <= max, got [{self.jitter_min}, {self.jitter_max}]"
            )

    def compute_delay(self, attempt_index: int, rng: Optional[random.Random] = None) -> float:
        """Delay after the attempt_index-th failure (0-based)."""
        uniform = (rng or random).uniform
        return self.base_delay * (2 ** attempt_index) * uniform(self.jitter_min, self.jitter_max)


def send_with_retry(
    transport: MessageTransport,
    request: OutboundRequest,
    policy: Optional[RetryPolicy] = None,
    cancel: Optional[threading.Event] = None,
    wait: WaitFn = cancellable_wait,
    rng: Optional[random.Random] = None,
) -> SendOutcome:
    """
    Send with retries on retryable failures.

    Args:
        transport: Transport performing one attempt per call
        request: Built request
        policy: Attempt ceiling and delays (defaults to RetryPolicy())
        cancel: Set to abort before the next attempt or during a wait
        wait: Injectable sleep, returns True when cancelled
        rng: Random source for jitter

    Returns:
        SendOk, SendErr (possibly retries_exhausted) or SendCancelled
    """
    policy = policy or RetryPolicy()
    last_err: Optional[SendErr] = None

    for attempt_index in range(policy.max_attempts):
        if cancel is not None and cancel.is_set():
            return SendCancelled(attempts=attempt_index)

        outcome = transport.send(request)
        attempts = attempt_index + 1

        if isinstance(outcome, SendOk):
            return replace(outcome, attempts=attempts)

        if isinstance(outcome, SendCancelled):
            return replace(outcome, attempts=attempts)

        last_err = replace(outcome, attempts=attempts)

        if not is_retryable(outcome.classification):
            return last_err

        if attempts >= policy.max_attempts:
            break

        delay = policy.compute_delay(attempt_index, rng)
        logger.warning(
            f"Retryable failure sending to {request.recipient}, retrying in {delay:.2f}s",
            extra={
                "recipient": request.recipient,
                "attempt": attempts,
                "max_attempts": policy.max_attempts,
                "error_code": outcome.error_code,
                "classification": outcome.classification.value,
            },
        )

        if wait(delay, cancel):
            return SendCancelled(attempts=attempts)

    logger.error(
        f"Retries exhausted sending to {request.recipient} after {policy.max_attempts} attempts",
        extra={
            "recipient": request.recipient,
            "error_code": last_err.error_code,
            "classification": last_err.classification.value,
        },
    )
    return replace(last_err, retries_exhausted=True)
