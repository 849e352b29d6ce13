"""
Rate-Limited Batch Sender

Sequential, fixed-rate pacing: one dispatch every 1/rate_per_second seconds.
Not a token bucket. Bursts cannot happen, so none need absorbing.

Partial-failure policy:
- A failed message becomes a Failure result; the batch keeps going
- Results are returned in input order, one per input
- The batch succeeds when every result is collected, not when every send did

No fan-out. Cloud API throughput limits are shared per phone number and
per app, and this process cannot see what other senders consume.
"""

import logging
import random
import threading
import time
from typing import List, Optional, Sequence

from transport.whatsapp.base import MessageTransport

from .retry import RetryPolicy, WaitFn, cancellable_wait, send_with_retry
from .types import OutboundRequest, SendCancelled, SendResult

logger = logging.getLogger(__name__)


DEFAULT_REQUESTS_PER_SECOND = 80.0


def send_batch(
    transport: MessageTransport,
    requests: Sequence[OutboundRequest],
    rate_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
    policy: Optional[RetryPolicy] = None,
    cancel: Optional[threading.Event] = None,
    wait: WaitFn = cancellable_wait,
    rng: Optional[random.Random] = None,
) -> List[SendResult]:
    """
    Send requests one at a time at a fixed rate.

    Args:
        transport: Transport shared by every send
        requests: Built requests, in dispatch order
        rate_per_second: Throughput ceiling (messages per second)
        policy: Retry policy applied to each message
        cancel: Set to stop; unsent items come back as cancelled failures
        wait: Injectable sleep, returns True when cancelled
        rng: Random source for retry jitter

    Returns:
        One SendResult per request, same order as requests

    Raises:
        ValueError: rate_per_second is not positive
    """
    if rate_per_second <= 0:
        raise ValueError(f"rate_per_second must be > 0, got {rate_per_second}")

    interval = 1.0 / rate_per_second
    results: List[SendResult] = []
    cancelled = False
    started = time.monotonic()

    for index, request in enumerate(requests):
        if not cancelled and index > 0 and wait(interval, cancel):
            cancelled = True

        if cancelled or (cancel is not None and cancel.is_set()):
            cancelled = True
            results.append(SendResult.from_outcome(request.recipient, SendCancelled()))
            continue

        outcome = send_with_retry(transport, request, policy, cancel=cancel, wait=wait, rng=rng)
        if isinstance(outcome, SendCancelled):
            cancelled = True

        results.append(SendResult.from_outcome(request.recipient, outcome))

    succeeded = sum(1 for r in results if r.ok)
    logger.info(
        f"Batch finished: {succeeded}/{len(results)} sent",
        extra={
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "cancelled": cancelled,
            "elapsed_s": round(time.monotonic() - started, 3),
        },
    )

    return results
