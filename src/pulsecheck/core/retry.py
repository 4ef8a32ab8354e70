"""
Capped exponential backoff around a single probe operation.

The operation returns a ``ProbeResult``; its ``success`` flag is the only thing
the controller looks at, and the result itself is carried out unchanged so the
caller always sees the data of the last attempt made.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Iterator

from pulsecheck.contracts.probe_result import ProbeResult, RetryOutcome
from pulsecheck.contracts.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

ProbeOperation = Callable[[], Awaitable[ProbeResult]]


def backoff_delays(policy: RetryPolicy) -> Iterator[float]:
    """
    Yield the delays applied before each retry, without end.

    Each delay is the previous one times the multiplier, capped at max_delay.
    """
    delay = min(policy.initial_delay, policy.max_delay)
    while True:
        yield delay
        delay = min(delay * policy.backoff_multiplier, policy.max_delay)


def calculate_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Closed-form delay before the given 1-based retry.
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    try:
        delay = policy.initial_delay * policy.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        return policy.max_delay
    return min(delay, policy.max_delay)


async def execute_with_retry(
    operation: ProbeOperation,
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> RetryOutcome:
    """
    Run ``operation`` until it succeeds or ``policy.max_attempts`` is reached.

    Args:
        operation: Coroutine function performing one attempt.
        policy (RetryPolicy): Attempt count and backoff settings.
        sleep: Awaitable used for the backoff wait, replaceable in tests.

    Returns:
        RetryOutcome: The verdict, the last attempt's result and the attempt count.
    """
    result = await operation()
    if result.success:
        return RetryOutcome(succeeded=True, last_result=result, attempts=1)

    delays = backoff_delays(policy)
    attempt = 1
    while attempt < policy.max_attempts:
        delay = next(delays)
        logger.debug(
            f"Attempt {attempt}/{policy.max_attempts} failed; retrying in {delay:.2f}s"
        )
        await sleep(delay)
        attempt += 1
        result = await operation()
        if result.success:
            return RetryOutcome(succeeded=True, last_result=result, attempts=attempt)

    return RetryOutcome(succeeded=False, last_result=result, attempts=attempt)
