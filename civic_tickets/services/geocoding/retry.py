"""
Retry policy for outbound lookups.

A RetryPolicy decides how many attempts to make and how long to wait between
them, keyed by how the previous attempt failed. `attempt_with_policy` runs an
async callable under a policy.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

HTTP_TOO_MANY_REQUESTS = 429


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"


class RetryExhausted(Exception):
    """Raised when every attempt allowed by the policy has failed."""

    def __init__(self, attempts: int, last_error: Optional[Exception]):
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with failure-aware backoff.

    - Rate limited (HTTP 429): wait a fixed `rate_limit_delay` seconds
    - Anything else: wait `base_delay * attempt_number` seconds
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    rate_limit_delay: float = 2.0

    def classify(self, error: Exception) -> FailureKind:
        if getattr(error, "status_code", None) == HTTP_TOO_MANY_REQUESTS:
            return FailureKind.RATE_LIMITED
        return FailureKind.TRANSIENT

    def backoff(self, attempt: int, kind: FailureKind) -> float:
        if kind is FailureKind.RATE_LIMITED:
            return self.rate_limit_delay
        return self.base_delay * attempt


FailureHook = Callable[[int, FailureKind, Exception], None]


async def attempt_with_policy(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    on_failure: Optional[FailureHook] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Call `fn` until it succeeds or the policy's attempts are used up.

    `on_failure(attempt, kind, error)` is invoked after every failed attempt.
    There is no wait after the final attempt.

    Raises:
        RetryExhausted: carrying the last error
    """
    last_error: Optional[Exception] = None
    attempts = max(1, policy.max_attempts)

    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except Exception as e:
            last_error = e
            kind = policy.classify(e)
            if on_failure is not None:
                on_failure(attempt, kind, e)
            if attempt < attempts:
                await sleep(policy.backoff(attempt, kind))

    raise RetryExhausted(attempts, last_error)
