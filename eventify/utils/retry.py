import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry policy.
    - max_attempts: total number of calls, first one included (>= 1)
    - delay: fixed pause in seconds between two calls
    """
    max_attempts: int = 3
    delay: float = 3.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay cannot be negative")

@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    value: T
    attempts: int
    exhausted: bool

async def retry_with_policy(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    should_retry: Callable[[T], bool],
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Optional[Callable[[T, int], None]] = None,
) -> RetryOutcome[T]:
    """
    Calls `operation(attempt)` until `should_retry(value)` is false or the policy is exhausted.
    - attempt is 1-based
    - exceptions raised by `operation` propagate untouched
    - `exhausted` is True when the last value still asked for a retry
    """
    attempt = 0
    while True:
        attempt += 1
        value = await operation(attempt)
        if not should_retry(value):
            return RetryOutcome(value=value, attempts=attempt, exhausted=False)
        if attempt >= policy.max_attempts:
            return RetryOutcome(value=value, attempts=attempt, exhausted=True)
        if on_retry:
            on_retry(value, attempt)
        await sleep(policy.delay)
