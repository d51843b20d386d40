"""
Retry policy with exponential backoff and jitter.
"""

import asyncio
import inspect
import logging
import random
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from ..errors import StreamlineConfigurationError, StreamlineError, is_connectivity_error


T = TypeVar("T")

# Jitter band applied to every computed delay (+/- 25%)
JITTER_MIN = 0.75
JITTER_MAX = 1.25


def default_is_retryable(error: BaseException) -> bool:
    """
    Default retryability predicate.

    Streamline errors decide for themselves; bare transport connectivity
    errors are always retried. Anything else is not.
    """
    if isinstance(error, StreamlineError):
        return error.is_retryable()
    return is_connectivity_error(error)


@dataclass(frozen=True)
class RetryPolicyOptions:
    """Retry policy configuration."""
    max_retries: int = 3
    base_delay: timedelta = field(default_factory=lambda: timedelta(milliseconds=100))
    max_delay: timedelta = field(default_factory=lambda: timedelta(seconds=10))
    multiplier: float = 2.0
    is_retryable: Optional[Callable[[BaseException], bool]] = field(default=None, compare=False)

    def __post_init__(self):
        if self.max_retries < 0:
            raise StreamlineConfigurationError("max_retries must be non-negative", field="max_retries")
        if self.base_delay < timedelta(0):
            raise StreamlineConfigurationError("base_delay must be non-negative", field="base_delay")
        if self.max_delay < self.base_delay:
            raise StreamlineConfigurationError("max_delay must be >= base_delay", field="max_delay")
        if self.multiplier < 1.0:
            raise StreamlineConfigurationError("multiplier must be >= 1.0", field="multiplier")


def raise_if_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    """Raise CancelledError if cancellation has been requested."""
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError()


async def sleep_cancellable(delay: float, cancel_event: Optional[asyncio.Event] = None) -> None:
    """Sleep for delay seconds, waking early with CancelledError if cancel_event is set."""
    if cancel_event is None:
        await asyncio.sleep(delay)
        return

    raise_if_cancelled(cancel_event)
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return
    raise asyncio.CancelledError()


class RetryPolicy:
    """
    Executes async operations, retrying retryable failures with exponential
    backoff and jitter.

    The policy holds no per-call state, so one instance can be shared by any
    number of concurrent operations.

    Example:
        policy = RetryPolicy(RetryPolicyOptions(max_retries=5))
        result = await policy.execute(lambda: fetch_metadata("orders"))
    """

    def __init__(
        self,
        options: Optional[RetryPolicyOptions] = None,
        logger: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize retry policy.

        Args:
            options: Retry configuration (defaults to RetryPolicyOptions())
            logger: Logger for attempt diagnostics (defaults to module logger)
            rng: Random source for jitter, injectable for deterministic tests
        """
        self.options = options if options is not None else RetryPolicyOptions()
        self.logger = logger or logging.getLogger(__name__)
        self._random = rng or random.Random()
        self._is_retryable = self.options.is_retryable or default_is_retryable

    async def execute(
        self,
        operation: Callable[[], Union[Awaitable[T], T]],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """
        Execute an operation with retry logic.

        Args:
            operation: Zero-argument callable returning an awaitable or a value
            cancel_event: Optional event; once set, no further attempts are made

        Returns:
            The result of the first successful attempt

        Raises:
            TypeError: If operation is not callable
            asyncio.CancelledError: If cancellation was requested
            Exception: The last error raised by the operation, unchanged
        """
        if operation is None or not callable(operation):
            raise TypeError("operation must be a callable")

        attempt = 0
        while True:
            raise_if_cancelled(cancel_event)

            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
                return result

            except Exception as e:
                attempt += 1

                if not self._is_retryable(e) or attempt > self.options.max_retries:
                    self.logger.warning(
                        f"Operation failed after {attempt} attempt(s), not retrying: {e}"
                    )
                    raise

                delay = self.compute_delay(attempt)
                self.logger.warning(
                    f"Operation failed on attempt {attempt}/{self.options.max_retries}, "
                    f"retrying in {delay.total_seconds() * 1000:.1f}ms: {e}"
                )

                await sleep_cancellable(delay.total_seconds(), cancel_event)

    async def execute_void(
        self,
        operation: Callable[[], Union[Awaitable[Any], Any]],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Execute an operation with retry logic, discarding its result."""
        if operation is None or not callable(operation):
            raise TypeError("operation must be a callable")

        await self.execute(operation, cancel_event)

    def compute_delay(self, attempt: int) -> timedelta:
        """Calculate the jittered backoff delay before retrying the given attempt."""
        base_ms = self.options.base_delay.total_seconds() * 1000
        max_ms = self.options.max_delay.total_seconds() * 1000

        try:
            exponential_ms = base_ms * (self.options.multiplier ** (attempt - 1))
        except OverflowError:
            exponential_ms = max_ms if base_ms > 0 else 0.0
        capped_ms = min(exponential_ms, max_ms)

        jitter_factor = self._random.uniform(JITTER_MIN, JITTER_MAX)
        delay_ms = capped_ms * jitter_factor

        return timedelta(milliseconds=max(0.0, delay_ms))


async def run_cancellable(awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event] = None) -> T:
    """
    Await awaitable, abandoning it with CancelledError as soon as cancel_event is set.

    The abandoned operation is cancelled and awaited before returning.
    """
    if cancel_event is None:
        return await awaitable

    if cancel_event.is_set():
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise asyncio.CancelledError()

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise asyncio.CancelledError()
