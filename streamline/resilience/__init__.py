"""
Package resilience provides the retry machinery used by the Streamline client.

- Retry policy with exponential backoff and jitter
- Pluggable retryability predicate
- Cancellation-aware sleeps
"""

from .retry import (
    RetryPolicyOptions,
    RetryPolicy,
    default_is_retryable,
    raise_if_cancelled,
    sleep_cancellable,
    run_cancellable,
)

__all__ = [
    'RetryPolicyOptions',
    'RetryPolicy',
    'default_is_retryable',
    'raise_if_cancelled',
    'sleep_cancellable',
    'run_cancellable',
]
