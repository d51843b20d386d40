"""
Streamline Python Package

Client library for the Streamline message broker: connection lifecycle
management and retry policies for the broker's HTTP control plane.
"""

__version__ = "0.2.0"

from .errors import (
    ErrorCode,
    StreamlineError,
    StreamlineConnectionError,
    StreamlineTimeoutError,
    StreamlineConfigurationError,
)
from .resilience import RetryPolicy, RetryPolicyOptions
from .core.config import StreamlineOptions, ProducerOptions
from .core.client import StreamlineClient
from .connection import ConnectionManager, ConnectionState, Request

__all__ = [
    "StreamlineClient",
    "StreamlineOptions",
    "ProducerOptions",
    "ConnectionManager",
    "ConnectionState",
    "Request",
    "RetryPolicy",
    "RetryPolicyOptions",
    "ErrorCode",
    "StreamlineError",
    "StreamlineConnectionError",
    "StreamlineTimeoutError",
    "StreamlineConfigurationError",
]
