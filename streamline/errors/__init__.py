"""
Error handling for the Streamline client.

Every error raised by the client derives from StreamlineError and carries an
ErrorCode, a retryability flag and an optional hint for the operator. The
retry policy reads the flag to decide whether an operation may be attempted
again.
"""

import asyncio
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp


class ErrorCode(Enum):
    """Error codes for categorizing Streamline errors."""

    UNKNOWN = "unknown"
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    TOPIC_NOT_FOUND = "topic_not_found"
    TIMEOUT = "timeout"
    PRODUCER = "producer"
    CONSUMER = "consumer"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"


# Transport exceptions that mean the broker could not be reached.
CONNECTIVITY_ERRORS = (aiohttp.ClientConnectionError, ConnectionError)


class StreamlineError(Exception):
    """
    Base exception for all Streamline client errors.

    Attributes:
        code: The ErrorCode describing the failure
        message: Human readable description
        retryable: Whether the failed operation may be retried
        hint: Optional hint for resolving the error
        cause: The underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        retryable: bool = False,
        hint: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        self.code = code
        self.message = message
        self.retryable = retryable
        self.hint = hint
        self.cause = cause

        super().__init__(self.message)

    def is_retryable(self) -> bool:
        """Check if the operation that raised this error can be retried."""
        return self.retryable

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": self.code.value,
            "error_description": self.message,
            "retryable": self.retryable,
        }

        if self.hint:
            result["hint"] = self.hint

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result


class StreamlineConnectionError(StreamlineError):
    """Raised when a connection to the Streamline server fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.CONNECTION,
            retryable=True,
            hint="Check that Streamline server is running and accessible",
            cause=cause
        )


class StreamlineAuthenticationError(StreamlineError):
    """Raised when authentication fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.AUTHENTICATION,
            retryable=False,
            hint="Verify your credentials and authentication mechanism",
            cause=cause
        )


class StreamlineAuthorizationError(StreamlineError):
    """Raised when an ACL check fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.AUTHORIZATION,
            retryable=False,
            hint="Check ACL permissions for this operation",
            cause=cause
        )


class StreamlineTopicNotFoundError(StreamlineError):
    """Raised when a requested topic does not exist."""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(
            f"Topic not found: {topic}",
            code=ErrorCode.TOPIC_NOT_FOUND,
            retryable=False,
            hint=f"Create the topic with: streamline-cli topics create {topic}"
        )


class StreamlineTimeoutError(StreamlineError):
    """Raised when an operation exceeds its deadline."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.TIMEOUT,
            retryable=True,
            hint="Consider increasing timeout settings or checking server load",
            cause=cause
        )


class StreamlineProducerError(StreamlineError):
    """Raised when a producer operation fails on the broker."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code=ErrorCode.PRODUCER, retryable=True, cause=cause)


class StreamlineConsumerError(StreamlineError):
    """Raised when a consumer operation fails on the broker."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code=ErrorCode.CONSUMER, retryable=True, cause=cause)


class StreamlineSerializationError(StreamlineError):
    """Raised when a payload cannot be serialized or deserialized."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code=ErrorCode.SERIALIZATION, retryable=False, cause=cause)


class StreamlineConfigurationError(StreamlineError, ValueError):
    """Raised when client or policy options are invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, code=ErrorCode.CONFIGURATION, retryable=False)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


def is_connectivity_error(exc: BaseException) -> bool:
    """Check if a transport exception means the server is unreachable."""
    return isinstance(exc, CONNECTIVITY_ERRORS)


def wrap_transport_error(exc: BaseException) -> Optional[StreamlineError]:
    """
    Map a transport exception to a Streamline error.

    Timeouts become StreamlineTimeoutError, connectivity failures become
    StreamlineConnectionError. Returns None for anything else so the caller
    can let the original exception propagate unchanged.
    """
    if isinstance(exc, StreamlineError):
        return None

    # aiohttp.ServerTimeoutError is both a timeout and a connection error
    if isinstance(exc, asyncio.TimeoutError):
        return StreamlineTimeoutError(f"Request timed out: {exc}", cause=exc)

    if is_connectivity_error(exc):
        return StreamlineConnectionError(f"Request failed: {exc}", cause=exc)

    return None
