"""
Tests for the Streamline error hierarchy and transport error mapping.
"""

import asyncio

import aiohttp
import pytest

from streamline.errors import (
    ErrorCode,
    StreamlineAuthenticationError,
    StreamlineAuthorizationError,
    StreamlineConfigurationError,
    StreamlineConnectionError,
    StreamlineConsumerError,
    StreamlineError,
    StreamlineProducerError,
    StreamlineSerializationError,
    StreamlineTimeoutError,
    StreamlineTopicNotFoundError,
    is_connectivity_error,
    wrap_transport_error,
)


class TestErrorHierarchy:
    """Test error codes, retryability and hints."""

    @pytest.mark.parametrize("error_class,code,retryable", [
        (StreamlineConnectionError, ErrorCode.CONNECTION, True),
        (StreamlineAuthenticationError, ErrorCode.AUTHENTICATION, False),
        (StreamlineAuthorizationError, ErrorCode.AUTHORIZATION, False),
        (StreamlineTimeoutError, ErrorCode.TIMEOUT, True),
        (StreamlineProducerError, ErrorCode.PRODUCER, True),
        (StreamlineConsumerError, ErrorCode.CONSUMER, True),
        (StreamlineSerializationError, ErrorCode.SERIALIZATION, False),
    ])
    def test_error_metadata(self, error_class, code, retryable):
        """Test error metadata"""
        error = error_class("failure")

        assert isinstance(error, StreamlineError)
        assert error.code == code
        assert error.is_retryable() is retryable
        assert str(error) == "failure"

    def test_base_error_defaults(self):
        """Test base error defaults"""
        error = StreamlineError("boom")
        assert error.code == ErrorCode.UNKNOWN
        assert not error.is_retryable()
        assert error.hint is None

    def test_connection_error_has_hint(self):
        """Test connection error has hint"""
        error = StreamlineConnectionError("refused")
        assert "running and accessible" in error.hint

    def test_topic_not_found(self):
        """Test topic not found"""
        error = StreamlineTopicNotFoundError("orders")

        assert error.topic == "orders"
        assert error.message == "Topic not found: orders"
        assert error.hint == "Create the topic with: streamline-cli topics create orders"
        assert not error.is_retryable()

    def test_configuration_error_is_value_error(self):
        """Test configuration error is value error"""
        error = StreamlineConfigurationError("bad value", field="http_port")

        assert isinstance(error, ValueError)
        assert error.field == "http_port"
        assert error.code == ErrorCode.CONFIGURATION

    def test_to_dict(self):
        """Test to dict"""
        cause = OSError("socket closed")
        result = StreamlineConnectionError("lost connection", cause=cause).to_dict()

        assert result["error"] == "connection"
        assert result["error_description"] == "lost connection"
        assert result["retryable"] is True
        assert "hint" in result
        assert result["caused_by"] == "socket closed"

    def test_configuration_error_to_dict_includes_field(self):
        """Test configuration error to dict includes field"""
        result = StreamlineConfigurationError("bad", field="connect_timeout").to_dict()
        assert result["field"] == "connect_timeout"
        assert "caused_by" not in result


class TestTransportErrorMapping:
    """Test mapping of aiohttp and socket errors."""

    def test_connectivity_errors(self):
        """Test connectivity errors"""
        assert is_connectivity_error(aiohttp.ServerDisconnectedError())
        assert is_connectivity_error(ConnectionRefusedError())
        assert not is_connectivity_error(ValueError())

    def test_connection_failure_wrapped(self):
        """Test connection failure wrapped"""
        cause = aiohttp.ClientConnectionError("refused")
        error = wrap_transport_error(cause)

        assert isinstance(error, StreamlineConnectionError)
        assert error.cause is cause
        assert error.message.startswith("Request failed:")

    def test_timeout_wrapped(self):
        """Test timeout wrapped"""
        error = wrap_transport_error(asyncio.TimeoutError())
        assert isinstance(error, StreamlineTimeoutError)
        assert error.is_retryable()

    def test_server_timeout_is_timeout(self):
        """aiohttp's ServerTimeoutError is both a timeout and a connection error."""
        error = wrap_transport_error(aiohttp.ServerTimeoutError("read timeout"))
        assert isinstance(error, StreamlineTimeoutError)

    def test_streamline_errors_not_rewrapped(self):
        """Test streamline errors not rewrapped"""
        assert wrap_transport_error(StreamlineConnectionError("x")) is None

    def test_unrelated_errors_not_wrapped(self):
        """Test unrelated errors not wrapped"""
        assert wrap_transport_error(KeyError("x")) is None
