"""
Main entry point for the Streamline Python client.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import aiohttp

from .config import StreamlineOptions
from ..connection import ConnectionManager, Request
from ..errors import StreamlineError
from ..resilience import RetryPolicy, RetryPolicyOptions

T = TypeVar("T")


class StreamlineClient:
    """
    Streamline client facade.

    Builds a retry policy from the producer options and a connection manager
    from the client options, and exposes connection, health and request
    operations. Use StreamlineClient.new() for the common case.

    Example:
        async with StreamlineClient.new("localhost:9092") as client:
            await client.connect()
            healthy = await client.is_healthy()
    """

    def __init__(
        self,
        options: Optional[StreamlineOptions] = None,
        logger: Optional[logging.Logger] = None,
        retry_policy: Optional[RetryPolicy] = None,
        connection_manager: Optional[ConnectionManager] = None,
    ):
        """
        Initialize the client.

        Args:
            options: Client configuration (defaults to StreamlineOptions())
            logger: Optional logger instance
            retry_policy: Retry policy for client operations (built from producer options by default)
            connection_manager: Connection manager (built from options by default)
        """
        self.options = options if options is not None else StreamlineOptions()
        self.logger = logger or logging.getLogger(__name__)

        if retry_policy is None:
            backoff = timedelta(milliseconds=self.options.producer.retry_backoff_ms)
            retry_policy = RetryPolicy(
                RetryPolicyOptions(
                    max_retries=self.options.producer.retries,
                    base_delay=backoff,
                    max_delay=max(backoff, RetryPolicyOptions().max_delay),
                ),
                logger=self.logger,
            )
        self._retry_policy = retry_policy
        self._connection_manager = connection_manager or ConnectionManager(
            self.options, logger=self.logger
        )
        self._closed = False

        self.logger.info(
            f"Streamline client initialized with bootstrap servers: {self.options.bootstrap_servers}"
        )

    @classmethod
    def new(cls, bootstrap_servers: str, logger: Optional[logging.Logger] = None) -> "StreamlineClient":
        """
        Create a client for the given comma-separated host:port list.

        Raises:
            StreamlineConfigurationError: If the bootstrap servers are invalid
        """
        options = StreamlineOptions(bootstrap_servers=bootstrap_servers)
        options.validate()
        return cls(options, logger=logger)

    @property
    def retry_policy(self) -> RetryPolicy:
        """The retry policy used by this client."""
        return self._retry_policy

    @property
    def connection_manager(self) -> ConnectionManager:
        """The connection manager used by this client."""
        return self._connection_manager

    @property
    def closed(self) -> bool:
        return self._closed

    async def connect(self, cancel_event: Optional[asyncio.Event] = None) -> None:
        """Connect to the server and start background health checks."""
        self._ensure_open()
        await self._connection_manager.connect(cancel_event)

    async def is_healthy(self, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """Check if the client is connected and healthy."""
        if self._closed:
            return False

        return await self._connection_manager.check_health(cancel_event)

    async def send(
        self,
        request: Request,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> aiohttp.ClientResponse:
        """Send a request to the control plane through the managed connection."""
        self._ensure_open()
        return await self._connection_manager.send(request, cancel_event)

    async def execute(
        self,
        operation: Callable[[], Union[Awaitable[T], T]],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """Run an arbitrary operation under the client's retry policy."""
        self._ensure_open()
        return await self._retry_policy.execute(operation, cancel_event)

    async def close(self) -> None:
        """Close the client and its connection manager."""
        if self._closed:
            return

        self._closed = True
        await self._connection_manager.close()
        self.logger.info("Streamline client closed")

    async def __aenter__(self) -> "StreamlineClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StreamlineError("Streamline client is closed")
