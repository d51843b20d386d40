"""
Connection manager for the Streamline HTTP control plane.

This module implements connection lifecycle management with:
- Health probing against the /health endpoint
- Periodic background health checks with automatic reconnection
- Request routing through a retry policy
- State change notifications
"""

import asyncio
import logging
import threading
from datetime import timedelta
from typing import List, Optional

import aiohttp

from ..core.config import StreamlineOptions
from ..errors import StreamlineConnectionError, StreamlineError, wrap_transport_error
from ..resilience import (
    RetryPolicy,
    RetryPolicyOptions,
    raise_if_cancelled,
    run_cancellable,
    sleep_cancellable,
)
from .types import ConnectionState, Request, StateCallback, StateSubscription

HEALTH_PATH = "/health"
DEFAULT_HEALTH_CHECK_INTERVAL = timedelta(seconds=30)


def default_connection_retry_options() -> RetryPolicyOptions:
    """Retry settings used for health probes and requests when none are injected."""
    return RetryPolicyOptions(
        max_retries=3,
        base_delay=timedelta(milliseconds=500),
        max_delay=timedelta(seconds=5),
    )


class ConnectionManager:
    """
    Manages the HTTP connection to a Streamline server, including health
    checks and automatic reconnection.

    The manager either borrows a caller supplied aiohttp.ClientSession (which
    it never closes) or creates and owns one lazily, closing it in close().
    A borrowed session must be configured with the control plane base_url.

    Attributes:
        options: Client options (bootstrap servers, pool size, timeouts)
        health_check_interval: Delay between background health checks
        logger: Logger for state transitions and probe failures

    Example:
        >>> async with ConnectionManager(StreamlineOptions()) as manager:
        ...     await manager.connect()
        ...     response = await manager.send(Request("GET", "/v1/topics"))
    """

    def __init__(
        self,
        options: StreamlineOptions,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize connection manager.

        Args:
            options: Client options
            session: Optional externally owned session
            logger: Optional logger (defaults to module logger)
            retry_policy: Optional retry policy (defaults to 3 retries, 500ms-5s backoff)
        """
        if options is None:
            raise TypeError("options is required")
        options.validate()

        self.options = options
        self.logger = logger or logging.getLogger(__name__)
        self._session = session
        self._owns_session = session is None
        self._retry_policy = retry_policy or RetryPolicy(
            default_connection_retry_options(), logger=self.logger
        )

        self._state = ConnectionState.DISCONNECTED
        self._state_lock = threading.Lock()
        self._subscriptions: List[StateSubscription] = []

        self._health_check_interval = DEFAULT_HEALTH_CHECK_INTERVAL
        self._health_check_task: Optional[asyncio.Task] = None
        self._closing = asyncio.Event()
        self._closed = False

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def owns_session(self) -> bool:
        """True when the manager created the session and is responsible for closing it."""
        return self._owns_session

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def health_check_interval(self) -> timedelta:
        """Delay between background health checks. Default is 30 seconds."""
        return self._health_check_interval

    @health_check_interval.setter
    def health_check_interval(self, value: timedelta) -> None:
        if value <= timedelta(0):
            raise ValueError("health_check_interval must be positive")
        self._health_check_interval = value

    def subscribe(self, callback: StateCallback) -> StateSubscription:
        """
        Register a callback invoked with the new state on every state change.

        Callbacks run synchronously, outside the state lock, so they may call
        back into the manager.

        Returns:
            Subscription handle; call unsubscribe() to stop notifications
        """
        subscription = StateSubscription(self._remove_subscription, callback)
        with self._state_lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove_subscription(self, subscription: StateSubscription) -> None:
        with self._state_lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                pass

    async def connect(self, cancel_event: Optional[asyncio.Event] = None) -> None:
        """
        Establish the initial connection and start periodic health checks.

        Raises:
            StreamlineConnectionError: If the server stays unhealthy after all retries
            asyncio.CancelledError: If cancellation was requested
        """
        self._ensure_open()

        if self._state == ConnectionState.CONNECTED:
            self._start_health_check_loop()
            return

        await self._perform_health_check(cancel_event)
        self._start_health_check_loop()

    async def send(
        self,
        request: Request,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> aiohttp.ClientResponse:
        """
        Send a request through the managed connection with retry logic.

        The response body is read before returning, so the response can be
        inspected after the underlying connection has been released.

        Raises:
            StreamlineConnectionError: If not connected or the server is unreachable
            StreamlineTimeoutError: If the request exceeded its timeout
        """
        if request is None:
            raise TypeError("request is required")
        self._ensure_open()

        async def attempt() -> aiohttp.ClientResponse:
            if self._state == ConnectionState.DISCONNECTED:
                raise StreamlineConnectionError(
                    "Not connected to Streamline server. Call connect() first."
                )

            try:
                return await run_cancellable(self._dispatch(request), cancel_event)
            except Exception as e:
                error = wrap_transport_error(e)
                if error is None:
                    raise
                if isinstance(error, StreamlineConnectionError):
                    self._transition_state(ConnectionState.RECONNECTING)
                raise error from e

        return await self._retry_policy.execute(attempt, cancel_event)

    async def check_health(self, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """
        Perform a single health check against the /health endpoint.

        Never raises except on cancellation; failures are reported as False and
        move the manager to DISCONNECTED.
        """
        raise_if_cancelled(cancel_event)

        try:
            status = await run_cancellable(self._probe(), cancel_event)
        except Exception as e:
            self.logger.debug(f"Health check failed: {e}")
            self._transition_state(ConnectionState.DISCONNECTED)
            return False

        healthy = 200 <= status < 300
        if not healthy:
            self.logger.debug(f"Health check returned HTTP {status}")

        self._transition_state(
            ConnectionState.CONNECTED if healthy else ConnectionState.DISCONNECTED
        )
        return healthy

    async def close(self) -> None:
        """Stop the health check loop and release the session if owned. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._closing.set()

        task = self._health_check_task
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass  # Expected during shutdown

        if self._owns_session and self._session is not None:
            await self._session.close()

        self.logger.info("Connection manager closed")

    async def __aenter__(self) -> "ConnectionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StreamlineError("Connection manager is closed")

    def _get_session(self) -> aiohttp.ClientSession:
        # Owned sessions are created on first use, inside the running loop
        if self._session is None:
            self._ensure_open()
            connector = aiohttp.TCPConnector(limit_per_host=self.options.connection_pool_size)
            timeout = aiohttp.ClientTimeout(
                total=self.options.request_timeout.total_seconds(),
                connect=self.options.connect_timeout.total_seconds(),
            )
            self._session = aiohttp.ClientSession(
                base_url=self.options.control_plane_url,
                connector=connector,
                timeout=timeout,
            )
            self.logger.debug(f"Created HTTP session for {self.options.control_plane_url}")
        return self._session

    async def _probe(self) -> int:
        session = self._get_session()
        async with session.get(HEALTH_PATH) as response:
            return response.status

    async def _dispatch(self, request: Request) -> aiohttp.ClientResponse:
        session = self._get_session()
        path = request.path if request.path.startswith("/") else f"/{request.path}"
        response = await session.request(request.method, path, **request.to_kwargs())
        try:
            await response.read()
        finally:
            response.release()
        return response

    async def _perform_health_check(self, cancel_event: Optional[asyncio.Event]) -> None:
        if await self.check_health(cancel_event):
            return

        async def probe() -> bool:
            if not await self.check_health(cancel_event):
                raise StreamlineConnectionError("Health check failed during connect")
            return True

        await self._retry_policy.execute(probe, cancel_event)

    def _start_health_check_loop(self) -> None:
        if self._health_check_task is not None:
            return

        self._health_check_task = asyncio.create_task(
            self._health_check_loop(), name="streamline-health-check"
        )

    async def _health_check_loop(self) -> None:
        while not self._closing.is_set():
            try:
                await sleep_cancellable(
                    self._health_check_interval.total_seconds(), self._closing
                )
                await self.check_health(self._closing)

                if self._state == ConnectionState.DISCONNECTED:
                    self._transition_state(ConnectionState.RECONNECTING)
                    await self._perform_health_check(self._closing)
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.warning(f"Health check loop encountered an error: {e}")

    def _transition_state(self, new_state: ConnectionState) -> None:
        with self._state_lock:
            if self._state == new_state:
                return

            old_state = self._state
            self._state = new_state
            subscriptions = list(self._subscriptions)

        self.logger.info(f"Connection state changed: {old_state.name} -> {new_state.name}")

        for subscription in subscriptions:
            try:
                subscription.callback(new_state)
            except Exception as err:
                self.logger.error(f"Error in state change callback: {err}")
