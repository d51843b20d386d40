"""
Package connection manages the client's connection to the Streamline control plane.

- Connection state tracking (disconnected, connected, reconnecting)
- Health probing and background reconnection
- Request routing with retry
- State change subscriptions
"""

from .types import (
    ConnectionState,
    Request,
    StateCallback,
    StateSubscription,
)

from .manager import (
    ConnectionManager,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    HEALTH_PATH,
    default_connection_retry_options,
)

__all__ = [
    'ConnectionState',
    'Request',
    'StateCallback',
    'StateSubscription',
    'ConnectionManager',
    'DEFAULT_HEALTH_CHECK_INTERVAL',
    'HEALTH_PATH',
    'default_connection_retry_options',
]
