"""
Types shared by the connection manager and its callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional


class ConnectionState(Enum):
    """Connection states for the ConnectionManager."""
    DISCONNECTED = 0   # Not connected to the server
    CONNECTED = 1      # Connected and healthy
    RECONNECTING = 2   # Attempting to reconnect after a failure


StateCallback = Callable[[ConnectionState], None]


@dataclass
class Request:
    """
    An HTTP request routed through the managed connection.

    Attributes:
        method: HTTP method
        path: Path relative to the control plane base URL
        params: Query string parameters
        headers: Extra request headers
        json: JSON body (mutually exclusive with data)
        data: Raw body
    """
    method: str
    path: str
    params: Optional[Dict[str, str]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    json: Any = None
    data: Any = None

    def to_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for aiohttp.ClientSession.request."""
        kwargs: Dict[str, Any] = {"headers": self.headers}
        if self.params is not None:
            kwargs["params"] = self.params
        if self.json is not None:
            kwargs["json"] = self.json
        elif self.data is not None:
            kwargs["data"] = self.data
        return kwargs


class StateSubscription:
    """Handle returned by ConnectionManager.subscribe; call unsubscribe() to stop notifications."""

    def __init__(self, unsubscribe: Callable[["StateSubscription"], None], callback: StateCallback):
        self._unsubscribe = unsubscribe
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._unsubscribe(self)

    def __enter__(self) -> "StateSubscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()
