"""
Configuration module for the Streamline Python client.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from ..errors import StreamlineConfigurationError
from ..util.config import get_config_value, parse_bootstrap_servers

DEFAULT_BOOTSTRAP_SERVERS = "localhost:9092"

# Port of the broker's HTTP control plane (health, admin)
DEFAULT_HTTP_PORT = 9094


class CompressionType(Enum):
    """Compression codecs supported by the producer."""
    NONE = "none"
    GZIP = "gzip"
    LZ4 = "lz4"
    SNAPPY = "snappy"
    ZSTD = "zstd"


@dataclass
class ProducerOptions:
    """Producer configuration settings"""
    batch_size: int = 16384
    linger_ms: int = 1
    max_request_size: int = 1048576
    compression_type: CompressionType = CompressionType.NONE
    retries: int = 3
    retry_backoff_ms: int = 100
    idempotent: bool = False

    def validate(self) -> bool:
        """Validate the producer settings"""
        if self.batch_size <= 0:
            raise StreamlineConfigurationError("batch_size must be positive", field="batch_size")
        if self.linger_ms < 0:
            raise StreamlineConfigurationError("linger_ms must be non-negative", field="linger_ms")
        if self.max_request_size <= 0:
            raise StreamlineConfigurationError(
                "max_request_size must be positive", field="max_request_size"
            )
        if self.retries < 0:
            raise StreamlineConfigurationError("retries must be non-negative", field="retries")
        if self.retry_backoff_ms < 0:
            raise StreamlineConfigurationError(
                "retry_backoff_ms must be non-negative", field="retry_backoff_ms"
            )
        return True


@dataclass
class StreamlineOptions:
    """Configuration for the Streamline client"""
    bootstrap_servers: str = field(
        default_factory=lambda: os.getenv("STREAMLINE_BOOTSTRAP_SERVERS", DEFAULT_BOOTSTRAP_SERVERS)
    )
    connection_pool_size: int = 4
    connect_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=30))
    request_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=30))
    http_port: int = DEFAULT_HTTP_PORT
    producer: ProducerOptions = field(default_factory=ProducerOptions)

    @classmethod
    def from_env(cls) -> "StreamlineOptions":
        """Create options from STREAMLINE_* environment variables"""
        return cls(
            bootstrap_servers=get_config_value("bootstrap_servers", DEFAULT_BOOTSTRAP_SERVERS),
            connection_pool_size=get_config_value("connection_pool_size", 4, int),
            connect_timeout=get_config_value(
                "connect_timeout", timedelta(seconds=30), timedelta
            ),
            request_timeout=get_config_value(
                "request_timeout", timedelta(seconds=30), timedelta
            ),
            http_port=get_config_value("http_port", DEFAULT_HTTP_PORT, int),
            producer=ProducerOptions(
                retries=get_config_value("producer_retries", 3, int),
                retry_backoff_ms=get_config_value("producer_retry_backoff_ms", 100, int),
            ),
        )

    @property
    def primary_server(self) -> str:
        """Host of the first bootstrap server"""
        servers = parse_bootstrap_servers(self.bootstrap_servers)
        if not servers:
            raise StreamlineConfigurationError(
                "bootstrap_servers is required", field="bootstrap_servers"
            )
        return servers[0][0]

    @property
    def control_plane_url(self) -> str:
        """Base URL of the HTTP control plane, derived from the first bootstrap server"""
        return f"http://{self.primary_server}:{self.http_port}"

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.bootstrap_servers or not self.bootstrap_servers.strip():
            raise StreamlineConfigurationError(
                "bootstrap_servers is required", field="bootstrap_servers"
            )
        try:
            servers = parse_bootstrap_servers(self.bootstrap_servers)
        except ValueError as e:
            raise StreamlineConfigurationError(str(e), field="bootstrap_servers") from e
        if not servers:
            raise StreamlineConfigurationError(
                "bootstrap_servers must name at least one host", field="bootstrap_servers"
            )
        if self.connection_pool_size <= 0:
            raise StreamlineConfigurationError(
                "connection_pool_size must be positive", field="connection_pool_size"
            )
        if self.connect_timeout <= timedelta(0):
            raise StreamlineConfigurationError(
                "connect_timeout must be positive", field="connect_timeout"
            )
        if self.request_timeout <= timedelta(0):
            raise StreamlineConfigurationError(
                "request_timeout must be positive", field="request_timeout"
            )
        if not 0 < self.http_port < 65536:
            raise StreamlineConfigurationError(
                "http_port must be between 1 and 65535", field="http_port"
            )
        self.producer.validate()
        return True
