"""
Utility helpers for the Streamline client.

- Configuration helpers for reading STREAMLINE_* environment variables
- Duration parsing for timeout and interval settings
"""

from .config import (
    get_config_value, parse_duration_string,
    parse_bootstrap_servers
)

__all__ = [
    'get_config_value', 'parse_duration_string',
    'parse_bootstrap_servers'
]
