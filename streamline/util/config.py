"""
Configuration utilities for the Streamline client.
Provides environment lookups, duration parsing and bootstrap address parsing.
"""

import os
import re
from datetime import timedelta
from typing import Any, List, Optional, Tuple

ENV_PREFIX = "STREAMLINE_"


def get_config_value(key: str, default: Any = None,
                     cast_type: Optional[type] = None,
                     env_prefix: str = ENV_PREFIX) -> Any:
    """
    Get configuration value from environment or return default.
    Optionally cast to specified type.
    """
    env_key = f"{env_prefix}{key.upper()}"
    value = os.environ.get(env_key)

    if value is None:
        return default

    if cast_type is None:
        return value

    try:
        if cast_type == bool:
            return value.lower() in ('true', '1', 'yes', 'on')
        elif cast_type == list:
            return [item.strip() for item in value.split(',') if item.strip()]
        elif cast_type == timedelta:
            return parse_duration_string(value)
        else:
            return cast_type(value)
    except (ValueError, TypeError):
        return default


def parse_duration_string(duration_str: str) -> timedelta:
    """
    Parse duration string like '250ms', '30s', '5m', '2h', '1d' into timedelta.
    """
    if not isinstance(duration_str, str):
        raise ValueError("Duration must be a string")

    duration_str = duration_str.strip().lower()

    pattern = r'^(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)$'
    match = re.match(pattern, duration_str)

    if not match:
        raise ValueError(f"Invalid duration format: {duration_str}")

    value, unit = match.groups()
    value = float(value)

    if unit == 'ms':
        return timedelta(milliseconds=value)
    elif unit == 's':
        return timedelta(seconds=value)
    elif unit == 'm':
        return timedelta(minutes=value)
    elif unit == 'h':
        return timedelta(hours=value)
    else:
        return timedelta(days=value)


def parse_bootstrap_servers(servers: str) -> List[Tuple[str, Optional[int]]]:
    """
    Split a comma-separated list of host:port pairs.

    Entries without a port yield (host, None). Empty entries are skipped.
    """
    result = []

    for entry in servers.split(','):
        entry = entry.strip()
        if not entry:
            continue

        # Split on the last colon so bracketed IPv6 hosts keep their colons
        host, sep, port = entry.rpartition(':')
        if not sep or host.endswith(':') or (host.startswith('[') and not host.endswith(']')):
            result.append((entry, None))
            continue

        try:
            result.append((host, int(port)))
        except ValueError:
            raise ValueError(f"Invalid port in bootstrap server: {entry}")

    return result
