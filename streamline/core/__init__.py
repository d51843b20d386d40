"""
Core module initialization
"""

from .config import StreamlineOptions, ProducerOptions, CompressionType
from .client import StreamlineClient

__all__ = ["StreamlineClient", "StreamlineOptions", "ProducerOptions", "CompressionType"]
