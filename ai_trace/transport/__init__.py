"""
Transport for shipping traces to a remote collector.
"""

from .client import MemoryItem, TraceClient, TraceTransportError

__all__ = ["MemoryItem", "TraceClient", "TraceTransportError"]
