"""
Incremental state primitives shared by all indicators.
"""

from .primitives import Lookback, MonotonicDeque, RingBuffer

__all__ = [
    "Lookback",
    "MonotonicDeque",
    "RingBuffer",
]
