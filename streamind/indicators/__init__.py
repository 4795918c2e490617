"""
Streaming technical indicators.

Incremental indicators live in streamind.indicators.incremental; the
pandas adapter in streamind.indicators.compute.
"""

from .incremental import *  # noqa: F401,F403
from .incremental import __all__ as _incremental_all
from .compute import apply_incremental_indicator, run_incremental

__all__ = [
    *_incremental_all,
    "apply_incremental_indicator",
    "run_incremental",
]
