"""
Utilities module for ReadWeaver.

This module provides sequence helpers shared by the simulation core and
the I/O layer.
"""

from .sequence_utils import gc_window_fractions, is_gzipped, reverse_complement

__all__ = [
    "gc_window_fractions",
    "is_gzipped",
    "reverse_complement",
]
