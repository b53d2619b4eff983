"""
Sparse Memory Model
===================

- **MemorySegment**: one contiguous, resizable run of bytes at an address
- **MemorySegmentContainer**: sorted, non-overlapping set of segments

The model has no knowledge of any file format; ihexkit.ihex builds on it.
"""

from ihexkit.memory.segment import (
    Endian,
    MemorySegment,
    SegmentByte,
)
from ihexkit.memory.container import MemorySegmentContainer

__all__ = [
    "Endian",
    "MemorySegment",
    "SegmentByte",
    "MemorySegmentContainer",
]
