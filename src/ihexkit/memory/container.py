"""
Memory Segment Container
========================

An ordered collection of disjoint MemorySegments making up a sparse memory
image.

Invariant
---------
After every call to ``add_segment`` or ``add_all`` the segments are sorted
by start address and no two of them overlap. Touching segments count as
overlapping and are fused into one.

Precedence Rules
----------------
Two different rules decide which data survives when ranges collide:

1. **Add time**: ``add_segment`` folds the new segment into the first
   stored segment it overlaps. Explicitly added data always overwrites
   data that was stored before at the same addresses.

2. **Merge sweep**: ``merge_segments`` handles overlaps discovered
   afterwards (for example after a stored segment was grown in place).
   There, the data of the segment starting at the lower address is kept.
"""

import logging
from typing import Iterable, Iterator, Optional

from ihexkit.memory.segment import MemorySegment

logger = logging.getLogger(__name__)


class MemorySegmentContainer:
    """
    Sorted collection of non-overlapping memory segments.

    Example:
        >>> container = MemorySegmentContainer()
        >>> container.add_all(0x100, [1, 2, 3])
        >>> container.add_all(0x103, [4])
        >>> len(container), container.max_address
        (1, 260)
    """

    def __init__(self, address: Optional[int] = None,
                 length: Optional[int] = None):
        """
        Create a container, optionally with one zero-filled segment.

        Args:
            address: Start address of the initial segment
            length: Length of the initial segment

        The initial segment is only created when both values are given and
        not negative.
        """
        self._segments: list[MemorySegment] = []
        if address is not None and length is not None \
                and address >= 0 and length >= 0:
            self.add_segment(MemorySegment(address, length))

    @classmethod
    def from_data(cls, data: Iterable[int],
                  address: int = 0) -> "MemorySegmentContainer":
        """Create a container with a single segment holding ``data``."""
        container = cls()
        container.add_all(address, data)
        return container

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def segments(self) -> list[MemorySegment]:
        """All segments. Use add_segment() or add_all() to add data."""
        return self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[MemorySegment]:
        return iter(self._segments)

    @property
    def max_address(self) -> int:
        """Largest end address over all segments, or 0 when empty."""
        return max((segment.end_address for segment in self._segments),
                   default=0)

    # =========================================================================
    # Insertion
    # =========================================================================

    def add_all(self, address: int, data: Iterable[int]) -> None:
        """
        Store ``data`` starting at ``address``.

        Data previously stored at any of these addresses is overwritten.
        Values are truncated to 8 bits.
        """
        self.add_segment(MemorySegment.from_bytes(address, data))

    def add_segment(self, segment: MemorySegment) -> None:
        """
        Add ``segment`` and overwrite data stored before at the same
        addresses.

        Afterwards the segments are sorted and overlapping ones are merged.
        """
        for existing in self._segments:
            if existing.overlaps(segment):
                logger.debug(f"Combining {segment!r} into {existing!r}")
                existing.combine(segment)
                break
        else:
            self._segments.append(segment)
        self.sort_segments()
        self.merge_segments()

    # =========================================================================
    # Normalization
    # =========================================================================

    def merge_segments(self) -> None:
        """
        Merge all overlapping segments.

        For every pair (i, k), i < k, the later segment absorbs the earlier
        one, so where addresses are duplicated the values of the segment
        starting at the lower address are retained.
        """
        merged = set()
        for i, lower in enumerate(self._segments):
            for upper in self._segments[i + 1:]:
                if upper.overlaps(lower):
                    upper.combine(lower)
                    merged.add(i)
        if merged:
            logger.debug(f"Merged {len(merged)} overlapping segment(s)")
            self._segments = [
                segment for index, segment in enumerate(self._segments)
                if index not in merged
            ]
            self.sort_segments()

    def sort_segments(self) -> None:
        """Sort the segments by ascending start address (stable)."""
        self._segments.sort(key=lambda segment: segment.address)

    # =========================================================================
    # Queries
    # =========================================================================

    def intersects(self, address: int, length: int) -> bool:
        """
        Check if any stored byte lies inside ``[address, address + length)``.

        Unlike ``MemorySegment.overlaps`` this ignores segments that merely
        touch the range.
        """
        end = address + length
        return any(
            segment.address < end and address < segment.end_address
            for segment in self._segments
        )

    def validate_segments_are_unique(self) -> bool:
        """Return True if no two segments overlap."""
        for i, first in enumerate(self._segments):
            for second in self._segments[i + 1:]:
                if first.overlaps(second):
                    return False
        return True

    def __str__(self) -> str:
        """
        List the segments and their address ranges as a JSON array.

        A non-empty list opens with ``"[ "``; an empty one is ``"[]"``.
        """
        if not self._segments:
            return '"segments": []'
        ranges = ",".join(
            f'{{"start": {segment.address},"end": {segment.end_address}}}'
            for segment in self._segments
        )
        return f'"segments": [ {ranges}]'
