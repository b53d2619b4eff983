"""
Intel HEX Addressing Dialects
=============================

Records only carry a 16-bit address. Three conventions extend it:

- **NARROW** (I8HEX): data and end of file records only, 64 KB.
- **SEGMENTED** (I16HEX): adds Extended/Start Segment Address records,
  the segment base is ``payload * 16``, 1 MB.
- **LINEAR** (I32HEX): adds Extended/Start Linear Address records,
  the base is ``payload << 16``, 4 GB.
"""

from enum import Enum
from typing import Iterable, Optional

from ihexkit.ihex.records import RecordType


class Dialect(Enum):
    """Addressing dialect used to serialize a file."""
    NARROW = "i8hex"
    SEGMENTED = "i16hex"
    LINEAR = "i32hex"

    @property
    def max_address(self) -> int:
        """Highest address the dialect advertises."""
        return {
            Dialect.NARROW: 0xFFFF,
            Dialect.SEGMENTED: 0xFFFF0,
            Dialect.LINEAR: 0xFFFFFFF0,
        }[self]

    @property
    def address_limit(self) -> int:
        """Exclusive end address a segment may reach when serialized."""
        return {
            Dialect.NARROW: 0x10000,
            Dialect.SEGMENTED: 0x100000,
            Dialect.LINEAR: 0x100000000,
        }[self]

    @property
    def extended_address_mask(self) -> int:
        """Bits of an absolute address carried by extended address records."""
        return {
            Dialect.NARROW: 0,
            Dialect.SEGMENTED: 0xF0000,
            Dialect.LINEAR: 0xFFFF0000,
        }[self]

    @property
    def record_types(self) -> frozenset[RecordType]:
        """Record kinds that belong to the dialect."""
        common = {RecordType.DATA, RecordType.END_OF_FILE}
        if self is Dialect.SEGMENTED:
            common |= {RecordType.EXTENDED_SEGMENT_ADDRESS,
                       RecordType.START_SEGMENT_ADDRESS}
        elif self is Dialect.LINEAR:
            common |= {RecordType.EXTENDED_LINEAR_ADDRESS,
                       RecordType.START_LINEAR_ADDRESS}
        return frozenset(common)

    @classmethod
    def smallest(cls, max_address: int,
                 record_types: Iterable[RecordType] = ()) -> Optional["Dialect"]:
        """
        Choose the smallest dialect that reaches ``max_address`` (an
        exclusive end address) and has every record kind in ``record_types``.

        Returns:
            The Dialect, or None if no dialect qualifies. No dialect has
            both Start Segment and Start Linear Address records.

        Examples:
            >>> Dialect.smallest(0x140)
            <Dialect.NARROW: 'i8hex'>
            >>> Dialect.smallest(0x140, {RecordType.START_LINEAR_ADDRESS})
            <Dialect.LINEAR: 'i32hex'>
        """
        needed = frozenset(record_types)
        for dialect in cls:
            if max_address <= dialect.address_limit \
                    and needed <= dialect.record_types:
                return dialect
        return None

    @classmethod
    def from_name(cls, name: str) -> Optional["Dialect"]:
        """
        Look up a dialect by value ("i16hex") or member name ("segmented").

        Returns:
            The Dialect, or None for an unknown name
        """
        key = name.strip().lower()
        for dialect in cls:
            if key in (dialect.value, dialect.name.lower()):
                return dialect
        return None
