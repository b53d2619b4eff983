"""
Intel HEX Writer
================

This module turns memory segments into Intel HEX text.

Output Layout
-------------
1. Start Segment Address record (if present)
2. For every segment, in address order, data records of ``line_length``
   bytes. An extended address record is inserted whenever the high
   address bits of the next data record differ from the last ones emitted:
   - SEGMENTED: bits 0xF0000, Extended Segment Address record
   - LINEAR: bits 0xFFFF0000, Extended Linear Address record
   - NARROW: no extended records
3. Start Linear Address record (if present)
4. End of File record

The extended address value starts at 0 and carries over from one segment
to the next, so a file whose data all lies in the first 64 KB contains no
extended records in any dialect.

A start address is only written in a dialect that owns its record kind:
Start Segment needs SEGMENTED, Start Linear needs LINEAR, and NARROW files
hold data and end of file records only. Without a configured dialect the
writer picks the smallest one that has the needed kind.

Usage Example
-------------
    >>> writer = HexWriter(line_length=16)
    >>> writer.build([MemorySegment.from_bytes(0x20, range(4))])
    ':0400200000010203D6\\n:00000001FF\\n'
"""

import logging
from typing import Iterable, Optional

from ihexkit.errors import IHexRangeError, validate_line_length
from ihexkit.ihex.dialects import Dialect
from ihexkit.ihex.records import (
    DEFAULT_START_TOKEN,
    RecordType,
    StartSegmentAddress,
    create_data_record,
    create_end_of_file_record,
    create_extended_linear_address_record,
    create_extended_segment_address_record,
    create_start_linear_address_record,
    create_start_segment_address_record,
)
from ihexkit.memory.segment import MemorySegment

logger = logging.getLogger(__name__)


def start_record_types(start_segment_address: Optional[StartSegmentAddress],
                       start_linear_address: Optional[int]
                       ) -> frozenset[RecordType]:
    """Record kinds needed to write the start addresses that are set."""
    kinds = set()
    if start_segment_address is not None:
        kinds.add(RecordType.START_SEGMENT_ADDRESS)
    if start_linear_address is not None:
        kinds.add(RecordType.START_LINEAR_ADDRESS)
    return frozenset(kinds)


class HexWriter:
    """
    Serializer for a list of memory segments.

    Attributes:
        dialect: Output dialect; None picks the smallest dialect that can
            hold the data
        line_length: Data bytes per record (1-255)
        start_token: Record start token

    A writer keeps the current extended address while building and can be
    reused; ``build`` resets it.
    """

    def __init__(self, dialect: Optional[Dialect] = None,
                 line_length: int = 16,
                 start_token: str = DEFAULT_START_TOKEN):
        self.dialect = dialect
        self.line_length = validate_line_length(line_length)
        self.start_token = start_token
        self._extended_address = 0

    def resolve_dialect(self, segments: list[MemorySegment],
                        start_segment_address: Optional[StartSegmentAddress] = None,
                        start_linear_address: Optional[int] = None) -> Dialect:
        """
        Return the dialect to write with.

        An inferred dialect is the smallest one that holds the data and has
        a record kind for the start address that is set. A configured
        dialect must have that record kind.

        Raises:
            IHexRangeError: If both start addresses are set, or no dialect
                (or not the configured one) can carry the start address
        """
        required = start_record_types(start_segment_address,
                                      start_linear_address)
        if len(required) > 1:
            raise IHexRangeError(
                "Start segment and start linear address are both set! No "
                "dialect contains both record kinds."
            )

        if self.dialect is not None:
            missing = required - self.dialect.record_types
            if missing:
                raise IHexRangeError(
                    f"The {self.dialect.value.upper()} dialect has no "
                    f"{min(missing).get_name()} record!"
                )
            return self.dialect

        max_address = max((s.end_address for s in segments), default=0)
        dialect = Dialect.smallest(max_address, required)
        if dialect is None:
            kinds = ", ".join(kind.get_name() for kind in sorted(required))
            raise IHexRangeError(
                f"No dialect holds data up to {max_address:#x} with the "
                f"record kinds [{kinds}]!"
            )
        logger.debug(f"Inferred dialect {dialect.value} for end address {max_address:#x}")
        return dialect

    def build(self, segments: Iterable[MemorySegment],
              start_segment_address: Optional[StartSegmentAddress] = None,
              start_linear_address: Optional[int] = None) -> str:
        """
        Serialize ``segments`` to Intel HEX text.

        Segments are written in the order given; callers sort them first.

        Returns:
            The complete file contents, ending with the End of File record

        Raises:
            IHexRangeError: If a segment lies beyond the dialect's address
                range or the dialect cannot carry a start address
        """
        segments = list(segments)
        dialect = self.resolve_dialect(segments, start_segment_address,
                                       start_linear_address)
        self._extended_address = 0

        lines = []
        if start_segment_address is not None:
            lines.append(create_start_segment_address_record(
                start_segment_address.code_segment,
                start_segment_address.instruction_pointer,
                start_token=self.start_token,
            ))

        for segment in segments:
            lines.extend(self.write_segment(segment, dialect))

        if start_linear_address is not None:
            lines.append(create_start_linear_address_record(
                start_linear_address, start_token=self.start_token))

        lines.append(create_end_of_file_record(start_token=self.start_token))
        return "".join(lines)

    def write_segment(self, segment: MemorySegment,
                      dialect: Dialect) -> list[str]:
        """
        Serialize a single segment to a list of record lines.

        Raises:
            IHexRangeError: If the segment ends beyond ``dialect.address_limit``
        """
        if segment.end_address > dialect.address_limit:
            raise IHexRangeError(
                f"Segment [{segment.address:#x}, {segment.end_address:#x}) "
                f"does not fit in the {dialect.value.upper()} address range "
                f"(limit {dialect.address_limit:#x})"
            )

        mask = dialect.extended_address_mask
        lines = []
        for offset in range(0, len(segment), self.line_length):
            address = segment.address + offset
            upper = address & mask
            if upper != self._extended_address:
                lines.append(self._extended_record(upper, dialect))
                self._extended_address = upper
            chunk = segment.slice(offset, offset + self.line_length)
            lines.append(create_data_record(address - upper, chunk,
                                            start_token=self.start_token))
        return lines

    def _extended_record(self, address: int, dialect: Dialect) -> str:
        logger.debug(f"Extended address {address:#x} ({dialect.value})")
        if dialect is Dialect.SEGMENTED:
            return create_extended_segment_address_record(
                address, start_token=self.start_token)
        return create_extended_linear_address_record(
            address, start_token=self.start_token)
