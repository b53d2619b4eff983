"""
Intel HEX Parser
================

This module turns Intel HEX text into memory segments.

Addressing State
----------------
Data records only carry 16 address bits. Two extension registers, set by
Extended Segment Address and Extended Linear Address records, are added to
every data record that follows:

    absolute = record.address + extended_linear + extended_segment

The registers, the start addresses and the end-of-file flag live in an
immutable AddressingState. Each record produces a new state through
``AddressingState.advance``, so the decode pass is a fold over the record
stream:

    >>> state = AddressingState()
    >>> state = state.advance(Record.from_line(":020000021000EC"))
    >>> state.extended_segment_address
    65536

Text Handling
-------------
- Lines end in ``\\n``, ``\\r\\n`` or ``\\r``, in any mix. Other control
  characters (form feed, vertical tab) are part of the line
- Lines without the start token are ignored (comments, noise)
- Characters before the start token are ignored
- Processing stops at the first End of File record

Any error on a line aborts the parse with an IHexParseError carrying the
1-based line number.
"""

from dataclasses import dataclass, replace
import logging
import re
from typing import Iterator, Optional

from ihexkit.errors import IHexParseError, IHexRangeError, IHexValueError
from ihexkit.ihex.records import (
    DEFAULT_START_TOKEN,
    Record,
    RecordType,
    StartSegmentAddress,
)
from ihexkit.memory.container import MemorySegmentContainer
from ihexkit.memory.segment import MemorySegment

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r"\r\n|\r|\n")


# =============================================================================
# Addressing State
# =============================================================================

@dataclass(frozen=True)
class AddressingState:
    """
    Decoder state threaded through the records of one file.

    Attributes:
        extended_segment_address: Segment base (payload * 16)
        extended_linear_address: Linear base (payload << 16)
        start_segment_address: CS:IP start address, if seen
        start_linear_address: 32-bit start address, if seen
        end_of_file: True once the End of File record was seen
    """
    extended_segment_address: int = 0
    extended_linear_address: int = 0
    start_segment_address: Optional[StartSegmentAddress] = None
    start_linear_address: Optional[int] = None
    end_of_file: bool = False

    def absolute_address(self, record: Record) -> int:
        """Absolute address of the first byte of a data record."""
        return (record.address + self.extended_linear_address
                + self.extended_segment_address)

    def advance(self, record: Record) -> "AddressingState":
        """
        Return the state after ``record``.

        Data records leave the state unchanged.

        Raises:
            IHexValueError: If a start address record occurs a second time
                or a record payload has the wrong size
        """
        kind = record.record_type

        if kind == RecordType.END_OF_FILE:
            return replace(self, end_of_file=True)

        if kind == RecordType.EXTENDED_SEGMENT_ADDRESS:
            return replace(self, extended_segment_address=record.extended_segment_address)

        if kind == RecordType.EXTENDED_LINEAR_ADDRESS:
            return replace(self, extended_linear_address=record.extended_linear_address)

        if kind == RecordType.START_SEGMENT_ADDRESS:
            if self.start_segment_address is not None:
                raise IHexValueError(
                    "Start segment address record occurs more than once!"
                )
            return replace(self, start_segment_address=record.start_segment_address)

        if kind == RecordType.START_LINEAR_ADDRESS:
            if self.start_linear_address is not None:
                raise IHexValueError(
                    "Start linear address record occurs more than once!"
                )
            return replace(self, start_linear_address=record.start_linear_address)

        return self


# =============================================================================
# Record Iteration
# =============================================================================

def iter_records(text: str,
                 start_token: str = DEFAULT_START_TOKEN
                 ) -> Iterator[tuple[int, Record]]:
    """
    Decode every record line of ``text``.

    Lines without the start token are skipped. Decoding is lazy, so a
    caller that stops at End of File never looks at the lines after it.

    Yields:
        (line_number, record) tuples, line numbers starting at 1

    Raises:
        IHexParseError: If a line cannot be decoded
    """
    for line_number, line in enumerate(LINE_BREAK.split(text), start=1):
        if start_token not in line:
            continue
        try:
            record = Record.from_line(line, start_token)
        except IHexValueError as e:
            raise IHexParseError(line_number, e) from e
        yield line_number, record


# =============================================================================
# File Parsing
# =============================================================================

def parse_hex(text: str,
              container: MemorySegmentContainer,
              start_token: str = DEFAULT_START_TOKEN,
              allow_duplicate_addresses: bool = False) -> AddressingState:
    """
    Parse Intel HEX text into ``container``.

    Args:
        text: The complete file contents
        container: Receives one segment per data record (merged as usual)
        start_token: Record start token
        allow_duplicate_addresses: If False, a data record that overlaps
            data read earlier is an error; if True, the later record wins

    Returns:
        The final AddressingState (start addresses are read from it)

    Raises:
        IHexParseError: On the first bad line, with the cause attached

    Example:
        >>> container = MemorySegmentContainer()
        >>> state = parse_hex(":0400000300003800C1\\n", container)
        >>> state.start_segment_address.instruction_pointer
        14336
    """
    state = AddressingState()

    for line_number, record in iter_records(text, start_token):
        try:
            if record.record_type == RecordType.DATA:
                _add_data_record(container, state.absolute_address(record),
                                 record.payload, allow_duplicate_addresses)
            else:
                state = state.advance(record)
                logger.debug(
                    f"Line {line_number}: {record.record_type.get_name()}"
                )
        except (IHexValueError, IHexRangeError) as e:
            raise IHexParseError(line_number, e) from e

        if state.end_of_file:
            break

    return state


def _add_data_record(container: MemorySegmentContainer, address: int,
                     payload: bytes, allow_duplicate_addresses: bool) -> None:
    segment = MemorySegment.from_bytes(address, payload)
    if not allow_duplicate_addresses and container.intersects(address, len(payload)):
        raise IHexRangeError(
            f"Data at address {address} (length {len(payload)}) overlaps "
            f"data that was already read!"
        )
    container.add_segment(segment)
