"""
Intel HEX Record Definitions
============================

This module defines the six Intel HEX record kinds, the encoders that turn
values into record lines, and the decoder that turns a line back into a
typed Record.

Record Format
-------------
Every record is a single line of text:

    :LLAAAATT[DD...]CC

    :       Start token (configurable, default ":")
    LL      Byte count of the payload
    AAAA    16-bit address, big-endian
    TT      Record type
    DD      Payload bytes
    CC      Checksum (see checksum.py)

All hex digits are emitted in uppercase and every line ends with a single
newline.

Record Types
------------
- $00: Data
- $01: End of File
- $02: Extended Segment Address (payload * 16 is added to later addresses)
- $03: Start Segment Address (CS:IP for 80x86 CPUs)
- $04: Extended Linear Address (upper 16 bits of later addresses)
- $05: Start Linear Address (32-bit execution start address)

Reference
---------
- Intel Hexadecimal Object File Format Specification, Rev. A (1988)
"""

from dataclasses import dataclass, field
from enum import IntEnum
import re
import struct
from typing import Iterable

from ihexkit.errors import IHexRangeError, IHexValueError
from ihexkit.ihex.checksum import append_checksum, validate_checksum


DEFAULT_START_TOKEN = ":"

# length + address (2) + type + checksum
MIN_RECORD_SIZE = 5

MAX_PAYLOAD = 255

_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]*")


# =============================================================================
# Enumeration Types
# =============================================================================

class RecordType(IntEnum):
    """Intel HEX record type identifiers."""
    DATA = 0x00
    END_OF_FILE = 0x01
    EXTENDED_SEGMENT_ADDRESS = 0x02
    START_SEGMENT_ADDRESS = 0x03
    EXTENDED_LINEAR_ADDRESS = 0x04
    START_LINEAR_ADDRESS = 0x05

    def get_name(self) -> str:
        """Get a human-readable name for this record type."""
        names = {
            RecordType.DATA: "Data",
            RecordType.END_OF_FILE: "End of File",
            RecordType.EXTENDED_SEGMENT_ADDRESS: "Extended Segment Address",
            RecordType.START_SEGMENT_ADDRESS: "Start Segment Address",
            RecordType.EXTENDED_LINEAR_ADDRESS: "Extended Linear Address",
            RecordType.START_LINEAR_ADDRESS: "Start Linear Address",
        }
        return names[self]


@dataclass(frozen=True)
class StartSegmentAddress:
    """
    Start address of execution for 80x86 CPUs.

    Attributes:
        code_segment: Initial CS register value (16 bits)
        instruction_pointer: Initial IP register value (16 bits)
    """
    code_segment: int = 0
    instruction_pointer: int = 0


# =============================================================================
# Encoders
# =============================================================================

def _to_line(data: bytes, start_token: str) -> str:
    """Convert record bytes (checksum included) to a text line."""
    return f"{start_token}{data.hex().upper()}\n"


def _build(record_type: RecordType, address: int, payload: bytes,
           start_token: str) -> str:
    body = bytes([len(payload), (address >> 8) & 0xFF, address & 0xFF,
                  record_type]) + payload
    return _to_line(append_checksum(body), start_token)


def create_data_record(address: int, data: Iterable[int],
                       start_token: str = DEFAULT_START_TOKEN) -> str:
    """
    Create a data record.

    A data record holds a 16-bit address offset and up to 255 bytes.

    Args:
        address: 16-bit address of the first byte
        data: Payload bytes (values are truncated to 8 bits)
        start_token: Record start token

    Returns:
        The record line, e.g. ":0300300002337A1E\\n"

    Raises:
        IHexRangeError: If the address does not fit in two bytes or the
            payload is longer than 255 bytes
    """
    if address < 0 or address > 0xFFFF:
        raise IHexRangeError(f"Address {address} does not fit in two bytes!")
    payload = bytes(value & 0xFF for value in data)
    if len(payload) > MAX_PAYLOAD:
        raise IHexRangeError(
            f"A maximum of {MAX_PAYLOAD} bytes of data can be in one data "
            f"record! Got {len(payload)}"
        )
    return _build(RecordType.DATA, address, payload, start_token)


def create_end_of_file_record(start_token: str = DEFAULT_START_TOKEN) -> str:
    """Create the end of file record. Must occur once per file."""
    return f"{start_token}00000001FF\n"


def create_extended_segment_address_record(
        address: int, start_token: str = DEFAULT_START_TOKEN) -> str:
    """
    Create an Extended Segment Address record for ``address``.

    The payload is ``address >> 4``; a reader multiplies it by 16 and adds
    it to every following data record, which reaches up to 1 MB.

    Example:
        >>> create_extended_segment_address_record(0x10000)
        ':020000021000EC\\n'

    Raises:
        IHexRangeError: If ``address >> 4`` does not fit in two bytes
    """
    segment = address >> 4
    if segment < 0 or segment > 0xFFFF:
        raise IHexRangeError(f"Address {address} does not fit in two bytes!")
    return _build(RecordType.EXTENDED_SEGMENT_ADDRESS, 0,
                  struct.pack(">H", segment), start_token)


def create_extended_linear_address_record(
        address: int, start_token: str = DEFAULT_START_TOKEN) -> str:
    """
    Create an Extended Linear Address record holding the upper 16 bits of
    ``address``.

    Example:
        >>> create_extended_linear_address_record(0xFFFF0000)
        ':02000004FFFFFC\\n'
    """
    upper = (address >> 16) & 0xFFFF
    return _build(RecordType.EXTENDED_LINEAR_ADDRESS, 0,
                  struct.pack(">H", upper), start_token)


def create_start_segment_address_record(
        code_segment: int, instruction_pointer: int,
        start_token: str = DEFAULT_START_TOKEN) -> str:
    """
    Create a Start Segment Address record.

    Example:
        >>> create_start_segment_address_record(0x0000, 0x3800)
        ':0400000300003800C1\\n'
    """
    payload = struct.pack(">HH", code_segment & 0xFFFF,
                          instruction_pointer & 0xFFFF)
    return _build(RecordType.START_SEGMENT_ADDRESS, 0, payload, start_token)


def create_start_linear_address_record(
        address: int, start_token: str = DEFAULT_START_TOKEN) -> str:
    """
    Create a Start Linear Address record with the 32-bit ``address``.

    Example:
        >>> create_start_linear_address_record(0xCD)
        ':04000005000000CD2A\\n'
    """
    return _build(RecordType.START_LINEAR_ADDRESS, 0,
                  struct.pack(">I", address & 0xFFFFFFFF), start_token)


# =============================================================================
# Decoded Record
# =============================================================================

@dataclass(frozen=True)
class Record:
    """
    A single record decoded from a line of text.

    Attributes:
        record_type: The kind of record
        address: 16-bit address field
        payload: Bytes between the header and the checksum

    The kind-specific accessors (``extended_segment_address`` and friends)
    raise IHexValueError when used on a record of another kind or with a
    payload of the wrong size.
    """
    record_type: RecordType
    address: int = 0
    payload: bytes = field(default=b"")

    @classmethod
    def from_line(cls, line: str,
                  start_token: str = DEFAULT_START_TOKEN) -> "Record":
        """
        Decode one line of text.

        Everything before the start token is ignored. After it, only
        hexadecimal digits are allowed up to the end of the line.

        Args:
            line: The text line
            start_token: Record start token

        Returns:
            The decoded Record

        Raises:
            IHexValueError: If the line has no start token, is too short,
                contains invalid digits, or fails the checksum, length or
                record type checks
        """
        index = line.find(start_token)
        if index < 0:
            raise IHexValueError(
                f"Line contains no '{start_token}' - start record required!"
            )
        digits = line[index + len(start_token):].strip()
        if not _HEX_DIGITS.fullmatch(digits) or len(digits) % 2:
            raise IHexValueError(
                f"Record contains invalid hexadecimal data: '{digits}'"
            )

        data = bytes.fromhex(digits)
        if len(data) < MIN_RECORD_SIZE:
            raise IHexValueError(
                f"Line is too short! The shortest possible record is "
                f"{MIN_RECORD_SIZE} bytes - got {len(data)}"
            )
        if not validate_checksum(data):
            raise IHexValueError("Checksum is not valid!")
        if data[0] != len(data) - MIN_RECORD_SIZE:
            raise IHexValueError(
                f"Length byte is not valid! Expected: "
                f"{len(data) - MIN_RECORD_SIZE} Got: {data[0]}"
            )
        try:
            record_type = RecordType(data[3])
        except ValueError:
            raise IHexValueError(
                f"Unknown record type! Expected: [0-5] Got: {data[3]}"
            ) from None

        return cls(
            record_type=record_type,
            address=(data[1] << 8) | data[2],
            payload=bytes(data[4:-1]),
        )

    def to_line(self, start_token: str = DEFAULT_START_TOKEN) -> str:
        """Encode this record back into a text line."""
        return _build(self.record_type, self.address, self.payload,
                      start_token)

    # =========================================================================
    # Kind-specific projections
    # =========================================================================

    def _expect(self, record_type: RecordType, size: int) -> None:
        if self.record_type != record_type or len(self.payload) != size:
            raise IHexValueError(
                f"{self.record_type.get_name()} record with "
                f"{len(self.payload)} payload bytes does not contain data for "
                f"{record_type.get_name()} (required {size} bytes)"
            )

    @property
    def extended_segment_address(self) -> int:
        """Segment base address (payload * 16)."""
        self._expect(RecordType.EXTENDED_SEGMENT_ADDRESS, 2)
        return struct.unpack(">H", self.payload)[0] << 4

    @property
    def extended_linear_address(self) -> int:
        """Linear base address (payload << 16)."""
        self._expect(RecordType.EXTENDED_LINEAR_ADDRESS, 2)
        return struct.unpack(">H", self.payload)[0] << 16

    @property
    def start_segment_address(self) -> StartSegmentAddress:
        """CS:IP pair of a Start Segment Address record."""
        self._expect(RecordType.START_SEGMENT_ADDRESS, 4)
        code_segment, instruction_pointer = struct.unpack(">HH", self.payload)
        return StartSegmentAddress(code_segment, instruction_pointer)

    @property
    def start_linear_address(self) -> int:
        """32-bit address of a Start Linear Address record."""
        self._expect(RecordType.START_LINEAR_ADDRESS, 4)
        return struct.unpack(">I", self.payload)[0]
