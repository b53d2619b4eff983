"""
Memory Segment
==============

A MemorySegment is one contiguous run of bytes at a known base address,
the unit of storage of the sparse memory model.

    address          end_address (exclusive)
       |                  |
       v                  v
       [ b0 b1 b2 ... bN-1 ]

Addresses are absolute 32-bit values. The range ``[address, end_address)``
must end at or below 2^32.

Byte values are truncated to their low 8 bits on the way in, so
``segment.append(0x1FF)`` stores 0xFF.

Typed Appends
-------------
The ``append_int*``, ``append_uint*`` and ``append_float*`` helpers grow
the segment by the width of the value and write its serialized form at the
new tail. They default to little-endian byte order:

    >>> seg = MemorySegment(address=0)
    >>> seg.append_uint16(0x1234)
    >>> seg.slice()
    b'4\\x12'
"""

from enum import Enum
import struct
from typing import Iterable, Iterator, NamedTuple, Optional

from ihexkit.errors import IHexRangeError, validate_address_and_length


class Endian(Enum):
    """Byte order for the typed append helpers (struct prefixes)."""
    LITTLE = "<"
    BIG = ">"


class SegmentByte(NamedTuple):
    """One byte of a segment together with its absolute address."""
    address: int
    value: int


class MemorySegment:
    """
    An address-tagged, resizable byte buffer.

    Attributes:
        address: First valid address of the segment
        end_address: One past the last valid address
    """

    def __init__(self, address: int, length: int = 0):
        """
        Create a zero-filled segment.

        Args:
            address: Absolute start address
            length: Number of bytes

        Raises:
            IHexRangeError: If address or length is negative or the segment
                would pass the end of the 32-bit address space
        """
        validate_address_and_length(address, length)
        self._address = address
        self._data = bytearray(length)

    @classmethod
    def from_bytes(cls, address: int, data: Iterable[int]) -> "MemorySegment":
        """
        Create a segment holding ``data`` at ``address``.

        Values are truncated to 8 bits.
        """
        values = bytes(value & 0xFF for value in data)
        segment = cls(address, len(values))
        segment._data[:] = values
        return segment

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def address(self) -> int:
        return self._address

    @property
    def end_address(self) -> int:
        return self._address + len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[SegmentByte]:
        """Yield every byte with its absolute address, lowest first."""
        for offset, value in enumerate(self._data):
            yield SegmentByte(self._address + offset, value)

    def __repr__(self) -> str:
        return (f"MemorySegment(address=0x{self._address:X}, "
                f"length={len(self._data)})")

    def slice(self, start: int = 0, end: Optional[int] = None) -> bytes:
        """
        Copy of the buffer between two offsets (not addresses).

        Args:
            start: First offset
            end: One past the last offset (default: end of segment)
        """
        return bytes(self._data[start:end])

    # =========================================================================
    # Range Queries
    # =========================================================================

    def is_in_range(self, position: int, size: int) -> bool:
        """
        Check that ``size`` bytes starting at absolute ``position`` lie
        inside the segment.
        """
        return self._address <= position and position + size <= self.end_address

    def overlaps(self, other: "MemorySegment") -> bool:
        """
        Check if two segments overlap or touch.

        Adjacent segments count as overlapping since they can be combined
        without a gap.
        """
        return (self.address <= other.end_address
                and other.address <= self.end_address)

    # =========================================================================
    # Element Access
    # =========================================================================

    def _offset(self, position: int) -> int:
        if not self.is_in_range(position, 1):
            raise IHexRangeError(
                f"Address {position} is out of range "
                f"[{self._address}, {self.end_address}]"
            )
        return position - self._address

    def byte(self, position: int) -> int:
        """
        Read the byte at absolute ``position``.

        Raises:
            IHexRangeError: If the position is outside the segment
        """
        return self._data[self._offset(position)]

    def write_byte(self, position: int, value: int) -> None:
        """
        Overwrite the byte at absolute ``position``.

        Raises:
            IHexRangeError: If the position is outside the segment
        """
        self._data[self._offset(position)] = value & 0xFF

    def fill(self, value: int) -> None:
        """Overwrite every byte of the segment with ``value``."""
        self._data[:] = bytes([value & 0xFF]) * len(self._data)

    # =========================================================================
    # Resizing
    # =========================================================================

    def resize(self, new_address: int, new_length: int) -> None:
        """
        Move and/or resize the segment.

        Bytes whose address is inside both the old and the new range keep
        their value; every other byte of the new range is zero.

        Raises:
            IHexRangeError: If the new range is not valid
        """
        validate_address_and_length(new_address, new_length)
        data = bytearray(new_length)
        start = max(self._address, new_address)
        end = min(self.end_address, new_address + new_length)
        if start < end:
            data[start - new_address:end - new_address] = \
                self._data[start - self._address:end - self._address]
        self._address = new_address
        self._data = data

    def append(self, value: int) -> None:
        """Append one byte at the end."""
        self.resize(self._address, len(self._data) + 1)
        self._data[-1] = value & 0xFF

    def append_all(self, values: Iterable[int]) -> None:
        """Append several bytes at the end."""
        tail = bytes(value & 0xFF for value in values)
        old = len(self._data)
        self.resize(self._address, old + len(tail))
        self._data[old:] = tail

    def combine(self, other: "MemorySegment") -> None:
        """
        Grow this segment to cover ``other`` and copy its data in.

        The data from ``other`` overwrites this segment's data wherever the
        two overlap. Combining a segment with itself does nothing.
        """
        if other is self:
            return
        start = min(self.address, other.address)
        end = max(self.end_address, other.end_address)
        self.resize(start, end - start)
        offset = other.address - start
        self._data[offset:offset + len(other)] = other._data

    # =========================================================================
    # Typed Appends
    # =========================================================================

    def _append_packed(self, fmt: str, value, endian: Endian) -> None:
        try:
            packed = struct.pack(endian.value + fmt, value)
        except struct.error as e:
            raise IHexRangeError(
                f"Value {value} cannot be stored as '{fmt}': {e}"
            ) from e
        self.append_all(packed)

    def append_int8(self, value: int) -> None:
        self._append_packed("b", value, Endian.LITTLE)

    def append_uint8(self, value: int) -> None:
        self._append_packed("B", value, Endian.LITTLE)

    def append_int16(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("h", value, endian)

    def append_uint16(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("H", value, endian)

    def append_int32(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("i", value, endian)

    def append_uint32(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("I", value, endian)

    def append_int64(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("q", value, endian)

    def append_uint64(self, value: int, endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("Q", value, endian)

    def append_float32(self, value: float,
                       endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("f", value, endian)

    def append_float64(self, value: float,
                       endian: Endian = Endian.LITTLE) -> None:
        self._append_packed("d", value, endian)
