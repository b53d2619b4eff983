"""
Intel HEX File Model
====================

IntelHexFile is the main entry point of the package. It holds the memory
image of one Intel HEX file (a MemorySegmentContainer), the optional start
addresses, and the options used to read and write it.

Usage Examples
--------------
Reading a file:
    >>> hex_file = IntelHexFile.from_string(text)
    >>> for segment in hex_file.segments:
    ...     print(f"{segment.address:#x}..{segment.end_address:#x}")

Building a file from binary data:
    >>> hex_file = IntelHexFile.from_data(firmware, address=0x08000000)
    >>> text = hex_file.to_string()

Re-serializing with other options:
    >>> text = hex_file.to_string(dialect=Dialect.SEGMENTED, line_length=32)

File extensions commonly used for Intel HEX (advisory only):
    .hex .h86 .hxl .hxh .obl .obh .mcs .ihex .ihe .ihx .a43 .a90
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from ihexkit.config import HexConfig
from ihexkit.errors import IHexRangeError
from ihexkit.ihex.dialects import Dialect
from ihexkit.ihex.parser import parse_hex
from ihexkit.ihex.records import StartSegmentAddress
from ihexkit.ihex.writer import HexWriter, start_record_types
from ihexkit.memory.container import MemorySegmentContainer
from ihexkit.memory.segment import MemorySegment

logger = logging.getLogger(__name__)


FILE_EXTENSIONS = (
    ".hex", ".h86", ".hxl", ".hxh", ".obl", ".obh",
    ".mcs", ".ihex", ".ihe", ".ihx", ".a43", ".a90",
)


class IntelHexFile:
    """
    Memory image of an Intel HEX file.

    Attributes:
        start_segment_address: CS:IP execution start (Start Segment Address
            record), or None
        start_linear_address: 32-bit execution start (Start Linear Address
            record), or None
        config: Options used when reading and, by default, when writing
    """

    def __init__(self, address: Optional[int] = None,
                 length: Optional[int] = None,
                 config: Optional[HexConfig] = None):
        """
        Create a file, optionally with one zero-filled segment.

        The segment is only created when ``address`` >= 0 and ``length`` > 0.
        """
        self.config = config or HexConfig()
        self.start_segment_address: Optional[StartSegmentAddress] = None
        self.start_linear_address: Optional[int] = None
        self._container = MemorySegmentContainer()
        if address is not None and length is not None \
                and address >= 0 and length > 0:
            self.add_segment(MemorySegment(address, length))

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_data(cls, data: Iterable[int], address: int = 0,
                  config: Optional[HexConfig] = None) -> "IntelHexFile":
        """
        Create a file with a single segment holding ``data``.

        Values are truncated to 8 bits.
        """
        hex_file = cls(config=config)
        hex_file.add_all(address, data)
        return hex_file

    @classmethod
    def from_string(cls, text: str,
                    config: Optional[HexConfig] = None,
                    start_token: Optional[str] = None,
                    allow_duplicate_addresses: Optional[bool] = None
                    ) -> "IntelHexFile":
        """
        Parse Intel HEX text.

        Lines without the start token are ignored, as is everything before
        the start token on a line. After it, only hexadecimal digits may
        follow.

        Args:
            text: Complete file contents
            config: Options (default: HexConfig())
            start_token: Overrides ``config.start_token``
            allow_duplicate_addresses: Overrides the config option

        Returns:
            The parsed file. Its config keeps the start token, so writing it
            back uses the same token.

        Raises:
            IHexParseError: For a bad checksum, an unknown record type, a
                wrong length byte, invalid hex digits, a repeated start
                address record, or data at an address that was already
                filled (unless duplicates are allowed)
        """
        config = (config or HexConfig()).replace(
            start_token=start_token,
            allow_duplicate_addresses=allow_duplicate_addresses,
        )
        hex_file = cls(config=config)
        state = parse_hex(
            text,
            hex_file._container,
            start_token=config.start_token,
            allow_duplicate_addresses=config.allow_duplicate_addresses,
        )
        hex_file.start_segment_address = state.start_segment_address
        hex_file.start_linear_address = state.start_linear_address
        logger.debug(f"Parsed {len(hex_file.segments)} segment(s), "
                     f"end address {hex_file.max_address:#x}")
        return hex_file

    @classmethod
    def from_file(cls, filepath: Union[str, Path],
                  config: Optional[HexConfig] = None) -> "IntelHexFile":
        """
        Read and parse an Intel HEX file from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            IHexParseError: If the contents are not valid
        """
        return cls.from_string(Path(filepath).read_text(), config=config)

    # =========================================================================
    # Contents
    # =========================================================================

    @property
    def segments(self) -> list[MemorySegment]:
        """All segments, sorted by address."""
        return self._container.segments

    @property
    def container(self) -> MemorySegmentContainer:
        return self._container

    @property
    def max_address(self) -> int:
        """End address of the highest segment, or 0 for an empty file."""
        return self._container.max_address

    @property
    def dialect(self) -> Optional[Dialect]:
        """
        The smallest dialect that can represent the file, including its
        start address record.

        None if both start addresses are set, since no dialect has both
        record kinds.
        """
        return Dialect.smallest(
            self.max_address,
            start_record_types(self.start_segment_address,
                               self.start_linear_address),
        )

    def add_all(self, address: int, data: Iterable[int]) -> None:
        """
        Store ``data`` at ``address``, overwriting data stored before at
        the same addresses.
        """
        self._container.add_all(address, data)

    def add_segment(self, segment: MemorySegment) -> None:
        """Add ``segment``, overwriting data stored before at its addresses."""
        self._container.add_segment(segment)

    @staticmethod
    def file_extensions() -> list[str]:
        """Return the file extensions commonly used for Intel HEX files."""
        return list(FILE_EXTENSIONS)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_string(self, dialect: Optional[Dialect] = None,
                  line_length: Optional[int] = None,
                  start_token: Optional[str] = None,
                  allow_duplicate_addresses: Optional[bool] = None) -> str:
        """
        Serialize to Intel HEX text.

        Arguments left as None fall back to ``self.config``; a dialect that
        is still None is inferred from ``max_address`` and the start
        address that is set.

        Raises:
            IHexRangeError: If segments overlap (unless duplicates are
                allowed), the data does not fit the dialect, the dialect has
                no record for the start address, or both start addresses
                are set
            IHexValueError: If the line length is not in 1..255
        """
        config = self.config.replace(
            dialect=dialect,
            line_length=line_length,
            start_token=start_token,
            allow_duplicate_addresses=allow_duplicate_addresses,
        )

        self._container.sort_segments()
        if not config.allow_duplicate_addresses \
                and not self._container.validate_segments_are_unique():
            raise IHexRangeError(
                "The file contains overlapping segments! Merge them or "
                "allow duplicate addresses."
            )

        writer = HexWriter(
            dialect=config.dialect,
            line_length=config.line_length,
            start_token=config.start_token,
        )
        return writer.build(
            self.segments,
            start_segment_address=self.start_segment_address,
            start_linear_address=self.start_linear_address,
        )

    def to_file(self, filepath: Union[str, Path], **options) -> int:
        """
        Write the file to disk.

        Args:
            filepath: Output path
            **options: Passed to to_string()

        Returns:
            Number of characters written
        """
        return Path(filepath).write_text(self.to_string(**options))

    def to_binary(self, fill: int = 0x00, start: int = 0) -> bytes:
        """
        Flatten the image to bytes covering ``start`` to ``max_address``.

        Gaps between segments are filled with ``fill``; data below
        ``start`` is left out.
        """
        image = bytearray([fill & 0xFF]) * max(0, self.max_address - start)
        for segment in self.segments:
            if segment.end_address <= start:
                continue
            skip = max(0, start - segment.address)
            offset = segment.address + skip - start
            image[offset:offset + len(segment) - skip] = segment.slice(skip)
        return bytes(image)

    def __str__(self) -> str:
        """Segments and their address ranges as a JSON-like summary."""
        if not self.segments:
            return '"Intel HEX" : { "segments": [] }'
        ranges = ",\n".join(
            f'{{"start": {segment.address},"end": {segment.end_address}}}'
            for segment in self.segments
        )
        return f'"Intel HEX" : {{ "segments": [ {ranges}] }}'
