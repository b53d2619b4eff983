"""
ihexkit - Intel HEX Reader and Writer
=====================================

This package converts between Intel HEX text, the line-oriented record
format used to program microcontroller memories, and an in-memory sparse
memory image made of disjoint, address-ordered byte ranges.

Main Components
---------------
- **IntelHexFile**: parse and serialize complete files
- **memory**: MemorySegment and MemorySegmentContainer, the sparse image
- **ihex**: record codec, checksum, dialects, parser and writer
- **config**: HexConfig options (start token, line length, dialect, ...)
- **cli**: the ``ihextool`` command-line program

Quick Start
-----------
Parse a file:
    >>> from ihexkit import IntelHexFile
    >>> hex_file = IntelHexFile.from_file("firmware.hex")
    >>> print(hex_file.max_address)

Create a file from binary data:
    >>> hex_file = IntelHexFile.from_data(b"\\x01\\x02\\x03", address=0x100)
    >>> hex_file.to_string()
    ':03010000010203F6\\n:00000001FF\\n'

Or use the command-line tool:
    $ ihextool info firmware.hex
    $ ihextool to-bin firmware.hex -o firmware.bin

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from ihexkit.errors import (
    IntelHexError,
    IHexValueError,
    IHexParseError,
    IHexRangeError,
)
from ihexkit.config import HexConfig
from ihexkit.memory import (
    Endian,
    MemorySegment,
    MemorySegmentContainer,
    SegmentByte,
)
from ihexkit.ihex import (
    Dialect,
    HexWriter,
    Record,
    RecordType,
    StartSegmentAddress,
    compute_checksum,
    validate_checksum,
)
from ihexkit.hexfile import FILE_EXTENSIONS, IntelHexFile

__all__ = [
    "__version__",
    # File model
    "IntelHexFile",
    "FILE_EXTENSIONS",
    # Configuration
    "HexConfig",
    # Memory model
    "Endian",
    "MemorySegment",
    "MemorySegmentContainer",
    "SegmentByte",
    # Record format
    "Dialect",
    "HexWriter",
    "Record",
    "RecordType",
    "StartSegmentAddress",
    "compute_checksum",
    "validate_checksum",
    # Exception hierarchy
    "IntelHexError",
    "IHexValueError",
    "IHexParseError",
    "IHexRangeError",
]
