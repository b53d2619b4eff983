"""
Intel HEX Record Format
=======================

This subpackage implements the Intel HEX wire format: record encoding and
decoding, the record checksum, the three addressing dialects, and the
conversion between record text and memory segments.

This module provides:
- **Checksum utilities**: compute, validate and append record checksums
- **Record codec**: ``create_*_record`` encoders and ``Record.from_line``
- **Dialect**: NARROW (I8HEX), SEGMENTED (I16HEX), LINEAR (I32HEX)
- **parse_hex**: text to segments, driven by AddressingState
- **HexWriter**: segments to text

Most users want ihexkit.IntelHexFile instead, which combines these pieces.

Reference
---------
- Intel Hexadecimal Object File Format Specification, Rev. A (1988)
"""

from ihexkit.ihex.checksum import (
    append_checksum,
    compute_checksum,
    validate_checksum,
)
from ihexkit.ihex.records import (
    DEFAULT_START_TOKEN,
    Record,
    RecordType,
    StartSegmentAddress,
    create_data_record,
    create_end_of_file_record,
    create_extended_linear_address_record,
    create_extended_segment_address_record,
    create_start_linear_address_record,
    create_start_segment_address_record,
)
from ihexkit.ihex.dialects import Dialect
from ihexkit.ihex.parser import AddressingState, iter_records, parse_hex
from ihexkit.ihex.writer import HexWriter

__all__ = [
    # Checksum
    "append_checksum",
    "compute_checksum",
    "validate_checksum",
    # Records
    "DEFAULT_START_TOKEN",
    "Record",
    "RecordType",
    "StartSegmentAddress",
    "create_data_record",
    "create_end_of_file_record",
    "create_extended_linear_address_record",
    "create_extended_segment_address_record",
    "create_start_linear_address_record",
    "create_start_segment_address_record",
    # Dialects
    "Dialect",
    # Parser
    "AddressingState",
    "iter_records",
    "parse_hex",
    # Writer
    "HexWriter",
]
