"""
Record Codec Unit Tests
=======================

Tests for the record encoders and for Record.from_line.

Test Categories
---------------
1. RecordType: identifiers and names
2. Encoders: byte-exact output of every create_* function
3. Encoder errors: addresses and payloads that do not fit
4. Decoder: Record.from_line and its error cases
5. Projections: kind-specific accessors
"""

import pytest

from ihexkit.errors import IHexRangeError, IHexValueError
from ihexkit.ihex.records import (
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


# =============================================================================
# RecordType Tests
# =============================================================================

class TestRecordType:
    """Tests for the RecordType enumeration."""

    def test_values(self):
        assert RecordType.DATA == 0x00
        assert RecordType.END_OF_FILE == 0x01
        assert RecordType.EXTENDED_SEGMENT_ADDRESS == 0x02
        assert RecordType.START_SEGMENT_ADDRESS == 0x03
        assert RecordType.EXTENDED_LINEAR_ADDRESS == 0x04
        assert RecordType.START_LINEAR_ADDRESS == 0x05

    def test_get_name(self):
        assert RecordType.DATA.get_name() == "Data"
        assert RecordType.START_LINEAR_ADDRESS.get_name() == "Start Linear Address"


# =============================================================================
# Encoder Tests
# =============================================================================

class TestEncoders:
    """Byte-exact encoder output."""

    def test_data_record(self):
        assert create_data_record(0x0030, [0x02, 0x33, 0x7A]) == ":0300300002337A1E\n"

    def test_data_record_empty_payload(self):
        assert create_data_record(0, []) == ":0000000000\n"

    def test_data_record_truncates_values(self):
        assert create_data_record(0x0030, [0x102, 0x233, 0x37A]) == ":0300300002337A1E\n"

    def test_extended_segment_address(self):
        assert create_extended_segment_address_record(16 * 0x1200) == ":020000021200EA\n"

    def test_extended_segment_address_64k(self):
        assert create_extended_segment_address_record(0x10000) == ":020000021000EC\n"

    def test_extended_linear_address(self):
        assert create_extended_linear_address_record(0xFFFF0000) == ":02000004FFFFFC\n"

    def test_start_linear_address(self):
        assert create_start_linear_address_record(0xCD) == ":04000005000000CD2A\n"

    def test_start_segment_address(self):
        assert create_start_segment_address_record(0x0000, 0x3800) == ":0400000300003800C1\n"

    def test_end_of_file(self):
        assert create_end_of_file_record() == ":00000001FF\n"

    def test_custom_start_token(self):
        assert create_end_of_file_record(start_token="$") == "$00000001FF\n"
        assert create_data_record(0x30, [2, 0x33, 0x7A], start_token="#") == "#0300300002337A1E\n"


class TestEncoderErrors:
    """Values that cannot be encoded raise IHexRangeError."""

    def test_data_address_too_large(self):
        with pytest.raises(IHexRangeError):
            create_data_record(0x10030, bytes(3))

    def test_data_address_negative(self):
        with pytest.raises(IHexRangeError):
            create_data_record(-1, bytes(3))

    def test_data_too_long(self):
        with pytest.raises(IHexRangeError):
            create_data_record(0x0030, bytes(256))

    def test_data_max_length(self):
        line = create_data_record(0, bytes(255))
        assert line.startswith(":FF000000")

    def test_extended_segment_address_too_large(self):
        with pytest.raises(IHexRangeError):
            create_extended_segment_address_record(16 * 0x10000)


# =============================================================================
# Decoder Tests
# =============================================================================

class TestFromLine:
    """Tests for Record.from_line."""

    def test_data_record(self):
        record = Record.from_line(":0300300002337A1E")
        assert record.record_type == RecordType.DATA
        assert record.address == 0x0030
        assert record.payload == bytes([0x02, 0x33, 0x7A])

    def test_lowercase_digits(self):
        record = Record.from_line(":0300300002337a1e")
        assert record.payload == bytes([0x02, 0x33, 0x7A])

    def test_text_before_token_ignored(self):
        record = Record.from_line("garbage :00000001FF")
        assert record.record_type == RecordType.END_OF_FILE

    def test_trailing_whitespace_ignored(self):
        record = Record.from_line(":00000001FF\r\n")
        assert record.record_type == RecordType.END_OF_FILE

    def test_custom_token(self):
        record = Record.from_line("$00000001FF", start_token="$")
        assert record.record_type == RecordType.END_OF_FILE

    def test_to_line(self):
        line = ":10012000194E79234623965778239EDA3F01B2CAA7\n"
        assert Record.from_line(line).to_line() == line

    def test_no_start_token(self):
        with pytest.raises(IHexValueError):
            Record.from_line("text")

    def test_invalid_hex(self):
        with pytest.raises(IHexValueError, match="invalid hexadecimal"):
            Record.from_line(":ZZ000001FF")

    def test_odd_number_of_digits(self):
        with pytest.raises(IHexValueError):
            Record.from_line(":00000001F")

    def test_too_short(self):
        with pytest.raises(IHexValueError, match="too short"):
            Record.from_line(":100130")

    def test_bad_checksum(self):
        with pytest.raises(IHexValueError, match="Checksum"):
            Record.from_line(":100130003F0256702B5E712B722B732146013421C7")

    def test_bad_length_byte(self):
        with pytest.raises(IHexValueError, match="Length byte"):
            Record.from_line(":200130003F0156702B5E712B722B732146013421B7")

    def test_unknown_record_type(self):
        with pytest.raises(IHexValueError, match="Unknown record type"):
            Record.from_line(":100130063F0156702B5E712B722B732146013421C1")

    def test_errors_are_value_errors(self):
        """Callers that only know the builtin hierarchy can catch them."""
        with pytest.raises(ValueError):
            Record.from_line("no token here")


# =============================================================================
# Projection Tests
# =============================================================================

class TestProjections:
    """Kind-specific accessors."""

    def test_extended_segment_address(self):
        record = Record.from_line(":020000021000EC")
        assert record.extended_segment_address == 0x10000

    def test_extended_linear_address(self):
        record = Record.from_line(":02000004FFFFFC")
        assert record.extended_linear_address == 0xFFFF0000

    def test_start_segment_address(self):
        record = Record.from_line(":0400000300003800C1")
        assert record.start_segment_address == StartSegmentAddress(0x0000, 0x3800)

    def test_start_linear_address(self):
        record = Record.from_line(":04000005000000CD2A")
        assert record.start_linear_address == 0xCD

    def test_four_byte_accessor_on_empty_payload(self):
        with pytest.raises(IHexValueError):
            Record.from_line(":00000001FF\n").start_linear_address

    def test_two_byte_accessor_on_empty_payload(self):
        with pytest.raises(IHexValueError):
            Record.from_line(":00000001FF\n").extended_linear_address

    def test_wrong_kind(self):
        record = Record.from_line(":020000021000EC")
        with pytest.raises(IHexValueError):
            record.extended_linear_address
