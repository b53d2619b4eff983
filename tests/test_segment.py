"""
MemorySegment Unit Tests
========================

Test Categories
---------------
1. Construction and properties
2. Element access and range checks
3. Resizing (the four overlap cases)
4. Appending and combining
5. Typed appends
"""

import pytest

from ihexkit.errors import IHexRangeError
from ihexkit.memory import Endian, MemorySegment, SegmentByte


# =============================================================================
# Construction Tests
# =============================================================================

class TestConstruction:
    """Creating segments."""

    def test_empty_segment(self):
        segment = MemorySegment(address=0x42)
        assert segment.address == 0x42
        assert len(segment) == 0
        assert segment.end_address == 0x42

    def test_zero_filled(self):
        segment = MemorySegment(address=0x42, length=32)
        assert len(segment) == 0x20
        assert segment.slice() == bytes(32)

    def test_from_bytes(self):
        segment = MemorySegment.from_bytes(0x10, [1, 2, 3, 4, 5, 6])
        assert segment.address == 0x10
        assert len(segment) == 6
        assert segment.end_address == 0x16

    def test_from_bytes_truncates(self):
        segment = MemorySegment.from_bytes(0, [0x1FF, 0x100])
        assert segment.slice() == bytes([0xFF, 0x00])

    def test_iterate(self):
        segment = MemorySegment.from_bytes(0x10, [1, 2, 3, 4, 5, 6])
        items = list(segment)
        assert items[0] == SegmentByte(0x10, 1)
        assert [b.address for b in items] == list(range(0x10, 0x16))
        assert [b.value for b in items] == [1, 2, 3, 4, 5, 6]

    def test_negative_address(self):
        with pytest.raises(IHexRangeError):
            MemorySegment(address=-1)

    def test_end_of_address_space(self):
        segment = MemorySegment(address=0xFFFFFFF0, length=16)
        assert segment.end_address == 0x100000000

    def test_past_end_of_address_space(self):
        with pytest.raises(IHexRangeError):
            MemorySegment(address=0xFFFFFFFF, length=2)

    def test_repr(self):
        assert repr(MemorySegment(0x120, 4)) == "MemorySegment(address=0x120, length=4)"


# =============================================================================
# Element Access Tests
# =============================================================================

class TestElementAccess:
    """byte(), write_byte(), is_in_range(), fill()."""

    def test_is_in_range(self):
        segment = MemorySegment(address=0x42, length=32)
        assert segment.is_in_range(0x41, 1) is False
        assert segment.is_in_range(0x42, 1) is True
        assert segment.is_in_range(0x42, 32) is True
        assert segment.is_in_range(0x42 + 31, 1) is True
        assert segment.is_in_range(0x42 + 32, 1) is False

    def test_byte_out_of_range(self):
        segment = MemorySegment(address=0x42, length=32)
        with pytest.raises(IHexRangeError):
            segment.byte(0xFF)

    def test_write_byte_out_of_range(self):
        segment = MemorySegment(address=0x42, length=32)
        with pytest.raises(IHexRangeError):
            segment.write_byte(0xFF, 42)

    def test_write_and_read(self):
        segment = MemorySegment(address=0x42, length=4)
        segment.write_byte(0x43, 0x1AB)
        assert segment.byte(0x43) == 0xAB
        assert segment.slice() == bytes([0, 0xAB, 0, 0])

    def test_fill(self):
        segment = MemorySegment(address=0, length=32)
        segment.fill(25)
        assert all(b.value == 25 for b in segment)

    def test_slice_offsets(self):
        segment = MemorySegment.from_bytes(0x100, range(8))
        assert segment.slice(2, 5) == bytes([2, 3, 4])
        assert segment.slice(6) == bytes([6, 7])


# =============================================================================
# Resize Tests
# =============================================================================

class TestResize:
    """The overlap between the old and new range is kept, the rest is zero."""

    @pytest.fixture
    def segment(self) -> MemorySegment:
        return MemorySegment.from_bytes(0x10, [1, 2, 3, 4])

    def test_grow_at_end(self, segment: MemorySegment):
        segment.resize(0x10, 6)
        assert segment.address == 0x10
        assert segment.slice() == bytes([1, 2, 3, 4, 0, 0])

    def test_grow_at_start(self, segment: MemorySegment):
        segment.resize(0x0E, 6)
        assert segment.address == 0x0E
        assert segment.slice() == bytes([0, 0, 1, 2, 3, 4])

    def test_shrink_into_middle(self, segment: MemorySegment):
        segment.resize(0x11, 2)
        assert segment.address == 0x11
        assert segment.slice() == bytes([2, 3])

    def test_move_without_overlap(self, segment: MemorySegment):
        segment.resize(0x100, 4)
        assert segment.address == 0x100
        assert segment.slice() == bytes(4)

    def test_partial_overlap_low_side(self, segment: MemorySegment):
        segment.resize(0x0E, 4)
        assert segment.slice() == bytes([0, 0, 1, 2])

    def test_invalid_range(self, segment: MemorySegment):
        with pytest.raises(IHexRangeError):
            segment.resize(0xFFFFFFFF, 2)
        assert segment.slice() == bytes([1, 2, 3, 4])


# =============================================================================
# Append and Combine Tests
# =============================================================================

class TestAppend:
    """append() and append_all()."""

    def test_append_byte(self):
        segment = MemorySegment(address=0x42)
        segment.append(25)
        assert segment.address == 0x42
        assert len(segment) == 1
        assert segment.byte(0x42) == 25
        segment.append(26)
        assert len(segment) == 2
        assert segment.byte(0x42) == 25
        assert segment.byte(0x43) == 26

    def test_append_all(self):
        segment = MemorySegment(address=0x10)
        segment.append_all([1, 2, 3, 4, 5, 6])
        assert len(segment) == 6
        segment.append_all([7, 8, 9])
        assert segment.address == 0x10
        assert segment.slice() == bytes(range(1, 10))


class TestOverlaps:
    """overlaps() treats touching segments as overlapping."""

    @pytest.fixture
    def segments(self) -> list[MemorySegment]:
        return [
            MemorySegment(address=0, length=32),
            MemorySegment(address=16, length=32),
            MemorySegment(address=32, length=32),
            MemorySegment(address=64, length=32),
        ]

    def test_overlap_matrix(self, segments: list[MemorySegment]):
        expected = [
            [True, True, True, False],
            [True, True, True, False],
            [True, True, True, True],
            [False, False, True, True],
        ]
        for i, first in enumerate(segments):
            for k, second in enumerate(segments):
                assert first.overlaps(second) is expected[i][k], (i, k)


class TestCombine:
    """combine(): the argument's data wins."""

    @pytest.fixture
    def filled(self) -> tuple[MemorySegment, MemorySegment, MemorySegment]:
        segment1 = MemorySegment(address=0, length=32)
        segment2 = MemorySegment(address=16, length=32)
        segment3 = MemorySegment(address=32, length=32)
        segment1.fill(25)
        segment2.fill(26)
        segment3.fill(27)
        return segment1, segment2, segment3

    def test_combine_with_self(self, filled):
        _, segment2, _ = filled
        segment2.combine(segment2)
        assert segment2.address == 16
        assert segment2.end_address == 48
        assert all(b.value == 26 for b in segment2)

    def test_combine_sequence(self, filled):
        """[0,32)=25, [16,48)=26, [32,64)=27 folded into the middle one."""
        segment1, segment2, segment3 = filled

        segment2.combine(segment1)
        assert segment2.address == 0
        assert segment2.end_address == 48
        for b in segment2:
            assert b.value == (25 if b.address < 32 else 26)

        segment2.combine(segment3)
        assert segment2.address == 0
        assert len(segment2) == 64
        assert segment2.byte(31) == 25
        assert segment2.byte(32) == 27
        for b in segment2:
            assert b.value == (25 if b.address < 32 else 27)

    def test_combine_disjoint(self, filled):
        segment1, _, _ = filled
        far = MemorySegment.from_bytes(40, [9])
        segment1.combine(far)
        assert segment1.end_address == 41
        assert segment1.byte(35) == 0
        assert segment1.byte(40) == 9


# =============================================================================
# Typed Append Tests
# =============================================================================

class TestTypedAppends:
    """append_int*/uint*/float* helpers."""

    @pytest.fixture
    def segment(self) -> MemorySegment:
        return MemorySegment(address=0)

    def test_uint8(self, segment: MemorySegment):
        segment.append_uint8(0x42)
        assert segment.slice() == bytes([0x42])

    def test_int8_negative(self, segment: MemorySegment):
        segment.append_int8(-1)
        assert segment.slice() == bytes([0xFF])

    def test_uint16(self, segment: MemorySegment):
        segment.append_uint16(0x1234)
        assert segment.slice() == bytes([0x34, 0x12])

    def test_int16(self, segment: MemorySegment):
        segment.append_int16(0x1234)
        assert segment.slice() == bytes([0x34, 0x12])

    def test_uint32(self, segment: MemorySegment):
        segment.append_uint32(0x12345678)
        assert segment.slice() == bytes([0x78, 0x56, 0x34, 0x12])

    def test_int32_big_endian(self, segment: MemorySegment):
        segment.append_int32(0x12345678, Endian.BIG)
        assert segment.slice() == bytes([0x12, 0x34, 0x56, 0x78])

    def test_uint64(self, segment: MemorySegment):
        segment.append_uint64(0x1122334455667788)
        assert segment.slice() == bytes([0x88, 0x77, 0x66, 0x55,
                                         0x44, 0x33, 0x22, 0x11])

    def test_int64(self, segment: MemorySegment):
        segment.append_int64(0x1122334455667788)
        assert len(segment) == 8
        assert segment.byte(0) == 0x88
        assert segment.byte(7) == 0x11

    def test_float32(self, segment: MemorySegment):
        segment.append_float32(3.04)
        assert segment.slice() == bytes([92, 143, 66, 64])

    def test_float64(self, segment: MemorySegment):
        segment.append_float64(3.04)
        assert segment.slice() == bytes([82, 184, 30, 133, 235, 81, 8, 64])

    def test_appends_accumulate(self, segment: MemorySegment):
        segment.append_uint8(1)
        segment.append_uint16(0x0302)
        assert segment.slice() == bytes([1, 2, 3])

    def test_value_out_of_range(self, segment: MemorySegment):
        with pytest.raises(IHexRangeError):
            segment.append_uint8(256)
        assert len(segment) == 0
