"""
Intel HEX Record Checksum
=========================

Every Intel HEX record ends with a one byte checksum computed over all
preceding bytes of the record (byte count, address, type and payload).

Algorithm
---------
- Sum the low 8 bits of every byte
- Take the two's complement of the sum
- Keep the low 8 bits

A record is valid when the low byte of the sum of *all* its bytes,
checksum included, is zero.

Example
-------
    Record  ":0300300002337A1E"
    Bytes   03 00 30 00 02 33 7A
    Sum     0xE2
    Check   (-0xE2) & 0xFF = 0x1E

Reference
---------
- Intel Hexadecimal Object File Format Specification, Rev. A (1988)
"""

from typing import Iterable


def _sum_lsb(data: Iterable[int]) -> int:
    """Sum the low byte of every value, truncated to 8 bits."""
    total = 0
    for value in data:
        total += value & 0xFF
    return total & 0xFF


def compute_checksum(data: Iterable[int]) -> int:
    """
    Compute the Intel HEX checksum for ``data``.

    Args:
        data: Record bytes without the trailing checksum

    Returns:
        Checksum byte (0x00 - 0xFF)

    Example:
        >>> compute_checksum([0x03, 0x00, 0x30, 0x00, 0x02, 0x33, 0x7A])
        30
    """
    return (-_sum_lsb(data)) & 0xFF


def validate_checksum(data: Iterable[int]) -> bool:
    """
    Validate the bytes of a complete record.

    Args:
        data: Record bytes including the trailing checksum

    Returns:
        True if the low byte of the sum of all bytes is zero
    """
    return _sum_lsb(data) == 0


def append_checksum(data: Iterable[int]) -> bytes:
    """
    Return ``data`` with its checksum appended.

    Values are truncated to their low 8 bits.
    """
    body = bytes(value & 0xFF for value in data)
    return body + bytes([compute_checksum(body)])
