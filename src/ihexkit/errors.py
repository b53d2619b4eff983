"""
ihexkit Error Hierarchy
=======================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from IntelHexError, allowing callers to catch every
ihexkit error with a single except clause if desired.

Exception Hierarchy
-------------------
IntelHexError (base)
├── IHexValueError - structurally invalid record or file
│   └── IHexParseError - decode failure, annotated with the line number
└── IHexRangeError - value too large for the target representation

Value Errors
------------
Raised when the input is malformed:
- bad checksum, bad length byte, unknown record type
- characters after the start token that are not hexadecimal digits
- a record shorter than 5 bytes or a line without a start token
- a start address record that occurs more than once
- a kind-specific accessor used on the wrong record kind
- an invalid line length (outside 1-255)

Range Errors
------------
Raised when a value does not fit:
- address + length passing 2^32
- an address beyond what a dialect can express
- more than 255 bytes of payload in one record
- overlapping address ranges when unique addresses are required

Both kinds are terminal. A failed parse or serialize returns nothing.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class IntelHexError(Exception):
    """
    Base exception for all ihexkit errors.

    The message is kept in ``cause`` and the string form is prefixed with
    the concrete class name:

        >>> str(IHexRangeError("text"))
        'IHexRangeError: text'
    """

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(cause)

    def __str__(self) -> str:
        return f"{type(self).__name__}: {self.cause}"


# =============================================================================
# Value Errors
# =============================================================================

class IHexValueError(IntelHexError, ValueError):
    """
    Structurally invalid record or file.

    Also a ValueError, so code that only knows the builtin hierarchy can
    still catch it.
    """
    pass


class IHexParseError(IHexValueError):
    """
    Failure while decoding a text buffer.

    Wraps whatever went wrong on a line (a bad record, a duplicate start
    address, overlapping data) and records where it happened.

    Attributes:
        line_number: 1-based line number of the offending record
        inner: The original exception raised while handling the line
    """

    def __init__(self, line_number: int, inner: Exception):
        self.line_number = line_number
        self.inner = inner
        super().__init__(f"Parsing error on line {line_number} : {inner}")


# =============================================================================
# Range Errors
# =============================================================================

class IHexRangeError(IntelHexError):
    """Value whose magnitude exceeds what the target representation can hold."""
    pass


# =============================================================================
# Validation Helpers
# =============================================================================

ADDRESS_SPACE = 1 << 32


def validate_address_and_length(address: int, length: int) -> None:
    """
    Check that ``[address, address + length)`` lies inside the 32-bit space.

    Args:
        address: Start address
        length: Number of bytes

    Raises:
        IHexRangeError: If either value is negative or the range passes 2^32
    """
    if address < 0 or length < 0 or address + length > ADDRESS_SPACE:
        raise IHexRangeError(
            f"Address and length must be positive and end at or below 2^32! "
            f"Got address {address} + length {length}"
        )


def validate_line_length(line_length: Optional[int]) -> int:
    """
    Check the number of data bytes per emitted record.

    Returns:
        The validated line length

    Raises:
        IHexValueError: If the value is not in 1..255
    """
    if line_length is None or not 1 <= line_length <= 255:
        raise IHexValueError(
            f"Line length must be in range [1, 255]! Got {line_length}"
        )
    return line_length
