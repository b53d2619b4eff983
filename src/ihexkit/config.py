"""
ihexkit Configuration
=====================

Options that control how Intel HEX text is read and written. They can come
from:
- Default values (defined here)
- Keyword arguments
- Environment variables (``HexConfig.from_env``)

Options
-------
- start_token: Record delimiter, used for reading and writing (default ":")
- allow_duplicate_addresses: Skip the unique address checks on parse and
  serialize (default False)
- line_length: Data bytes per emitted data record, 1-255 (default 16)
- dialect: Serialization dialect; inferred from the data when None
"""

from dataclasses import dataclass, fields, replace
import logging
import os
from typing import Optional

from ihexkit.errors import IHexValueError, validate_line_length
from ihexkit.ihex.dialects import Dialect
from ihexkit.ihex.records import DEFAULT_START_TOKEN

logger = logging.getLogger(__name__)

DEFAULT_LINE_LENGTH = 16

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class HexConfig:
    """
    Reading and writing options.

    Attributes:
        start_token: Record start token (non-empty)
        allow_duplicate_addresses: Allow overlapping data
        line_length: Data bytes per record (1-255)
        dialect: Output dialect, or None to pick the smallest that fits
    """
    start_token: str = DEFAULT_START_TOKEN
    allow_duplicate_addresses: bool = False
    line_length: int = DEFAULT_LINE_LENGTH
    dialect: Optional[Dialect] = None

    def __post_init__(self) -> None:
        if not self.start_token:
            raise IHexValueError("The start token must not be empty!")
        validate_line_length(self.line_length)

    def replace(self, **overrides) -> "HexConfig":
        """
        Return a copy with every override that is not None applied.

        Raises:
            IHexValueError: If an override is invalid
        """
        changes = {key: value for key, value in overrides.items()
                   if value is not None}
        return replace(self, **changes)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls) -> "HexConfig":
        """
        Create a HexConfig from environment variables.

        Environment variables (all optional):
            IHEX_START_TOKEN: Record start token
            IHEX_LINE_LENGTH: Data bytes per record (integer)
            IHEX_DIALECT: i8hex, i16hex, i32hex (or narrow, segmented, linear)
            IHEX_ALLOW_DUPLICATES: 1/true/yes to allow overlapping data

        Unusable values are logged and the default is kept.
        """
        values = {}

        if token := os.environ.get("IHEX_START_TOKEN"):
            values["start_token"] = token

        if line_length := os.environ.get("IHEX_LINE_LENGTH"):
            try:
                values["line_length"] = validate_line_length(int(line_length))
            except (ValueError, IHexValueError):
                logger.warning(f"Ignoring IHEX_LINE_LENGTH={line_length!r}")

        if name := os.environ.get("IHEX_DIALECT"):
            dialect = Dialect.from_name(name)
            if dialect is None:
                logger.warning(f"Ignoring unknown IHEX_DIALECT={name!r}")
            else:
                values["dialect"] = dialect

        if flag := os.environ.get("IHEX_ALLOW_DUPLICATES"):
            values["allow_duplicate_addresses"] = flag.lower() in _TRUE_VALUES

        return cls(**values)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (dialect as its value string)."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.dialect is not None:
            result["dialect"] = self.dialect.value
        return result
