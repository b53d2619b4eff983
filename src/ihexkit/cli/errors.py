"""
ihextool Error Reporting
========================

Maps exceptions raised by ihextool commands to a one-line message on stderr
and a process exit status.

Exit status
-----------
- 1: the input is not valid Intel HEX, or the image cannot be written in
  the requested form (overlaps, dialect range, start address record)
- 2: bad options, a missing input file, an output file that already exists
  or a file that cannot be accessed
- 3: anything else; ``--verbose`` adds the traceback
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from ihexkit.errors import IntelHexError


class ExitCode(IntEnum):
    """Exit status of ihextool."""
    SUCCESS = 0
    FORMAT_ERROR = 1     # Bad record, checksum or address; unwritable image
    INVALID_ARGS = 2     # Bad option, missing input, existing output file
    INTERNAL_ERROR = 3   # Bug or unexpected OS failure


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report ``error`` on stderr and exit ihextool.

    ihexkit errors already name the line or address at fault, so they are
    printed as they are, behind ``error_type`` when one is given.

    Args:
        error: The exception caught by the command
        verbose: Print the traceback of unexpected errors
        error_type: Message prefix naming the command's job (e.g. "Validation")

    Raises:
        SystemExit: In every case, with the ExitCode for ``error``
    """
    if isinstance(error, IntelHexError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.FORMAT_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError,
                            FileExistsError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
