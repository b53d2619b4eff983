"""
ihextool - Intel HEX Command-Line Interface
===========================================

This module implements the command-line interface for ihexkit. It provides
tools for inspecting, validating and converting Intel HEX files.

Commands
--------
- **info**: Show segments, dialect and start addresses of a file
- **validate**: Check a file for errors
- **to-bin**: Convert an Intel HEX file to a flat binary image
- **from-bin**: Convert a binary file to Intel HEX
- **convert**: Re-write an Intel HEX file with other options

Usage Examples
--------------
Inspect a file:
    $ ihextool info firmware.hex

Check a file for errors:
    $ ihextool validate firmware.hex

Convert to binary, filling gaps with 0xFF:
    $ ihextool to-bin firmware.hex -o firmware.bin --fill 0xFF

Convert a binary to Intel HEX at address 0x08000000:
    $ ihextool from-bin firmware.bin --address 0x08000000

Re-write with 32 bytes per record in I32HEX:
    $ ihextool convert old.hex -o new.hex --line-length 32 --dialect i32hex
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ihexkit import __version__
from ihexkit.cli.errors import handle_cli_exception
from ihexkit.config import HexConfig
from ihexkit.hexfile import IntelHexFile
from ihexkit.ihex.dialects import Dialect


# =============================================================================
# Parameter Types
# =============================================================================

class DialectChoice(click.ParamType):
    """
    Click parameter type for dialect selection.

    Accepts: i8hex, i16hex, i32hex, narrow, segmented, linear
    (case-insensitive)
    """
    name = "dialect"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> Dialect:
        """Convert string to Dialect."""
        if isinstance(value, Dialect):
            return value

        dialect = Dialect.from_name(value)
        if dialect is None:
            self.fail(
                f"Invalid dialect '{value}'. Choose from: "
                f"{', '.join(d.value for d in Dialect)}",
                param, ctx
            )
        return dialect


class AddressType(click.ParamType):
    """
    Click parameter type for numbers given as decimal, 0x-prefixed hex or
    $-prefixed hex.
    """
    name = "address"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        if isinstance(value, int):
            return value
        try:
            if value.lower().startswith("0x"):
                return int(value, 16)
            if value.startswith("$"):
                return int(value[1:], 16)
            return int(value)
        except ValueError:
            self.fail(f"Invalid address '{value}'", param, ctx)


DIALECT = DialectChoice()
ADDRESS = AddressType()


def _load(input_file: Path, start_token: Optional[str],
          allow_duplicates: Optional[bool] = None) -> IntelHexFile:
    config = HexConfig.from_env().replace(
        start_token=start_token,
        allow_duplicate_addresses=allow_duplicates,
    )
    return IntelHexFile.from_file(input_file, config=config)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="ihextool")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    Intel HEX file tool.

    Inspect, validate and convert Intel HEX files (.hex, .ihx, .mcs, ...).

    \b
    Commands:
      info      Show segments and start addresses
      validate  Check a file for errors
      to-bin    Convert Intel HEX to binary
      from-bin  Convert binary to Intel HEX
      convert   Re-write Intel HEX with other options

    \b
    Environment:
      IHEX_START_TOKEN, IHEX_LINE_LENGTH, IHEX_DIALECT, IHEX_ALLOW_DUPLICATES
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--start-token",
    default=None,
    help="Record start token (default: ':')",
)
@click.pass_context
def cmd_info(ctx: click.Context, hex_file: Path,
             start_token: Optional[str]) -> None:
    """
    Show detailed information about an Intel HEX file.

    \b
    Example:
      ihextool info firmware.hex
    """
    try:
        parsed = _load(hex_file, start_token)

        click.echo(f"Intel HEX Information: {hex_file}")
        click.echo("=" * 40)
        dialect = parsed.dialect
        if dialect is None:
            click.echo("Dialect:     none (both start addresses are set)")
        else:
            click.echo(f"Dialect:     {dialect.value.upper()} "
                       f"(addresses up to 0x{dialect.max_address:X})")
        click.echo(f"End address: 0x{parsed.max_address:08X}")
        click.echo(f"Segments:    {len(parsed.segments)}")
        for segment in parsed.segments:
            click.echo(
                f"  0x{segment.address:08X} - 0x{segment.end_address:08X}"
                f"  ({len(segment)} bytes)"
            )
        if parsed.start_segment_address is not None:
            start = parsed.start_segment_address
            click.echo(
                f"Start:       CS:IP {start.code_segment:04X}:"
                f"{start.instruction_pointer:04X}"
            )
        if parsed.start_linear_address is not None:
            click.echo(f"Start:       0x{parsed.start_linear_address:08X}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"])


# =============================================================================
# Validate Command
# =============================================================================

@main.command("validate")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--start-token",
    default=None,
    help="Record start token (default: ':')",
)
@click.option(
    "--allow-duplicates",
    is_flag=True,
    help="Accept data records that overlap earlier ones",
)
@click.pass_context
def cmd_validate(ctx: click.Context, hex_file: Path,
                 start_token: Optional[str],
                 allow_duplicates: bool) -> None:
    """
    Check an Intel HEX file for errors.

    Reports the first bad line and exits with status 1 if the file is not
    valid.

    \b
    Example:
      ihextool validate firmware.hex
    """
    try:
        parsed = _load(hex_file, start_token, allow_duplicates or None)
        click.echo(f"Validation PASSED: {hex_file}")
        click.echo(str(parsed))
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"],
                             error_type="Validation")


# =============================================================================
# To-Bin Command
# =============================================================================

@main.command("to-bin")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: input name with .bin)",
)
@click.option(
    "--fill",
    type=ADDRESS,
    default="0",
    help="Value for gaps between segments (default: 0)",
)
@click.option(
    "--start",
    type=ADDRESS,
    default=None,
    help="First address of the image (default: lowest segment address)",
)
@click.option(
    "--start-token",
    default=None,
    help="Record start token (default: ':')",
)
@click.pass_context
def cmd_to_bin(ctx: click.Context, hex_file: Path, output: Optional[Path],
               fill: int, start: Optional[int],
               start_token: Optional[str]) -> None:
    """
    Convert an Intel HEX file to a flat binary image.

    \b
    Examples:
      ihextool to-bin firmware.hex
      ihextool to-bin firmware.hex -o image.bin --fill 0xFF --start 0
    """
    try:
        parsed = _load(hex_file, start_token)
        if start is None:
            start = parsed.segments[0].address if parsed.segments else 0

        image = parsed.to_binary(fill=fill, start=start)
        output = output or hex_file.with_suffix(".bin")
        output.write_bytes(image)
        click.echo(f"Created {output} ({len(image)} bytes from 0x{start:08X})")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"],
                             error_type="Conversion")


# =============================================================================
# From-Bin Command
# =============================================================================

@main.command("from-bin")
@click.argument(
    "bin_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: input path with .hex appended)",
)
@click.option(
    "-a", "--address",
    type=ADDRESS,
    default="0",
    help="Load address of the first byte (default: 0)",
)
@click.option(
    "-l", "--line-length",
    type=click.IntRange(1, 255),
    default=None,
    help="Data bytes per record (default: 16)",
)
@click.option(
    "-d", "--dialect",
    type=DIALECT,
    default=None,
    help="i8hex, i16hex or i32hex (default: smallest that fits)",
)
@click.option(
    "-f", "--force",
    is_flag=True,
    help="Overwrite an existing output file",
)
@click.pass_context
def cmd_from_bin(ctx: click.Context, bin_file: Path, output: Optional[Path],
                 address: int, line_length: Optional[int],
                 dialect: Optional[Dialect], force: bool) -> None:
    """
    Convert a binary file to Intel HEX.

    \b
    Examples:
      ihextool from-bin firmware.bin
      ihextool from-bin firmware.bin -a 0x08000000 -d i32hex -o fw.hex
    """
    try:
        output = output or bin_file.with_name(bin_file.name + ".hex")
        if output.exists() and not force:
            raise FileExistsError(f"'{output}' already exists!")

        hex_file = IntelHexFile.from_data(bin_file.read_bytes(),
                                          address=address,
                                          config=HexConfig.from_env())
        hex_file.to_file(output, dialect=dialect, line_length=line_length)
        click.echo(f"Created {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"],
                             error_type="Conversion")


# =============================================================================
# Convert Command
# =============================================================================

@main.command("convert")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output file (required)",
)
@click.option(
    "-l", "--line-length",
    type=click.IntRange(1, 255),
    default=None,
    help="Data bytes per record (default: 16)",
)
@click.option(
    "-d", "--dialect",
    type=DIALECT,
    default=None,
    help="i8hex, i16hex or i32hex (default: smallest that fits)",
)
@click.option(
    "--start-token",
    default=None,
    help="Start token of the input records (default: ':')",
)
@click.option(
    "--output-token",
    default=None,
    help="Start token of the output records (default: same as input)",
)
@click.pass_context
def cmd_convert(ctx: click.Context, hex_file: Path, output: Path,
                line_length: Optional[int], dialect: Optional[Dialect],
                start_token: Optional[str],
                output_token: Optional[str]) -> None:
    """
    Re-write an Intel HEX file with another dialect, line length or start
    token.

    \b
    Example:
      ihextool convert old.hex -o new.hex -l 32 -d i32hex
    """
    try:
        parsed = _load(hex_file, start_token)
        parsed.to_file(output, dialect=dialect, line_length=line_length,
                       start_token=output_token)
        click.echo(f"Created {output} ({len(parsed.segments)} segments)")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"],
                             error_type="Conversion")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
