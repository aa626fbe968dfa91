# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Option types and the shared run loop used by every subcommand.
"""

import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

import click
from kvstream.compression import open_output, read_lines, STDIO
from kvstream.errors import RecordError
from kvstream.fields import parse_delimiter
from kvstream.stats import RunStats


class DelimiterType(click.ParamType):
    """Click parameter type for a single-byte delimiter."""

    name = "delimiter"

    def convert(self, value, param, ctx) -> bytes:
        if isinstance(value, bytes):
            return value
        try:
            return parse_delimiter(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DELIMITER = DelimiterType()


def input_argument(func: Callable) -> Callable:
    """Add the optional INPUT argument ("-" or omitted reads stdin)."""
    return click.argument(
        "input_file",
        metavar="[INPUT]",
        required=False,
        default="-",
        type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    )(func)


def output_options(func: Callable) -> Callable:
    """Add --output, --compress and --stats to a command."""
    func = click.option(
        "--stats",
        "show_stats",
        is_flag=True,
        default=False,
        help="Print line counts to stderr when done.",
    )(func)
    func = click.option(
        "--compress",
        is_flag=True,
        default=False,
        help="Compress output with Zstd (requires --output).",
    )(func)
    func = click.option(
        "--output",
        "-o",
        "output_file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Output file path (default: stdout).",
    )(func)
    return func


def _check_output_path(input_file: str, output_file: Optional[Path]) -> None:
    """Refuse to write over the input, which would truncate it before reading."""
    if not output_file or input_file == STDIO or not output_file.exists():
        return
    if os.path.samefile(input_file, output_file):
        raise click.ClickException(
            f"Output file {output_file} is the same file as the input"
        )


def run_pipeline(
    transform: Callable[[Iterator[bytes]], Iterable[bytes]],
    input_file: str,
    output_file: Optional[Path],
    compress: bool,
    show_stats: bool,
    stats: Optional[RunStats] = None,
    lines: Optional[Iterable[bytes]] = None,
) -> RunStats:
    """
    Stream input lines through transform and write the result.

    Args:
        transform: Maps input lines to output lines (both without terminators)
        input_file: Input path or "-" for stdin
        output_file: Output path, None for stdout
        compress: Zstd-compress the output file
        show_stats: Print a RunStats table to stderr when done
        stats: Counters to fill; commands pass the instance their transform
            bumps its own counters on
        lines: Input lines to use instead of reading input_file

    Returns:
        Counters for the run

    Raises:
        click.ClickException: On invalid option combinations or bad input lines
    """
    if compress and not output_file:
        raise click.ClickException("--compress requires --output")
    _check_output_path(input_file, output_file)

    if stats is None:
        stats = RunStats()
    if lines is None:
        lines = read_lines(input_file)
    try:
        with open_output(output_file, compress) as writer:
            writer.write_all(transform(stats.count_lines(lines)))
    except RecordError as e:
        raise click.ClickException(str(e))
    stats.lines_written = writer.count

    if output_file:
        click.echo(f"{writer.count} lines written to {output_file}", err=True)
    if show_stats:
        click.echo(stats.format_table(), err=True)

    return stats
