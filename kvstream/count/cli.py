# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the count subcommand.
"""

from pathlib import Path
from typing import Optional

import click
from kvstream.count.counter import CountOptions, run_count
from kvstream.options import DELIMITER, input_argument, output_options, run_pipeline
from kvstream.stats import RunStats


@click.command(name="count")
@click.option(
    "--delimiter",
    "-d",
    type=DELIMITER,
    default="\\t",
    show_default=True,
    help="Output delimiter between the count and the line.",
)
@click.option(
    "--suppress",
    "-s",
    is_flag=True,
    default=False,
    help="Suppress empty lines.",
)
@input_argument
@output_options
def count_command(
    delimiter: bytes,
    suppress: bool,
    input_file: str,
    output_file: Optional[Path],
    compress: bool,
    show_stats: bool,
) -> None:
    """
    Count occurrences of each line. The input does not need to be sorted.

    Lines are printed once each, in order of first appearance, preceded by
    their count.

    \b
    Examples:
      $ printf 'three\\none\\ntwo\\nthree\\ntwo\\nthree\\n' | kvstream count
      3   three
      1   one
      2   two
    """
    options = CountOptions(delimiter=delimiter, suppress_empty=suppress)
    stats = RunStats()
    run_pipeline(
        lambda lines: run_count(lines, options, stats),
        input_file,
        output_file,
        compress,
        show_stats,
        stats=stats,
    )
