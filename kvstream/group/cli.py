# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the group subcommand.
"""

from pathlib import Path
from typing import Optional

import click
from kvstream.group.grouper import GroupMode, GroupOptions, run_group
from kvstream.options import DELIMITER, input_argument, output_options, run_pipeline
from kvstream.stats import RunStats


@click.command(name="group")
@click.option(
    "--field-delim",
    "-f",
    type=DELIMITER,
    default="\\t",
    show_default=True,
    help="Field delimiter character.",
)
@click.option(
    "--token-delim",
    "-t",
    type=DELIMITER,
    default=",",
    show_default=True,
    help="Token delimiter character for grouped values.",
)
@click.option(
    "--inverse",
    "-i",
    is_flag=True,
    default=False,
    help="Inverse operation, which un-groups the input.",
)
@click.option(
    "--unique",
    "-u",
    is_flag=True,
    default=False,
    help="Keep unique tokens after grouping / before un-grouping.",
)
@click.option(
    "--hashmap",
    "-m",
    is_flag=True,
    default=False,
    help="For unsorted input: group every key across the whole input "
    "(more memory). Ignored with -i.",
)
@input_argument
@output_options
def group_command(
    field_delim: bytes,
    token_delim: bytes,
    inverse: bool,
    unique: bool,
    hashmap: bool,
    input_file: str,
    output_file: Optional[Path],
    compress: bool,
    show_stats: bool,
) -> None:
    """
    Group the values of each line by the first field.

    By default the input is assumed to be sorted by the first field, and
    only adjacent lines with equal keys are merged. Use -m for unsorted
    input.

    \b
    Examples:
      $ printf '1\\ta\\n1\\tc\\n1\\ta\\n2\\tb\\n' | kvstream group
      1   a,c,a
      2   b
      $ kvstream group -u input.tsv        # 1  a,c
      $ kvstream group -m unsorted.tsv     # one line per key
      $ kvstream group -i grouped.tsv      # back to one line per token
      $ kvstream group -i -u grouped.tsv
    """
    options = GroupOptions(
        field_delimiter=field_delim,
        token_delimiter=token_delim,
        inverse=inverse,
        unique=unique,
        mode=GroupMode.HASHMAP if hashmap else GroupMode.SORTED,
    )
    stats = RunStats()
    run_pipeline(
        lambda lines: run_group(lines, options, stats),
        input_file,
        output_file,
        compress,
        show_stats,
        stats=stats,
    )
