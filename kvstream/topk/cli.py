# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the topk subcommand.
"""

from pathlib import Path
from typing import Optional

import click
from kvstream.options import DELIMITER, input_argument, output_options, run_pipeline
from kvstream.stats import RunStats
from kvstream.topk.comparator import ValueType
from kvstream.topk.selector import run_top_k, TopKOptions


def _select_value_type(char_compare: bool, float_compare: bool, int_compare: bool):
    """Map the mutually exclusive -c/-f/-i flags to a ValueType."""
    selected = [
        value_type
        for flag, value_type in (
            (char_compare, ValueType.UTF8),
            (float_compare, ValueType.FLOAT64),
            (int_compare, ValueType.INT64),
        )
        if flag
    ]
    if len(selected) > 1:
        raise click.UsageError("Cannot specify more than one of -c, -f, -i")
    return selected[0] if selected else ValueType.BYTES


@click.command(name="topk")
@click.option(
    "--field-delim",
    "-t",
    type=DELIMITER,
    default="\\t",
    show_default=True,
    help="Field delimiter character.",
)
@click.option(
    "--key",
    "-k",
    "compare_field",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Compare by the given field (1-based).",
)
@click.option(
    "--char",
    "-c",
    "char_compare",
    is_flag=True,
    help="Compare by lexicographic order of UTF-8 characters.",
)
@click.option(
    "--float",
    "-f",
    "float_compare",
    is_flag=True,
    help="Parse the field as a 64-bit float to compare.",
)
@click.option(
    "--int",
    "-i",
    "int_compare",
    is_flag=True,
    help="Parse the field as a 64-bit integer to compare.",
)
@click.option(
    "--reverse",
    "-r",
    is_flag=True,
    help="Reverse the comparison, i.e. bottom-k.",
)
@click.option(
    "--sort",
    "-s",
    "sort_output",
    is_flag=True,
    help="Print the selected records best first.",
)
@click.argument("k", type=click.IntRange(min=0))
@input_argument
@output_options
def topk_command(
    field_delim: bytes,
    compare_field: int,
    char_compare: bool,
    float_compare: bool,
    int_compare: bool,
    reverse: bool,
    sort_output: bool,
    k: int,
    input_file: str,
    output_file: Optional[Path],
    compress: bool,
    show_stats: bool,
) -> None:
    """
    Print only the top K records.

    By default records are compared by the byte values of their first
    field, and the K largest are kept in arbitrary order. Memory use is
    proportional to K, not to the input size.

    \b
    Examples:
      $ printf '1\\n9\\n11\\n0\\n5\\n7\\n9\\n' | kvstream topk 3       # 9, 9, 7
      $ printf '1\\n9\\n11\\n0\\n5\\n7\\n9\\n' | kvstream topk -i 3    # 11, 9, 9
      $ printf '1\\n9\\n11\\n0\\n5\\n7\\n9\\n' | kvstream topk -irs 3  # 0, 1, 5
      $ kvstream topk -k 2 -f -s 10 scores.tsv
    """
    options = TopKOptions(
        k=k,
        compare_field=compare_field,
        value_type=_select_value_type(char_compare, float_compare, int_compare),
        reverse=reverse,
        sort=sort_output,
        field_delimiter=field_delim,
    )
    stats = RunStats()
    run_pipeline(
        lambda lines: run_top_k(lines, options, stats),
        input_file,
        output_file,
        compress,
        show_stats,
        stats=stats,
    )
