# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the bsq subcommand.
"""

from pathlib import Path
from typing import Optional

import click
from kvstream.bsq.searcher import run_search, SearchOptions, SortedDatabase
from kvstream.compression import read_lines, STDIO
from kvstream.options import DELIMITER, output_options, run_pipeline
from kvstream.stats import RunStats


@click.command(name="bsq")
@click.option(
    "--delimiter",
    "-d",
    type=DELIMITER,
    default="\\t",
    show_default=True,
    help="Field delimiter character.",
)
@click.option(
    "--exact",
    "-w",
    is_flag=True,
    default=False,
    help="Match the entire index, as opposed to prefix-match.",
)
@click.option(
    "--field",
    "-f",
    "index_field",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Index field the database is sorted by (1-based).",
)
@click.argument(
    "database",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument("query", required=False, default=None)
@output_options
def bsq_command(
    delimiter: bytes,
    exact: bool,
    index_field: int,
    database: Path,
    query: Optional[str],
    output_file: Optional[Path],
    compress: bool,
    show_stats: bool,
) -> None:
    """
    Binary-search a sorted DATABASE for lines whose index matches QUERY.

    The database must be sorted bytewise by the index field and be a
    regular (mmap-able) file. If QUERY is omitted, queries are read from
    stdin, one per line.

    \b
    Examples:
      $ cat database
      1   one
      19  nineteen
      19  another nineteen
      192 one hundred ninety two
      24  twenty four
      $ kvstream bsq database 19          # prefix match: 19, 19, 192
      $ kvstream bsq -w database 19       # exact match: 19, 19
      $ cut -f1 ids.tsv | kvstream bsq database
    """
    options = SearchOptions(delimiter=delimiter, exact=exact, index_field=index_field)
    queries = [query.encode("utf-8")] if query is not None else read_lines(STDIO)

    try:
        db = SortedDatabase(database, options.delimiter, options.index_field)
    except (OSError, ValueError) as e:
        raise click.ClickException(
            f"Failed to mmap {database}. Make sure it is a regular file: {e}"
        )

    stats = RunStats()
    with db:
        # The database is passed as the input so it is never used as the output
        run_pipeline(
            lambda lines: run_search(lines, db, options, stats),
            str(database),
            output_file,
            compress,
            show_stats,
            stats=stats,
            lines=queries,
        )
