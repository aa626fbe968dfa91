# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream CLI entry point.

Provides the group, topk, count and bsq subcommands.
"""

import sys
from importlib.metadata import PackageNotFoundError, version

import click
from kvstream.bsq.cli import bsq_command
from kvstream.count.cli import count_command
from kvstream.group.cli import group_command
from kvstream.topk.cli import topk_command


def _get_package_version() -> str:
    """Get package version from metadata."""
    try:
        return version("kvstream")
    except PackageNotFoundError:
        return "0+unknown"


EXAMPLES = """
Examples:
  kvstream group input.tsv
  kvstream group -m -u unsorted.tsv
  kvstream group -i grouped.tsv
  kvstream topk -i -s 10 scores.tsv
  kvstream count words.txt
  kvstream bsq -w database.tsv 19
"""


@click.group(epilog=EXAMPLES)
@click.version_option(version=_get_package_version(), prog_name="kvstream")
def main() -> None:
    """kvstream: streaming transforms over delimiter-separated lines."""
    pass


# Register subcommands
main.add_command(group_command)
main.add_command(topk_command)
main.add_command(count_command)
main.add_command(bsq_command)


if __name__ == "__main__":
    sys.exit(main())
