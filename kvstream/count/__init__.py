# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream count module: occurrences of each distinct line.
"""

from .counter import count_lines, CountOptions, run_count

__all__ = [
    "count_lines",
    "CountOptions",
    "run_count",
]
