# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream bsq module: binary-search lookup in a sorted, mmap-able database.
"""

from .searcher import run_search, SearchOptions, SortedDatabase

__all__ = [
    "run_search",
    "SearchOptions",
    "SortedDatabase",
]
