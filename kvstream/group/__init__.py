# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream group module.

- SortedGrouper: merge adjacent runs of equal keys (sorted input)
- HashGrouper: accumulate every key across the whole input (unsorted input)
- Ungrouper: expand grouped records back into one line per token
"""

from .grouper import (
    GroupMode,
    GroupOptions,
    HashGrouper,
    iter_key_values,
    make_grouper,
    run_group,
    SortedGrouper,
    TokenList,
    Ungrouper,
)

__all__ = [
    "GroupMode",
    "GroupOptions",
    "HashGrouper",
    "iter_key_values",
    "make_grouper",
    "run_group",
    "SortedGrouper",
    "TokenList",
    "Ungrouper",
]
