# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream: streaming transforms over delimiter-separated key/value lines.

- group: collapse (or expand, with inverse) records sharing a key
- topk: keep only the k largest/smallest records in O(k) memory
- count: count occurrences of each distinct line
- bsq: binary-search lookup in a database sorted by an index field
"""

from .errors import (
    InvalidFieldIndexError,
    MalformedLineError,
    ParseError,
    RecordError,
)

__all__ = [
    "InvalidFieldIndexError",
    "MalformedLineError",
    "ParseError",
    "RecordError",
]
