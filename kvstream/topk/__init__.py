# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
kvstream topk module.

- Comparator: configurable ordering over raw fields
- BoundedSelector: keeps the k best records in O(k) memory
"""

from .comparator import Comparator, ValueType
from .selector import BoundedSelector, run_top_k, select_top_k, TopKOptions

__all__ = [
    "BoundedSelector",
    "Comparator",
    "run_top_k",
    "select_top_k",
    "TopKOptions",
    "ValueType",
]
