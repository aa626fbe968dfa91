# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Bounded top-k selection over a stream of lines.

The selector keeps at most k records in a heap whose root is the worst
record kept so far. A new record replaces the root only if it is strictly
better, so memory stays O(k) and time O(n log k) for n input lines.
"""

import heapq
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

from kvstream.errors import RecordError
from kvstream.fields import check_delimiter, field_at
from kvstream.stats import RunStats
from kvstream.topk.comparator import Comparator, ValueType

T = TypeVar("T")


class _Entry(Generic[T]):
    """
    Heap entry ordered from worst to best.

    Among entries with equal keys the one seen later is worse, so it is
    evicted first and sorts after earlier ones.
    """

    __slots__ = ("key", "seq", "item", "_comparator")

    def __init__(self, key: Any, seq: int, item: T, comparator: Comparator) -> None:
        self.key = key
        self.seq = seq
        self.item = item
        self._comparator = comparator

    def __lt__(self, other: "_Entry[T]") -> bool:
        result = self._comparator.compare_keys(self.key, other.key)
        if result:
            return result < 0
        return self.seq > other.seq


class BoundedSelector(Generic[T]):
    """
    Keep the k best items seen so far under a Comparator.

    "Best" means largest under the comparator, which is the smallest value
    when the comparator is reversed.

    Example:
        >>> selector = BoundedSelector(2, Comparator(ValueType.INT64))
        >>> for value in [b"5", b"2", b"-3", b"7"]:
        ...     _ = selector.push(value, value)
        >>> selector.sorted_items()
        [b'7', b'5']
    """

    def __init__(self, k: int, comparator: Comparator) -> None:
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        self.k = k
        self.comparator = comparator
        self._heap: list[_Entry[T]] = []
        self._seq = 0

    def push(self, field: bytes, item: T) -> bool:
        """
        Offer an item, compared by field.

        The field is parsed even when k is 0, so invalid input is reported
        regardless of k.

        Returns:
            True if the item is kept (for now)

        Raises:
            ParseError: If field cannot be parsed by the comparator
        """
        entry = _Entry(self.comparator.parse(field), self._seq, item, self.comparator)
        self._seq += 1

        if len(self._heap) < self.k:
            heapq.heappush(self._heap, entry)
            return True
        # Ties with the current worst do not evict it
        if self.k and self.comparator.compare_keys(entry.key, self._heap[0].key) > 0:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def __len__(self) -> int:
        return len(self._heap)

    def items(self) -> list[T]:
        """Kept items in arbitrary order."""
        return [entry.item for entry in self._heap]

    def sorted_items(self) -> list[T]:
        """Kept items best first; equal keys keep their input order."""
        return [entry.item for entry in sorted(self._heap, reverse=True)]


@dataclass
class TopKOptions:
    """Configuration for the topk command."""

    k: int
    compare_field: int = 1
    value_type: ValueType = ValueType.BYTES
    reverse: bool = False
    sort: bool = False
    field_delimiter: bytes = b"\t"

    def __post_init__(self) -> None:
        if self.k < 0:
            raise ValueError(f"k must be non-negative, got {self.k}")
        if self.compare_field < 1:
            raise ValueError(
                f"compare field must be 1 or greater, got {self.compare_field}"
            )
        check_delimiter(self.field_delimiter, "field delimiter")
        self.value_type = ValueType(self.value_type)

    @property
    def compare_index(self) -> int:
        """0-based index of the compare field."""
        return self.compare_field - 1


def select_top_k(
    lines: Iterable[bytes], options: TopKOptions
) -> BoundedSelector[bytes]:
    """
    Feed every line into a BoundedSelector.

    Args:
        lines: Input lines without terminators (consumed once!)
        options: k, compare field, value type, direction

    Returns:
        The filled selector

    Raises:
        InvalidFieldIndexError: If a line has no compare field
        ParseError: If a compare field cannot be parsed
    """
    selector: BoundedSelector[bytes] = BoundedSelector(
        options.k, Comparator(options.value_type, options.reverse)
    )
    for line_number, line in enumerate(lines, 1):
        try:
            selector.push(
                field_at(line, options.field_delimiter, options.compare_index), line
            )
        except RecordError as e:
            raise e.at_line(line_number)
    return selector


def run_top_k(
    lines: Iterable[bytes],
    options: TopKOptions,
    stats: Optional[RunStats] = None,
) -> Iterator[bytes]:
    """
    Yield the top-k input lines once the input is exhausted.

    Lines are yielded best first when options.sort is set, otherwise in
    arbitrary order. When stats is given, "records kept" is set to the
    number of selected lines.
    """
    selector = select_top_k(lines, options)
    kept = selector.sorted_items() if options.sort else selector.items()
    if stats is not None:
        stats.bump("records kept", len(kept))
    yield from kept
