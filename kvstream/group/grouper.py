# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Streaming grouper for key/value lines.

Two grouping engines are provided, selected by GroupMode:

- SortedGrouper assumes equal keys are contiguous. It holds at most one
  open group, so memory is O(size of the current run). A key that shows
  up again after a different key starts a second, separate group.
- HashGrouper accepts any input order. It keeps every group until the end
  of input, so memory is O(distinct keys + total tokens), and emits
  exactly one group per key in first-appearance order.

Ungrouper is the inverse of the grouped output format.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from kvstream.errors import RecordError
from kvstream.fields import check_delimiter, join_fields, split_key_value
from kvstream.stats import RunStats


class GroupMode(Enum):
    """Input order assumption used to pick the grouping engine."""

    SORTED = "sorted"
    HASHMAP = "hashmap"


class TokenList:
    """
    Ordered tokens of one group.

    Tokens keep insertion order. With unique=True a token already present
    is dropped, so the first occurrence wins.
    """

    __slots__ = ("_tokens", "_seen")

    def __init__(self, unique: bool = False) -> None:
        self._tokens: list[bytes] = []
        self._seen: Optional[set[bytes]] = set() if unique else None

    def add(self, token: bytes) -> bool:
        """Append a token. Returns False if it was dropped as a duplicate."""
        if self._seen is not None:
            if token in self._seen:
                return False
            self._seen.add(token)
        self._tokens.append(token)
        return True

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def to_list(self) -> list[bytes]:
        return list(self._tokens)


@dataclass
class GroupOptions:
    """Configuration for the group command."""

    field_delimiter: bytes = b"\t"
    token_delimiter: bytes = b","
    inverse: bool = False
    unique: bool = False
    mode: GroupMode = GroupMode.SORTED

    def __post_init__(self) -> None:
        check_delimiter(self.field_delimiter, "field delimiter")
        check_delimiter(self.token_delimiter, "token delimiter")
        self.mode = GroupMode(self.mode)


class _SinglePassEngine:
    """Base for engines that consume their records iterator exactly once."""

    def __init__(self, records: Iterable[tuple[bytes, bytes]]) -> None:
        self._records = records
        self._consumed = False

    def _ensure_not_consumed(self) -> None:
        """Raise error if records have already been consumed."""
        if self._consumed:
            raise RuntimeError(
                f"{type(self).__name__} records have already been consumed. "
                "Create a new engine to process again."
            )
        self._consumed = True


class SortedGrouper(_SinglePassEngine):
    """
    Group adjacent records that share a key.

    Example:
        >>> records = [(b"1", b"a"), (b"2", b"b"), (b"1", b"c"), (b"1", b"a")]
        >>> list(SortedGrouper(records).iter_groups())
        [(b'1', [b'a']), (b'2', [b'b']), (b'1', [b'c', b'a'])]
    """

    def __init__(
        self, records: Iterable[tuple[bytes, bytes]], unique: bool = False
    ) -> None:
        super().__init__(records)
        self._unique = unique

    def iter_groups(self) -> Iterator[tuple[bytes, list[bytes]]]:
        """
        Yield (key, tokens) for each run of equal keys.

        A group is yielded as soon as a different key (or the end of input)
        closes its run.

        Memory complexity: O(tokens in the current run)
        """
        self._ensure_not_consumed()

        current_key: Optional[bytes] = None
        tokens: Optional[TokenList] = None

        for key, value in self._records:
            if tokens is None or key != current_key:
                if tokens is not None:
                    yield current_key, tokens.to_list()
                current_key = key
                tokens = TokenList(self._unique)
            tokens.add(value)

        if tokens is not None:
            yield current_key, tokens.to_list()


class HashGrouper(_SinglePassEngine):
    """
    Group all records that share a key, regardless of input order.

    Warning: Memory usage is unbounded - O(distinct keys + total tokens).

    Example:
        >>> records = [(b"1", b"a"), (b"2", b"b"), (b"1", b"c"), (b"1", b"a")]
        >>> list(HashGrouper(records, unique=True).iter_groups())
        [(b'1', [b'a', b'c']), (b'2', [b'b'])]
    """

    def __init__(
        self, records: Iterable[tuple[bytes, bytes]], unique: bool = False
    ) -> None:
        super().__init__(records)
        self._unique = unique

    def iter_groups(self) -> Iterator[tuple[bytes, list[bytes]]]:
        """
        Yield (key, tokens) for every distinct key once the input is exhausted.

        Keys come out in the order they first appeared.
        """
        self._ensure_not_consumed()

        # dicts keep insertion order, which is first-appearance order here
        groups: dict[bytes, TokenList] = {}

        for key, value in self._records:
            tokens = groups.get(key)
            if tokens is None:
                tokens = groups[key] = TokenList(self._unique)
            tokens.add(value)

        for key, tokens in groups.items():
            yield key, tokens.to_list()


class Ungrouper(_SinglePassEngine):
    """
    Expand (key, joined tokens) records into one (key, token) pair per token.

    Each record is expanded on its own. With unique=True, duplicates are
    only dropped within a record; two records with the same key keep
    independent uniqueness state.

    Example:
        >>> records = [(b"1", b"a,c,a"), (b"2", b"b")]
        >>> list(Ungrouper(records, b",", unique=True).iter_pairs())
        [(b'1', b'a'), (b'1', b'c'), (b'2', b'b')]
    """

    def __init__(
        self,
        records: Iterable[tuple[bytes, bytes]],
        token_delimiter: bytes = b",",
        unique: bool = False,
    ) -> None:
        super().__init__(records)
        check_delimiter(token_delimiter, "token delimiter")
        self._token_delimiter = token_delimiter
        self._unique = unique

    def iter_pairs(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield (key, token) pairs in input order."""
        self._ensure_not_consumed()

        for key, joined in self._records:
            if not self._unique:
                for token in joined.split(self._token_delimiter):
                    yield key, token
                continue
            seen: set[bytes] = set()
            for token in joined.split(self._token_delimiter):
                if token not in seen:
                    seen.add(token)
                    yield key, token


GROUPERS = {
    GroupMode.SORTED: SortedGrouper,
    GroupMode.HASHMAP: HashGrouper,
}


def make_grouper(
    records: Iterable[tuple[bytes, bytes]],
    mode: GroupMode = GroupMode.SORTED,
    unique: bool = False,
):
    """
    Create the grouping engine for a mode.

    Args:
        records: Iterable of (key, value) pairs (consumed once!)
        mode: GroupMode.SORTED for contiguous keys, GroupMode.HASHMAP otherwise
        unique: Drop repeated tokens within a group, first occurrence wins

    Returns:
        A SortedGrouper or HashGrouper
    """
    return GROUPERS[GroupMode(mode)](records, unique=unique)


def iter_key_values(
    lines: Iterable[bytes], delimiter: bytes
) -> Iterator[tuple[bytes, bytes]]:
    """
    Split each line into (key, value).

    Raises:
        MalformedLineError: If a line has no delimiter; carries its line number
    """
    for line_number, line in enumerate(lines, 1):
        try:
            yield split_key_value(line, delimiter)
        except RecordError as e:
            raise e.at_line(line_number)


def run_group(
    lines: Iterable[bytes],
    options: GroupOptions,
    stats: Optional[RunStats] = None,
) -> Iterator[bytes]:
    """
    Group (or ungroup, with options.inverse) input lines.

    Args:
        lines: Input lines without terminators
        options: Delimiters, direction, uniqueness and grouping mode
        stats: Receives "groups emitted" (or "tokens emitted" when ungrouping)

    Yields:
        Output lines without terminators
    """
    records = iter_key_values(lines, options.field_delimiter)

    if options.inverse:
        counter = "tokens emitted"
        if stats is not None:
            stats.bump(counter, 0)
        ungrouper = Ungrouper(records, options.token_delimiter, options.unique)
        for key, token in ungrouper.iter_pairs():
            if stats is not None:
                stats.bump(counter)
            yield join_fields((key, token), options.field_delimiter)
        return

    counter = "groups emitted"
    if stats is not None:
        stats.bump(counter, 0)
    grouper = make_grouper(records, options.mode, options.unique)
    for key, tokens in grouper.iter_groups():
        if stats is not None:
            stats.bump(counter)
        yield join_fields(
            (key, options.token_delimiter.join(tokens)), options.field_delimiter
        )
