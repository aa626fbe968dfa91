# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Binary search over a database file sorted by an index field.

The database is memory-mapped and never read as a whole: a lookup touches
O(log n) lines to find the first candidate, then scans forward over the
matching run. Keys are compared as raw bytes, so the database must be
sorted bytewise by the index field (e.g. `LC_ALL=C sort -t $'\\t' -k1,1`).
"""

import mmap
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from kvstream.errors import InvalidFieldIndexError
from kvstream.fields import check_delimiter, field_at
from kvstream.stats import RunStats


@dataclass
class SearchOptions:
    """Configuration for the bsq command."""

    delimiter: bytes = b"\t"
    exact: bool = False
    index_field: int = 1

    def __post_init__(self) -> None:
        check_delimiter(self.delimiter)
        if self.index_field < 1:
            raise ValueError(
                f"index field must be 1 or greater, got {self.index_field}"
            )

    @property
    def index(self) -> int:
        """0-based index of the index field."""
        return self.index_field - 1


class SortedDatabase:
    """
    Read-only view of a sorted database file.

    Use as a context manager so the mapping and file handle are released:

        with SortedDatabase("db.tsv") as db:
            for line in db.iter_matches(b"19"):
                ...
    """

    def __init__(
        self,
        path: Union[str, Path],
        delimiter: bytes = b"\t",
        index_field: int = 1,
    ) -> None:
        check_delimiter(delimiter)
        if index_field < 1:
            raise ValueError(f"index field must be 1 or greater, got {index_field}")
        self.path = Path(path)
        self.delimiter = delimiter
        self._index = index_field - 1
        if not stat.S_ISREG(self.path.stat().st_mode):
            raise ValueError(f"{self.path} is not a regular file")
        self._file = open(self.path, "rb")
        try:
            # mmap cannot map an empty file
            if self.path.stat().st_size:
                self._data: Optional[mmap.mmap] = mmap.mmap(
                    self._file.fileno(), 0, access=mmap.ACCESS_READ
                )
            else:
                self._data = None
        except (OSError, ValueError):
            self._file.close()
            raise

    def __enter__(self) -> "SortedDatabase":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._data is not None:
            self._data.close()
            self._data = None
        self._file.close()

    def __len__(self) -> int:
        """Size of the database in bytes."""
        return len(self._data) if self._data is not None else 0

    def _line_at(self, start: int) -> tuple[bytes, int]:
        """Return the line starting at offset start and the offset of its end."""
        end = self._data.find(b"\n", start)
        if end < 0:
            end = len(self._data)
        line = self._data[start:end]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line, end

    def _key(self, line: bytes, start: int) -> bytes:
        try:
            return field_at(line, self.delimiter, self._index)
        except InvalidFieldIndexError as e:
            raise InvalidFieldIndexError(
                f"{e.message} (database {self.path}, byte offset {start})"
            )

    def lower_bound(self, query: bytes) -> int:
        """
        Return the offset of the first line whose key is not less than query.

        Returns len(self) when every key is less than query.

        Raises:
            InvalidFieldIndexError: If a visited line has no index field
        """
        size = len(self)
        # lo and hi are always line starts (or size)
        lo, hi = 0, size
        while lo < hi:
            mid = (lo + hi) // 2
            start = self._data.rfind(b"\n", lo, mid) + 1 or lo
            line, end = self._line_at(start)
            if self._key(line, start) < query:
                lo = min(end + 1, hi)
            else:
                hi = start
        return lo

    def iter_matches(self, query: bytes, exact: bool = False) -> Iterator[bytes]:
        """
        Yield every line whose key matches query, in database order.

        Args:
            query: Key to look up
            exact: Match the whole key instead of a key prefix

        Raises:
            InvalidFieldIndexError: If a visited line has no index field
        """
        size = len(self)
        offset = self.lower_bound(query)
        while offset < size:
            line, end = self._line_at(offset)
            key = self._key(line, offset)
            if not (key == query if exact else key.startswith(query)):
                return
            yield line
            offset = end + 1


def run_search(
    queries: Iterable[bytes],
    database: SortedDatabase,
    options: SearchOptions,
    stats: Optional[RunStats] = None,
) -> Iterator[bytes]:
    """
    Yield the matching database lines for each query in turn.

    When stats is given, "queries" and "matches" are counted.
    """
    if stats is not None:
        stats.bump("queries", 0)
        stats.bump("matches", 0)
    for query in queries:
        if stats is not None:
            stats.bump("queries")
        for line in database.iter_matches(query, options.exact):
            if stats is not None:
                stats.bump("matches")
            yield line
