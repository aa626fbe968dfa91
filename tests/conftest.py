# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pytest configuration and shared fixtures for kvstream tests.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Generator

import pytest
import zstandard as zstd


# Scenario input from the group help text: key 1 is interrupted by key 2
UNSORTED_LINES = [b"1\ta", b"2\tb", b"1\tc", b"1\ta"]

# Values used by the top-k scenarios
TOPK_VALUES = [b"1", b"9", b"11", b"0", b"5", b"7", b"9"]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def unsorted_zst_file(temp_dir: Path) -> Path:
    """Create a Zstd-compressed copy of the unsorted group input."""
    filepath = temp_dir / "unsorted.tsv.zst"
    data = b"".join(line + b"\n" for line in UNSORTED_LINES)
    filepath.write_bytes(zstd.ZstdCompressor().compress(data))
    return filepath


@pytest.fixture
def crlf_file(temp_dir: Path) -> Path:
    """Create a file with CRLF line endings and no final terminator."""
    filepath = temp_dir / "crlf.tsv"
    filepath.write_bytes(b"1\ta\r\n1\tb\r\n2\tc")
    return filepath


@pytest.fixture
def fifo_factory(temp_dir: Path) -> Generator[Callable[[bytes], Path], None, None]:
    """
    Create named pipes that a background thread fills with data.

    The writer blocks until the pipe is opened for reading, so a pipe can
    only be consumed once, like `<(cmd)` process substitution.
    """
    if not hasattr(os, "mkfifo"):
        pytest.skip("named pipes are not supported on this platform")
    writers: list[threading.Thread] = []

    def make_fifo(data: bytes) -> Path:
        path = temp_dir / f"pipe{len(writers)}"
        os.mkfifo(path)

        def feed() -> None:
            with open(path, "wb") as f:
                f.write(data)

        writer = threading.Thread(target=feed, daemon=True)
        writer.start()
        writers.append(writer)
        return path

    yield make_fifo
    for writer in writers:
        writer.join(timeout=5)
