# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Input and output streams for kvstream commands.

Inputs are read as bytes from a file or standard input ("-"). Files that
start with the Zstd magic number are decompressed transparently. Outputs
go to standard output or a file, optionally Zstd-compressed.
"""

import io
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Union

import click
import zstandard as zstd

# Zstd magic number (little-endian): 0xFD2FB528
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

STDIO = "-"


def _stream_compression(stream: BinaryIO) -> str:
    """Detect compression from the first bytes of a buffered stream without consuming them."""
    if stream.peek(4)[:4] == ZSTD_MAGIC:
        return "zstd"
    return "none"


def detect_compression(filepath: Union[str, Path]) -> str:
    """
    Detect compression format of a file.

    Uses magic number detection, so the file extension does not matter.

    Args:
        filepath: Path to the file to check

    Returns:
        Compression type: "zstd" or "none"

    Raises:
        FileNotFoundError: If file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "rb") as f:
        return _stream_compression(f)


@contextmanager
def open_input(source: Union[str, Path]) -> Iterator[BinaryIO]:
    """
    Open an input for binary reading.

    The file is opened once and its magic number is peeked, so pipes and
    FIFOs (e.g. `<(sort data.tsv)`) are read from their first byte.

    Args:
        source: Path to the input file, or "-" for standard input

    Yields:
        Binary stream positioned at the start of the (decompressed) data

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if str(source) == STDIO:
        yield click.get_binary_stream("stdin")
        return

    filepath = Path(source)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "rb") as f:
        if _stream_compression(f) == "zstd":
            # stream_reader handles multiple concatenated frames
            dctx = zstd.ZstdDecompressor()
            with dctx.stream_reader(f, read_across_frames=True) as reader:
                # Buffered so the decompressed data is line-iterable
                yield io.BufferedReader(reader)
        else:
            yield f


def iter_lines(stream: Iterable[bytes]) -> Iterator[bytes]:
    """
    Iterate over the lines of a binary stream without their terminators.

    Both "\\n" and "\\r\\n" terminators are removed. A final line without a
    terminator is still yielded.
    """
    for line in stream:
        if line.endswith(b"\n"):
            line = line[:-1]
            if line.endswith(b"\r"):
                line = line[:-1]
        yield line


def read_lines(source: Union[str, Path]) -> Iterator[bytes]:
    """
    Iterate over the lines of an input, handling compression transparently.

    Args:
        source: Path to the input file, or "-" for standard input

    Yields:
        Lines as bytes, stripped of their terminators
    """
    with open_input(source) as stream:
        yield from iter_lines(stream)


class LineWriter:
    """
    Write terminated lines to a binary stream.

    Counts the lines written so callers can report them.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.count = 0

    def write(self, line: bytes) -> None:
        self._stream.write(line)
        self._stream.write(b"\n")
        self.count += 1

    def write_all(self, lines: Iterable[bytes]) -> None:
        for line in lines:
            self.write(line)


@contextmanager
def open_output(
    output_file: Optional[Path] = None, compress: bool = False
) -> Iterator[LineWriter]:
    """
    Open an output destination for writing lines.

    Args:
        output_file: Destination path; None writes to standard output
        compress: Compress the file with Zstd (only valid with output_file)

    Yields:
        LineWriter for the destination

    Raises:
        ValueError: If compress is requested without an output file
    """
    if output_file is None:
        if compress:
            raise ValueError("compression requires an output file")
        stdout = click.get_binary_stream("stdout")
        try:
            yield LineWriter(stdout)
        finally:
            stdout.flush()
        return

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "wb") as f:
        if compress:
            cctx = zstd.ZstdCompressor()
            with cctx.stream_writer(f, closefd=False) as writer:
                yield LineWriter(writer)
        else:
            yield LineWriter(f)
