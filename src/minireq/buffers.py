"""Append-only accumulators for incrementally received response data.

Transports hand data over in chunks, possibly many per response, so the
body and header lists are assembled here one chunk at a time.
"""

from __future__ import annotations

from typing import Iterator, Union

from .errors import AllocationFailure, MalformedInput

BytesLike = Union[bytes, bytearray, memoryview]

TERMINATOR = b"\0"
END_OF_HEADERS = b"\r\n"
HEADER_ENCODING = "iso-8859-1"


def _bounded_length(chunk: BytesLike, chunk_len: int | None) -> int:
    """Return the number of bytes to copy from ``chunk``."""
    available = len(chunk)
    if chunk_len is None:
        return available
    if chunk_len < 0 or chunk_len > available:
        raise MalformedInput(
            f"chunk length {chunk_len} outside of 0..{available}"
        )
    return chunk_len


class ByteAccumulator:
    """Growable byte buffer that is always NUL-terminated.

    Every append rebuilds the buffer at exactly ``length + chunk_len + 1``
    bytes, so memory tracks what was received. The new buffer replaces the
    old one only once it is complete, so a failed append leaves the
    accumulator untouched.
    """

    __slots__ = ("_buffer", "_length")

    def __init__(self) -> None:
        self._buffer = bytearray(TERMINATOR)
        self._length = 0

    def append(self, chunk: BytesLike, chunk_len: int | None = None) -> int:
        """Append ``chunk_len`` bytes of ``chunk`` and return the count consumed.

        Args:
            chunk: Raw bytes from the transport. May contain NUL bytes.
            chunk_len: Number of bytes to take from ``chunk``. Defaults to
                the whole chunk.

        Raises:
            MalformedInput: ``chunk_len`` is negative or longer than ``chunk``
            AllocationFailure: The buffer could not be grown
        """
        size = _bounded_length(chunk, chunk_len)
        if size == 0:
            return 0

        try:
            grown = bytearray(self._length + size + 1)
            grown[: self._length] = memoryview(self._buffer)[: self._length]
            grown[self._length : self._length + size] = memoryview(chunk)[:size]
            grown[-1] = 0
        except MemoryError as e:
            raise AllocationFailure(
                f"cannot grow body buffer to {self._length + size + 1} bytes"
            ) from e

        self._buffer = grown
        self._length += size
        return size

    def as_bytes(self) -> bytes:
        """Return the content without the terminator."""
        return bytes(self._buffer[: self._length])

    def terminated(self) -> bytes:
        """Return the content followed by its NUL terminator."""
        return bytes(self._buffer)

    def text(self, encoding: str = "utf-8", errors: str = "replace") -> str:
        return self.as_bytes().decode(encoding, errors)

    def __len__(self) -> int:
        return self._length

    def __bytes__(self) -> bytes:
        return self.as_bytes()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteAccumulator):
            return self.as_bytes() == other.as_bytes()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.as_bytes() == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ByteAccumulator(len={self._length})"


class LineAccumulator:
    """Ordered list of independently copied lines.

    Used for headers received from the server and for headers the caller
    sent. A line that is exactly CRLF marks the end of a header block and
    is dropped.
    """

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        self._lines: list[bytes] = []

    def append_line(self, raw: BytesLike | str, raw_len: int | None = None) -> int:
        """Copy ``raw_len`` bytes of ``raw`` as a new line and return the count.

        ``str`` input is encoded as ISO-8859-1, the HTTP header charset.

        Raises:
            MalformedInput: ``raw_len`` is negative or longer than ``raw``
            AllocationFailure: The line could not be copied
        """
        if isinstance(raw, str):
            raw = raw.encode(HEADER_ENCODING)
        size = _bounded_length(raw, raw_len)

        try:
            line = bytes(memoryview(raw)[:size])
        except MemoryError as e:
            raise AllocationFailure(f"cannot copy {size} byte header line") from e

        if line == END_OF_HEADERS:
            return size

        try:
            self._lines.append(line)
        except MemoryError as e:
            raise AllocationFailure("cannot grow header list") from e
        return size

    def count(self) -> int:
        return len(self._lines)

    def get(self, index: int) -> bytes:
        """Return the line at ``index``.

        Raises:
            IndexError: ``index`` is outside ``0 <= index < count()``
        """
        if not 0 <= index < len(self._lines):
            raise IndexError(
                f"line index {index} out of range for {len(self._lines)} lines"
            )
        return self._lines[index]

    def decoded(self) -> list[str]:
        """Return all lines decoded as ISO-8859-1 strings."""
        return [line.decode(HEADER_ENCODING) for line in self._lines]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[bytes]:
        return iter(tuple(self._lines))

    def __repr__(self) -> str:
        return f"LineAccumulator(count={len(self._lines)})"
