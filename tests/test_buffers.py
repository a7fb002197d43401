"""Tests for body and header accumulators."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from minireq.buffers import ByteAccumulator, LineAccumulator
from minireq.errors import AllocationFailure, MalformedInput


class TestByteAccumulator:
    """Test body buffer growth."""

    def test_new_is_empty_and_terminated(self) -> None:
        acc = ByteAccumulator()
        assert len(acc) == 0
        assert acc.as_bytes() == b""
        assert acc.terminated() == b"\0"

    def test_chunks_concatenate_in_order(self) -> None:
        acc = ByteAccumulator()
        for chunk in (b"Hel", b"lo", b", ", b"world"):
            acc.append(chunk, len(chunk))
        assert acc.as_bytes() == b"Hello, world"
        assert acc.terminated() == b"Hello, world\0"
        assert len(acc) == 12

    def test_append_returns_consumed_count(self) -> None:
        acc = ByteAccumulator()
        assert acc.append(b"abcdef") == 6
        assert acc.append(b"xyz", 2) == 2
        assert acc.as_bytes() == b"abcdefxy"

    def test_embedded_nul_bytes_preserved(self) -> None:
        acc = ByteAccumulator()
        acc.append(b"a\0b")
        acc.append(b"\0\0")
        assert acc.as_bytes() == b"a\0b\0\0"
        assert len(acc) == 5

    def test_zero_length_append_is_noop(self) -> None:
        acc = ByteAccumulator()
        acc.append(b"data")
        assert acc.append(b"", 0) == 0
        assert acc.append(b"ignored", 0) == 0
        assert acc.as_bytes() == b"data"

    def test_buffer_grows_to_exact_size(self) -> None:
        acc = ByteAccumulator()
        acc.append(b"abc")
        assert len(acc.terminated()) == 4
        acc.append(b"de")
        assert len(acc.terminated()) == 6

    def test_accepts_bytearray_and_memoryview(self) -> None:
        acc = ByteAccumulator()
        acc.append(bytearray(b"ab"))
        acc.append(memoryview(b"cd"))
        assert acc == b"abcd"

    @pytest.mark.parametrize("bad_len", [-1, 4])
    def test_invalid_length_rejected(self, bad_len: int) -> None:
        acc = ByteAccumulator()
        with pytest.raises(MalformedInput):
            acc.append(b"abc", bad_len)
        assert len(acc) == 0

    def test_allocation_failure_leaves_state_untouched(self) -> None:
        acc = ByteAccumulator()
        acc.append(b"keep")
        with patch("minireq.buffers.bytearray", side_effect=MemoryError, create=True):
            with pytest.raises(AllocationFailure):
                acc.append(b"more")
        assert acc.as_bytes() == b"keep"
        assert acc.terminated() == b"keep\0"

    def test_allocation_failure_is_memory_error(self) -> None:
        assert issubclass(AllocationFailure, MemoryError)

    def test_many_small_chunks(self) -> None:
        acc = ByteAccumulator()
        expected = bytes(range(256)) * 4
        for i in range(0, len(expected), 7):
            acc.append(expected[i:i + 7])
        assert acc.as_bytes() == expected
        assert acc.terminated()[-1] == 0

    def test_text_decodes_utf8(self) -> None:
        acc = ByteAccumulator()
        acc.append("héllo".encode("utf-8"))
        assert acc.text() == "héllo"


class TestLineAccumulator:
    """Test header line accumulation."""

    def test_new_is_empty(self) -> None:
        acc = LineAccumulator()
        assert acc.count() == 0
        assert list(acc) == []

    def test_lines_kept_in_order_with_exact_length(self) -> None:
        acc = LineAccumulator()
        lines = [b"HTTP/1.1 200 OK\r\n", b"Content-Type: text/plain\r\n", b"X-A: 1\r\n"]
        for line in lines:
            assert acc.append_line(line, len(line)) == len(line)
        assert acc.count() == 3
        assert [acc.get(i) for i in range(3)] == lines

    def test_crlf_sentinel_dropped(self) -> None:
        acc = LineAccumulator()
        acc.append_line(b"X-A: 1\r\n")
        assert acc.append_line(b"\r\n", 2) == 2
        assert acc.count() == 1
        assert b"\r\n" not in list(acc)

    def test_crlf_inside_longer_chunk_kept(self) -> None:
        acc = LineAccumulator()
        acc.append_line(b"\r\n\r\n")
        acc.append_line(b"\r\nX", 2)
        assert acc.count() == 1
        assert acc.get(0) == b"\r\n\r\n"

    def test_duplicates_allowed(self) -> None:
        acc = LineAccumulator()
        acc.append_line(b"Set-Cookie: a=1\r\n")
        acc.append_line(b"Set-Cookie: a=1\r\n")
        assert acc.count() == 2

    def test_length_bounds_copy(self) -> None:
        acc = LineAccumulator()
        acc.append_line(b"X-Long: value\r\ngarbage", 15)
        assert acc.get(0) == b"X-Long: value\r\n"

    def test_str_input_encoded_latin1(self) -> None:
        acc = LineAccumulator()
        acc.append_line("X-Name: café")
        assert acc.get(0) == b"X-Name: caf\xe9"
        assert acc.decoded() == ["X-Name: café"]

    def test_stored_line_is_a_copy(self) -> None:
        acc = LineAccumulator()
        raw = bytearray(b"X-A: 1\r\n")
        acc.append_line(raw)
        raw[0:1] = b"Y"
        assert acc.get(0) == b"X-A: 1\r\n"

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_get_bounds_checked(self, index: int) -> None:
        acc = LineAccumulator()
        acc.append_line(b"X-A: 1\r\n")
        with pytest.raises(IndexError):
            acc.get(index)

    def test_invalid_length_rejected(self) -> None:
        acc = LineAccumulator()
        with pytest.raises(MalformedInput):
            acc.append_line(b"abc", 10)
        assert acc.count() == 0
