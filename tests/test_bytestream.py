"""
Unit Tests for the Byte Stream Reader
=====================================

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import io

import pytest

from bytepeek.bytestream import CHUNK_SIZE, drain


class ChunkedSource(io.RawIOBase):
    """Raw stream that hands out predetermined chunk sizes."""

    def __init__(self, sizes, fail_at=None):
        self.sizes = list(sizes)
        self.fail_at = fail_at
        self.reads = 0
        self.produced = bytearray()
        self.buffer = None

    def readable(self):
        return True

    def readinto(self, buffer):
        self.buffer = buffer
        if self.fail_at is not None and self.reads == self.fail_at:
            raise OSError("device went away")
        self.reads += 1
        if not self.sizes:
            return 0
        size = self.sizes.pop(0)
        chunk = bytes((self.reads + i) % 256 for i in range(size))
        buffer[:size] = chunk
        self.produced += chunk
        return size


class ReadOnlySource:
    """Source with read() only, no readinto()."""

    def __init__(self, data):
        self._stream = io.BytesIO(data)
        self.closed = False

    def read(self, size):
        return self._stream.read(size)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


class TestDrain:
    """Tests for drain()."""

    def test_short_and_full_chunks_concatenated(self):
        source = ChunkedSource([1000, 4096, 4096, 37])

        data = drain(source)

        assert len(data) == 1000 + 4096 + 4096 + 37
        assert data == bytes(source.produced)

    def test_source_closed_after_success(self):
        source = ChunkedSource([10])
        drain(source)

        assert source.closed

    def test_source_closed_after_failure(self):
        source = ChunkedSource([100, 100], fail_at=1)

        with pytest.raises(OSError):
            drain(source)

        assert source.closed

    def test_buffer_view_released_after_failure(self):
        source = ChunkedSource([100, 100], fail_at=1)

        with pytest.raises(OSError):
            drain(source)

        # Resizing fails with BufferError while a memoryview still exports it
        source.buffer.extend(b"x")
        assert len(source.buffer) == CHUNK_SIZE + 1

    def test_empty_source(self):
        assert drain(ChunkedSource([])) == b""

    def test_single_byte_chunks(self):
        source = ChunkedSource([1] * 50)

        assert drain(source) == bytes(source.produced)

    def test_read_only_source(self):
        payload = bytes(range(256)) * 40
        source = ReadOnlySource(payload)

        assert drain(source) == payload
        assert source.closed

    def test_bytes_io(self):
        payload = b"\x00\xff" * (CHUNK_SIZE + 3)

        assert drain(io.BytesIO(payload)) == payload

    def test_file(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"abc" * 5000)

        assert drain(open(path, "rb")) == b"abc" * 5000
