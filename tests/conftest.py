"""
pytest configuration and fixtures.
"""

import io
import socket
from typing import Callable, Generator, List, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class RecordingWriter(io.RawIOBase):
    """Output channel that records every write and flush call."""

    def __init__(self):
        self.data = b""
        self.writes: List[bytes] = []
        self.flushes = 0
        self.flushed_at: List[int] = []  # len(data) at each flush

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        chunk = bytes(b)
        self.writes.append(chunk)
        self.data += chunk
        return len(chunk)

    def flush(self) -> None:
        self.flushes += 1
        self.flushed_at.append(len(self.data))


class FailingWriter(RecordingWriter):
    """Output channel that breaks after accepting fail_after bytes."""

    def __init__(self, fail_after: int):
        super().__init__()
        self.fail_after = fail_after

    def write(self, b) -> int:
        if len(self.data) + len(b) > self.fail_after:
            raise BrokenPipeError("Connection reset by peer")
        return super().write(b)


class TrickleWriter(RecordingWriter):
    """Raw output channel that accepts at most max_write bytes per call."""

    def __init__(self, max_write: int):
        super().__init__()
        self.max_write = max_write

    def write(self, b) -> int:
        return super().write(bytes(b)[:self.max_write])


class FailingReader(io.RawIOBase):
    """Body source that yields some data, then raises on read."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)
        self.reads = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        data = self._data.read(size)
        if not data:
            raise OSError("Disk read error")
        return data


def parse_chunked(body: bytes) -> Tuple[List[int], bytes, bytes]:
    """
    Decode a chunked body with decimal size lines.

    Returns:
        (declared chunk sizes, reassembled payload, bytes after terminator)
    """
    sizes = []
    payload = b""
    pos = 0
    while True:
        line_end = body.index(b"\r\n", pos)
        size = int(body[pos:line_end].decode("ascii"))
        pos = line_end + 2
        if size == 0:
            assert body[pos:pos + 2] == b"\r\n", "missing empty trailer"
            return sizes, payload, body[pos + 2:]
        chunk = body[pos:pos + size]
        assert len(chunk) == size, "chunk shorter than declared size"
        assert body[pos + size:pos + size + 2] == b"\r\n", "chunk not CRLF-terminated"
        sizes.append(size)
        payload += chunk
        pos += size + 2


@pytest.fixture
def out() -> RecordingWriter:
    """In-memory output channel."""
    return RecordingWriter()


@pytest.fixture
def failing_writer() -> Callable[[int], FailingWriter]:
    """Factory for output channels that break after N bytes."""
    return FailingWriter


@pytest.fixture
def trickle_writer() -> Callable[[int], TrickleWriter]:
    """Factory for raw channels that take only a few bytes per write."""
    return TrickleWriter


@pytest.fixture
def failing_reader() -> Callable[[bytes], FailingReader]:
    """Factory for body sources that fail after their data runs out."""
    return FailingReader


@pytest.fixture
def decode_chunked() -> Callable[[bytes], Tuple[List[int], bytes, bytes]]:
    """Chunked body decoder."""
    return parse_chunked


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A small file on disk to use as a response body."""
    path = tmp_path / "hello.txt"
    path.write_bytes(b"Hello from disk\n")
    return path


@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """Connected (server, client) sockets."""
    server, client = socket.socketpair()
    server.settimeout(5.0)
    client.settimeout(5.0)

    yield server, client

    server.close()
    client.close()
