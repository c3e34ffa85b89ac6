"""
=============================================================================
CHUNKED TRANSFER ENCODING
=============================================================================

When a response body's length isn't known up front, it can't be announced
with Content-Length. Instead the body is cut into CHUNKS, each one telling
the receiver how big it is:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CHUNKED BODY ON THE WIRE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   4\r\n              ← size of the next payload                     │
    │   abcd\r\n           ← exactly 4 bytes, then CRLF                   │
    │   3\r\n                                                             │
    │   efg\r\n                                                           │
    │   0\r\n              ← zero-size chunk = end of body                │
    │   \r\n               ← empty trailer section                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The receiver never needs to know the total length: it reads a size line,
reads that many bytes, and repeats until it sees size 0.

=============================================================================
SIZE LINES: DECIMAL OR HEX?
=============================================================================

RFC 9112 says chunk sizes are hexadecimal. Peers of this emitter have
historically read them as decimal, so decimal is the default. Set
hex_sizes=True (ResponseConfig.hex_chunk_sizes) when talking to generic
HTTP clients. Sizes below 10 are identical in both.

=============================================================================
STREAMING GUARANTEES
=============================================================================

    - Memory: one chunk_size buffer at a time, no matter the body size
    - Reads are passed through as-is, never merged or split. With
      buffered sources (files, BytesIO) every chunk is exactly chunk_size
      bytes except possibly the last
    - A chunk's size line is written only after its payload was read,
      so a failing read can never leave a size line promising bytes that
      never come
    - The source is never read again after it reports end-of-stream

=============================================================================
"""

import selectors
import time
from typing import BinaryIO

from ..config import DEFAULT_CHUNK_SIZE


CRLF = b"\r\n"

# Zero-size chunk followed by an empty trailer section
LAST_CHUNK = b"0" + CRLF + CRLF

# Seconds between reads of a non-blocking source with no file descriptor
POLL_INTERVAL = 0.01


def format_chunk_size(size: int, hex_sizes: bool = False) -> bytes:
    """
    Format a chunk size line (without the CRLF).

    >>> format_chunk_size(26)
    b'26'
    >>> format_chunk_size(26, hex_sizes=True)
    b'1A'
    """
    text = format(size, "X") if hex_sizes else str(size)
    return text.encode("ascii")


def wait_readable(source: BinaryIO) -> None:
    """
    Block until a non-blocking source that just returned None can be read.

    Sources backed by a file descriptor wait on a selector. Anything else
    (or a descriptor the selector refuses) is polled after a short sleep.
    """
    try:
        fd = source.fileno()
    except (AttributeError, OSError, ValueError):
        time.sleep(POLL_INTERVAL)
        return

    with selectors.DefaultSelector() as selector:
        try:
            selector.register(fd, selectors.EVENT_READ)
        except (OSError, ValueError):
            time.sleep(POLL_INTERVAL)
            return
        selector.select()


def write_chunked(
    source: BinaryIO,
    out: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    hex_sizes: bool = False,
) -> int:
    """
    Copy source to out using chunked transfer encoding.

    Reads up to chunk_size bytes at a time. Each non-empty read becomes one
    chunk; the first empty read (b"") ends the body with the terminal
    zero-size chunk.

    A read returning None (non-blocking source with nothing available yet)
    is not end-of-stream: nothing is written, and the next read waits
    until the source is readable again.

    Args:
        source: Readable binary stream. Consumed to exhaustion.
        out: Writable binary channel.
        chunk_size: Maximum payload per chunk.
        hex_sizes: Write size lines in hexadecimal.

    Returns:
        Number of payload bytes framed (excluding size lines and CRLFs).

    Raises:
        ValueError: If chunk_size is not positive.
        Whatever source.read() or out.write() raise, unchanged.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    total = 0
    while True:
        data = source.read(chunk_size)
        if data is None:
            wait_readable(source)
            continue
        if not data:
            break

        # Size line, payload, CRLF: one self-delimited chunk
        out.write(format_chunk_size(len(data), hex_sizes) + CRLF)
        out.write(data)
        out.write(CRLF)
        total += len(data)

    out.write(LAST_CHUNK)
    return total
