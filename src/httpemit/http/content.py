"""
=============================================================================
RESPONSE CONTENT
=============================================================================

A response body comes in exactly one of three shapes. Each shape knows
which framing header it needs and how to write itself:

    ┌──────────┬──────────────────────────┬─────────────────────────────────┐
    │  Kind    │  Framing header          │  write(out)                     │
    ├──────────┼──────────────────────────┼─────────────────────────────────┤
    │  EMPTY   │  (none)                  │  nothing                        │
    │  FIXED   │  Content-Length: <n>     │  exactly n raw bytes            │
    │  CHUNKED │  Transfer-Encoding:      │  size-prefixed chunks, then     │
    │          │  chunked                 │  0\r\n\r\n                      │
    └──────────┴──────────────────────────┴─────────────────────────────────┘

The set of shapes is closed, so Content is one frozen dataclass tagged by
ContentKind with a single write() that dispatches on the tag.

=============================================================================
WHERE BODIES COME FROM
=============================================================================

    Content.from_text("hi")             → FIXED, 2 bytes (UTF-8)
    Content.from_bytes(b"...")          → FIXED, len(data)
    Content.from_path("report.pdf")     → FIXED, file size (file opened now)
    Content.from_stream(f, length=n)    → FIXED, caller's open stream
    Content.chunked(stream)             → CHUNKED, length unknown

Sources are read exactly once, at send time. A file opened by from_path()
belongs to the Content (owns_source=True) and is closed by close(); streams
handed in by the caller are left open for the caller to close.

=============================================================================
"""

import io
import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional, Tuple, Union

from ..config import DEFAULT_CHUNK_SIZE
from ..errors import ContentLengthMismatchError, ContentSourceError
from .chunked import wait_readable, write_chunked


logger = logging.getLogger(__name__)


CONTENT_LENGTH = "Content-Length"
TRANSFER_ENCODING = "Transfer-Encoding"
CHUNKED = "chunked"

DEFAULT_COPY_BUFFER_SIZE = 64 * 1024


class ContentKind(Enum):
    """The three body shapes."""
    EMPTY = "empty"
    FIXED = "fixed"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class Content:
    """
    A response body and how to frame it.

    Use the classmethod constructors rather than building one directly.
    Content() with no arguments is the empty body.

    Attributes:
        kind: Which shape this body has.
        source: Readable binary stream (None for EMPTY).
        length: Declared byte count (FIXED only).
        chunk_size: Payload size per chunk (CHUNKED only).
        hex_sizes: Write chunk sizes in hex (CHUNKED only).
        owns_source: True when this Content opened the source itself.
    """

    kind: ContentKind = ContentKind.EMPTY
    source: Optional[BinaryIO] = None
    length: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    hex_sizes: bool = False
    owns_source: bool = False

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def empty(cls) -> "Content":
        """No body at all."""
        return cls()

    @classmethod
    def fixed(cls, source: BinaryIO, length: int, owns_source: bool = False) -> "Content":
        """A body of known length, written without framing."""
        if length < 0:
            raise ContentSourceError(f"Content length must be >= 0, got {length}")
        return cls(ContentKind.FIXED, source, length, owns_source=owns_source)

    @classmethod
    def chunked(
        cls,
        source: BinaryIO,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        hex_sizes: bool = False,
    ) -> "Content":
        """A body of unknown length, written with chunked framing."""
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        return cls(ContentKind.CHUNKED, source, chunk_size=chunk_size, hex_sizes=hex_sizes)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "Content":
        """Fixed content from an in-memory buffer."""
        data = bytes(data)
        return cls.fixed(io.BytesIO(data), len(data))

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "Content":
        """Fixed content from a string, encoded with the given charset."""
        return cls.from_bytes(text.encode(encoding))

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"]) -> "Content":
        """
        Fixed content from a file on disk.

        The file is opened immediately, so a missing or unreadable file
        fails here rather than halfway through sending a response.

        Raises:
            ContentSourceError: If the file can't be opened (missing,
                                a directory, no permission).
        """
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise ContentSourceError(f"Cannot open body file {os.fspath(path)!r}: {e}") from e

        try:
            length = os.fstat(stream.fileno()).st_size
        except OSError as e:
            stream.close()
            raise ContentSourceError(f"Cannot stat body file {os.fspath(path)!r}: {e}") from e

        return cls.fixed(stream, length, owns_source=True)

    @classmethod
    def from_stream(cls, stream: BinaryIO, length: Optional[int] = None) -> "Content":
        """
        Fixed content from a caller-owned stream.

        Args:
            stream: Open readable binary stream, positioned at the body start.
            length: Body length. If omitted, it's measured from the stream
                    (remaining bytes of a file or seekable stream).

        Raises:
            ContentSourceError: If length is omitted and can't be measured.
        """
        if length is None:
            length = _remaining_length(stream)
        return cls.fixed(stream, length)

    # =========================================================================
    # BEHAVIOR
    # =========================================================================

    def framing_header(self) -> Optional[Tuple[str, str]]:
        """The header this body needs so the receiver can find its end."""
        if self.kind is ContentKind.FIXED:
            return (CONTENT_LENGTH, str(self.length))
        if self.kind is ContentKind.CHUNKED:
            return (TRANSFER_ENCODING, CHUNKED)
        return None

    def write(self, out: BinaryIO, buffer_size: int = DEFAULT_COPY_BUFFER_SIZE) -> int:
        """
        Write the body to the output channel.

        Args:
            out: Writable binary channel.
            buffer_size: Read size for FIXED copies (no effect on output).

        Returns:
            Number of body payload bytes written.

        Raises:
            ContentLengthMismatchError: If a FIXED source ends early.
            Whatever the source or channel raise, unchanged.
        """
        if self.kind is ContentKind.FIXED:
            return _copy_exact(self.source, out, self.length, buffer_size)
        if self.kind is ContentKind.CHUNKED:
            return write_chunked(self.source, out, self.chunk_size, self.hex_sizes)
        return 0

    def close(self) -> None:
        """Close the source if this Content opened it."""
        if self.owns_source and self.source is not None and not self.source.closed:
            try:
                self.source.close()
            except OSError as e:
                logger.warning(f"Failed to close body source: {e}")


# =============================================================================
# HELPERS
# =============================================================================

def _copy_exact(source: BinaryIO, out: BinaryIO, length: int, buffer_size: int) -> int:
    """
    Copy exactly length bytes from source to out.

    Never reads past length, so bytes beyond the declared size can't leak
    onto the connection as a bogus next response.
    """
    remaining = length
    while remaining > 0:
        data = source.read(min(buffer_size, remaining))
        if data is None:
            wait_readable(source)
            continue
        if not data:
            raise ContentLengthMismatchError(expected=length, actual=length - remaining)
        out.write(data)
        remaining -= len(data)
    return length


def _remaining_length(stream: BinaryIO) -> int:
    """
    Measure how many bytes are left in a stream, without consuming it.

    Only regular files report a meaningful size. Pipes and character
    devices stat as 0 bytes, so they're refused rather than
    declared empty.
    """
    try:
        info = os.fstat(stream.fileno())
    except (AttributeError, OSError, ValueError):
        info = None

    if info is not None:
        if not stat.S_ISREG(info.st_mode):
            raise ContentSourceError(
                "Body stream is not a regular file; pass length= or use chunked content"
            )
        try:
            return max(info.st_size - stream.tell(), 0)
        except (AttributeError, OSError, ValueError):
            pass

    try:
        if stream.seekable():
            position = stream.tell()
            end = stream.seek(0, io.SEEK_END)
            stream.seek(position)
            return max(end - position, 0)
    except (AttributeError, OSError, ValueError):
        pass

    raise ContentSourceError(
        "Cannot determine body length of stream; pass length= or use chunked content"
    )
