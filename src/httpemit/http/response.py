"""
=============================================================================
HTTP RESPONSE EMITTER
=============================================================================

Writes one complete HTTP/1.1 response onto an open output channel.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT send() WRITES, IN ORDER                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. STATUS LINE       200 OK\r\n                                    │
    │  2. HEADERS           Content-Length: 2\r\n                         │
    │                       Content-Type: text/plain\r\n                  │
    │  3. COOKIES           Set-Cookie: session=abc\r\n                   │
    │  4. BLANK LINE        \r\n                                          │
    │  5. (flush)           preamble reaches the peer before the body     │
    │  6. BODY              hi                                            │
    │  7. (flush)                                                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BUILDER + STATE MACHINE
=============================================================================

Configuration is fluent and order-independent:

    (HTTPResponse(out)
        .set_status(HTTPStatus.OK)
        .set_header("Content-Type", "text/plain")
        .set_content("hi")
        .add_cookie("session=abc")
        .send())

Every setter returns self, and is only allowed before send():

    ┌─────────────┐   send() ok    ┌────────┐
    │ CONFIGURING │ ─────────────► │  SENT  │
    └─────────────┘                └────────┘
           │
           │  send() raised ResponseWriteError
           ▼
      ┌────────┐
      │ FAILED │
      └────────┘

Anything called on a SENT or FAILED response raises ResponseStateError.
A second preamble can never be written on the same channel.

=============================================================================
BODY HEADERS ARE AUTOMATIC
=============================================================================

Choosing a body sets its framing header on the spot:

    set_content(...)           →  Content-Length: <exact byte count>
    set_chunked_content(...)   →  Transfer-Encoding: chunked
    (nothing)                  →  neither header

So a response can't end up with a fixed body and no Content-Length, or a
chunked body without Transfer-Encoding. Switching bodies replaces the
previous one but leaves the previous framing header in place; don't mix
Content-Length and chunked bodies on one response.

=============================================================================
"""

import errno
import logging
import os
from enum import Enum
from typing import Any, BinaryIO, Optional, Union

from ..config import ResponseConfig
from ..errors import ContentLengthMismatchError, ResponseStateError, ResponseWriteError
from .content import Content
from .headers import CRLF, HEADER_ENCODING, CookieList, CookieValue, HeaderSet, serialize_header_block
from .status import Status


logger = logging.getLogger(__name__)


Body = Union[str, bytes, bytearray, memoryview, "os.PathLike[str]"]


class ResponseState(Enum):
    """Response lifecycle states."""
    CONFIGURING = "configuring"  # Setters allowed, nothing written yet
    SENT = "sent"                # Fully written and flushed
    FAILED = "failed"            # send() hit a transport error


class HTTPResponse:
    """
    A response being assembled for one output channel.

    Args:
        out: Writable binary channel with write() and flush() (a socket
             file from sock.makefile("wb"), an open file, io.BytesIO...).
        config: Framing settings. Validated here.

    Raises:
        ValueError: If config is invalid.
    """

    def __init__(self, out: BinaryIO, config: Optional[ResponseConfig] = None):
        self.config = config or ResponseConfig()
        self.config.validate()

        self._out = out
        self._state = ResponseState.CONFIGURING
        self._status: Optional[Status] = None
        self._headers = HeaderSet()
        self._cookies = CookieList()
        self._content = Content()

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def state(self) -> ResponseState:
        return self._state

    @property
    def status(self) -> Optional[Status]:
        return self._status

    @property
    def headers(self) -> HeaderSet:
        """
        A copy of the current headers.

        Changing the copy has no effect on the response; use set_header()
        and the set_*content() methods, which keep the framing header in
        step with the body.
        """
        return self._headers.copy()

    @property
    def cookies(self) -> CookieList:
        """A copy of the cookies added so far. Use add_cookie() to add more."""
        return self._cookies.copy()

    @property
    def content(self) -> Content:
        return self._content

    # =========================================================================
    # STATUS AND HEADERS
    # =========================================================================

    def set_status(self, status: Any) -> "HTTPResponse":
        """
        Set the response status. Allowed once per response.

        Args:
            status: Status(code, reason), a (code, reason) tuple, or an
                    http.HTTPStatus member.

        Returns:
            Self for method chaining

        Raises:
            ResponseStateError: If the status was already set.
            TypeError: If status isn't a recognized status shape.
        """
        self._ensure_configuring("set status")
        if self._status is not None:
            raise ResponseStateError(f"Status already set to {self._status}")
        self._status = Status.coerce(status)
        return self

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a header, replacing any header with the same name (any case).

        Returns:
            Self for method chaining
        """
        self._ensure_configuring("set header")
        self._headers.set(name, value)
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        """Set the Content-Type header."""
        return self.set_header("Content-Type", content_type)

    def add_cookie(self, cookie: CookieValue) -> "HTTPResponse":
        """
        Append a cookie, written as its own Set-Cookie line.

        Args:
            cookie: Serialized cookie string, http.cookies.Morsel, or an
                    object whose str() is the serialized cookie.

        Returns:
            Self for method chaining
        """
        self._ensure_configuring("add cookie")
        self._cookies.add(cookie)
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def set_content(self, body: Body, encoding: Optional[str] = None) -> "HTTPResponse":
        """
        Set a fixed-length body and its Content-Length header.

        Args:
            body: str (encoded with encoding or config.default_encoding),
                  bytes-like, or a filesystem path (opened immediately).
            encoding: Charset for str bodies.

        Returns:
            Self for method chaining

        Raises:
            ContentSourceError: If a file body can't be opened. The
                                response is left unchanged.
        """
        self._ensure_configuring("set content")

        if isinstance(body, str):
            content = Content.from_text(body, encoding or self.config.default_encoding)
        elif isinstance(body, (bytes, bytearray, memoryview)):
            content = Content.from_bytes(body)
        elif isinstance(body, os.PathLike):
            content = Content.from_path(body)
        else:
            raise TypeError(
                f"Unsupported body type {type(body).__name__}; "
                f"use set_stream_content() for open streams"
            )

        return self._use_content(content)

    def set_stream_content(self, stream: BinaryIO, length: Optional[int] = None) -> "HTTPResponse":
        """
        Set a fixed-length body read from an open stream.

        The stream stays owned by the caller and is not closed.

        Args:
            stream: Readable binary stream positioned at the body start.
            length: Number of bytes to send. Measured from the stream
                    (file size or seekable remainder) when omitted.

        Returns:
            Self for method chaining

        Raises:
            ContentSourceError: If length is omitted and can't be measured.
        """
        self._ensure_configuring("set content")
        return self._use_content(Content.from_stream(stream, length))

    def set_chunked_content(self, stream: BinaryIO) -> "HTTPResponse":
        """
        Set a body of unknown length, sent with chunked transfer encoding.

        Chunk size and size radix come from the response config.

        Returns:
            Self for method chaining
        """
        self._ensure_configuring("set content")
        content = Content.chunked(
            stream,
            chunk_size=self.config.chunk_size,
            hex_sizes=self.config.hex_chunk_sizes,
        )
        return self._use_content(content)

    def _use_content(self, content: Content) -> "HTTPResponse":
        """Swap in a new body and set its framing header in one step."""
        previous = self._content
        if previous.owns_source:
            logger.debug(f"Replacing {previous.kind.value} content, closing its source")
            previous.close()

        self._content = content
        header = content.framing_header()
        if header:
            self._headers.set(*header)
        return self

    # =========================================================================
    # SENDING
    # =========================================================================

    def preamble(self) -> bytes:
        """
        Serialize status line, headers, cookies and the blank line.

        Raises:
            ResponseStateError: If no status was set.
        """
        if self._status is None:
            raise ResponseStateError("Cannot send a response without a status")

        status_line = self._status.line(self.config.http_version) + CRLF
        return (
            status_line.encode(HEADER_ENCODING)
            + serialize_header_block(self._headers, self._cookies)
            + CRLF.encode(HEADER_ENCODING)
        )

    def send(self) -> int:
        """
        Write the whole response to the channel and flush it.

        Blocks until everything is written or a write fails. Can be called
        once.

        Returns:
            Total number of bytes written (preamble + body framing).

        Raises:
            ResponseStateError: If already sent/failed, or no status set.
                                Nothing is written in that case.
            ContentLengthMismatchError: If a fixed body came up short.
            ResponseWriteError: If writing, flushing or reading the body
                                failed. Some bytes may already be on the
                                channel (see bytes_written).
        """
        self._ensure_configuring("send")
        preamble = self.preamble()
        channel = _CountingWriter(self._out)

        try:
            channel.write(preamble)
            channel.flush()
            self._content.write(channel, self.config.copy_buffer_size)
            channel.flush()
        except ContentLengthMismatchError as e:
            self._state = ResponseState.FAILED
            e.bytes_written = channel.bytes_written
            logger.warning(f"Send failed: {e}")
            raise
        except (OSError, ValueError) as e:
            # ValueError covers writes to an already-closed channel
            self._state = ResponseState.FAILED
            logger.warning(f"Send failed after {channel.bytes_written} bytes: {e}")
            raise ResponseWriteError(
                f"Failed to send response: {e}", channel.bytes_written
            ) from e
        except Exception:
            self._state = ResponseState.FAILED
            raise
        finally:
            self._content.close()

        self._state = ResponseState.SENT
        logger.debug(
            f"Sent {self._status} ({self._content.kind.value} body, "
            f"{channel.bytes_written} bytes)"
        )
        return channel.bytes_written

    def _ensure_configuring(self, action: str) -> None:
        if self._state is not ResponseState.CONFIGURING:
            raise ResponseStateError(f"Cannot {action}: response already {self._state.value}")

    def __repr__(self) -> str:
        return (
            f"<HTTPResponse {self._status or 'no status'} "
            f"{self._content.kind.value} {self._state.value}>"
        )


class _CountingWriter:
    """
    Channel wrapper that writes whole buffers and counts accepted bytes.

    Raw channels (unbuffered socket files, FileIO) may accept only part
    of a buffer per write(), so the rest is written in a loop, the same
    way socket.sendall() does it.
    """

    def __init__(self, out: BinaryIO):
        self._out = out
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        view = memoryview(data)
        while view:
            written = self._out.write(view)
            if not written:
                # None from a non-blocking channel, or a channel that stalled
                raise BlockingIOError(
                    errno.EAGAIN, "Output channel accepted no bytes", 0
                )
            self.bytes_written += written
            view = view[written:]
        return len(data)

    def flush(self) -> None:
        self._out.flush()


# =============================================================================
# CONVENIENCE
# =============================================================================

def send_response(
    out: BinaryIO,
    status: Any,
    body: Optional[Body] = None,
    headers: Optional[dict] = None,
    config: Optional[ResponseConfig] = None,
) -> int:
    """
    Build and send a simple fixed-length (or empty) response in one call.

    Example:
        send_response(out, HTTPStatus.OK, "hi", {"Content-Type": "text/plain"})

    Returns:
        Total bytes written.
    """
    response = HTTPResponse(out, config).set_status(status)
    for name, value in (headers or {}).items():
        response.set_header(name, value)
    if body is not None:
        response.set_content(body)
    return response.send()
