"""
=============================================================================
EMITTER CONFIGURATION
=============================================================================

Centralized settings for how responses are framed on the wire.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHAT CAN BE CONFIGURED                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FRAMING                                                           │
    │   - chunk_size        bytes read per chunk (8 KB default)           │
    │   - hex_chunk_sizes   decimal (default) or hexadecimal size lines   │
    │   - copy_buffer_size  read size when copying fixed-length bodies    │
    │                                                                      │
    │   STATUS LINE                                                       │
    │   - http_version      optional "HTTP/1.1" prefix                    │
    │                                                                      │
    │   TEXT BODIES                                                       │
    │   - default_encoding  used by set_content(str)                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is plain code: build a ResponseConfig and pass it to each
HTTPResponse. It is validated eagerly so a bad value fails at startup,
not halfway through writing a response.

=============================================================================
"""

import codecs
from dataclasses import dataclass
from typing import Optional


DEFAULT_CHUNK_SIZE = 8192


@dataclass
class ResponseConfig:
    """
    Configuration for response emission.

    Example:
        config = ResponseConfig(chunk_size=4096, http_version="HTTP/1.1")
        response = HTTPResponse(out, config)
    """

    # ─────────────────────────────────────────────────────────────────────
    # FRAMING
    # ─────────────────────────────────────────────────────────────────────

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """
    Maximum payload size of one chunk in a chunked body.
    Every chunk except the last is exactly this size.
    """

    hex_chunk_sizes: bool = False
    """
    Write chunk size lines in hexadecimal instead of decimal.
    Generic HTTP/1.1 clients (curl, browsers, urllib3) expect hex.
    Decimal is the default for byte-compatibility with existing peers.
    """

    copy_buffer_size: int = 64 * 1024
    """
    How many bytes to read at once when copying a fixed-length body.
    Has no effect on the wire format.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATUS LINE
    # ─────────────────────────────────────────────────────────────────────

    http_version: Optional[str] = None
    """
    Protocol version written before the status code.
    None  - status line is "200 OK"
    "HTTP/1.1" - status line is "HTTP/1.1 200 OK"
    """

    # ─────────────────────────────────────────────────────────────────────
    # TEXT BODIES
    # ─────────────────────────────────────────────────────────────────────

    default_encoding: str = "utf-8"
    """Encoding for str bodies when set_content() isn't given one."""

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

        if self.copy_buffer_size < 1:
            raise ValueError(f"copy_buffer_size must be >= 1, got {self.copy_buffer_size}")

        try:
            codecs.lookup(self.default_encoding)
        except LookupError:
            raise ValueError(f"Unknown default_encoding: {self.default_encoding}")

        if self.http_version is not None:
            if not self.http_version or any(c in self.http_version for c in " \t\r\n"):
                raise ValueError(f"Invalid http_version: {self.http_version!r}")
