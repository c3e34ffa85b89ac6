"""
=============================================================================
RESPONSE ERRORS
=============================================================================

Every failure the emitter can produce is one of three kinds:

    ┌─────────────────────┬───────────────────────────────────────────────┐
    │  Kind               │  When / What happens                          │
    ├─────────────────────┼───────────────────────────────────────────────┤
    │  Configuration      │  Body source can't be opened or measured.     │
    │  ContentSourceError │  Raised by set_content(). Response unchanged, │
    │                     │  still usable.                                │
    ├─────────────────────┼───────────────────────────────────────────────┤
    │  Transport          │  Writing/flushing the channel (or reading     │
    │  ResponseWriteError │  the body) failed during send(). Fatal for    │
    │                     │  this response. Some bytes may be on the wire.│
    ├─────────────────────┼───────────────────────────────────────────────┤
    │  Misuse             │  send() twice, mutating after send(), or      │
    │  ResponseStateError │  sending without a status. Never re-emits a   │
    │                     │  preamble.                                    │
    └─────────────────────┴───────────────────────────────────────────────┘

The emitter never formats errors for humans; it raises and the caller
(the connection handler) decides whether to log and tear down.

=============================================================================
"""

from typing import Optional


class ResponseError(Exception):
    """Base class for all response emitter errors."""


class ContentSourceError(ResponseError, ValueError):
    """
    Raised when a body source cannot be used.

    Examples: a file that doesn't exist, or a stream whose length can't
    be determined for a Content-Length response.
    """


class ResponseStateError(ResponseError, RuntimeError):
    """Raised when the response is used outside its configuring phase."""


class ResponseWriteError(ResponseError, OSError):
    """
    Raised when the response could not be written to the output channel.

    The original error is chained as __cause__. bytes_written tells the
    caller how much of the response already reached the channel, which is
    useful to decide whether the connection can still be reused (it can't
    if anything was written).
    """

    def __init__(self, message: str, bytes_written: int = 0):
        super().__init__(message)
        self.bytes_written = bytes_written  # Bytes accepted by the channel


class ContentLengthMismatchError(ResponseWriteError):
    """Raised when a fixed-length body source ends before its declared length."""

    def __init__(
        self,
        expected: int,
        actual: int,
        bytes_written: int = 0,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Body source ended after {actual} of {expected} declared bytes",
            bytes_written,
        )
        self.expected = expected
        self.actual = actual
