"""
=============================================================================
HTTPEMIT - Byte-Exact HTTP/1.1 Response Emitter
=============================================================================

Serializes a status, headers, cookies and a body onto an output channel
you already have open (a socket file, a pipe, a BytesIO in tests).

It does NOT listen on sockets, parse requests, or manage connections.
The connection handler owns those; this package only writes responses.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpemit/
    ├── __init__.py          # This file - package exports
    ├── config.py            # ResponseConfig dataclass
    ├── errors.py            # Exception taxonomy
    └── http/
        ├── response.py      # HTTPResponse (fluent builder + send)
        ├── headers.py       # Case-insensitive headers, cookie list
        ├── content.py       # Empty / fixed / chunked bodies
        ├── chunked.py       # Chunked transfer-encoding framer
        └── status.py        # (code, reason) status pair

=============================================================================
QUICK START
=============================================================================

    from http import HTTPStatus
    from httpemit import HTTPResponse

    with sock.makefile("wb") as out:
        (HTTPResponse(out)
            .set_status(HTTPStatus.OK)
            .set_content_type("text/plain")
            .set_content("hi")
            .add_cookie("session=abc; HttpOnly")
            .send())

    # Streaming a body of unknown length
    with open("big.log", "rb") as log, sock.makefile("wb") as out:
        (HTTPResponse(out)
            .set_status(HTTPStatus.OK)
            .set_chunked_content(log)
            .send())

=============================================================================
"""

from .config import ResponseConfig
from .errors import (
    ContentLengthMismatchError,
    ContentSourceError,
    ResponseError,
    ResponseStateError,
    ResponseWriteError,
)
from .http import (
    Content,
    ContentKind,
    CookieList,
    HeaderSet,
    HTTPResponse,
    ResponseState,
    Status,
    send_response,
    write_chunked,
)

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "HTTPResponse",
    "ResponseConfig",
    "ResponseState",
    "Status",

    # Building blocks
    "HeaderSet",
    "CookieList",
    "Content",
    "ContentKind",
    "write_chunked",
    "send_response",

    # Errors
    "ResponseError",
    "ContentSourceError",
    "ResponseStateError",
    "ResponseWriteError",
    "ContentLengthMismatchError",
]
