"""
=============================================================================
HTTP RESPONSE FRAMING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE (response.py)                                              │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Fluent HTTPResponse: status, headers, cookies, body → send()        │
    └─────────────────────────────────────────────────────────────────────┘
            │ uses
            ▼
    ┌───────────────────────┐ ┌───────────────────────┐ ┌─────────────────┐
    │ HEADERS (headers.py)  │ │ CONTENT (content.py)  │ │ STATUS          │
    │ HeaderSet, CookieList │ │ EMPTY / FIXED /       │ │ (status.py)     │
    │ header block bytes    │ │ CHUNKED bodies        │ │ (code, reason)  │
    └───────────────────────┘ └───────────────────────┘ └─────────────────┘
                                        │ CHUNKED uses
                                        ▼
                              ┌───────────────────────┐
                              │ CHUNKED (chunked.py)  │
                              │ size\r\ndata\r\n...   │
                              │ 0\r\n\r\n             │
                              └───────────────────────┘

=============================================================================
"""

from .chunked import CRLF, LAST_CHUNK, format_chunk_size, write_chunked
from .content import CHUNKED, CONTENT_LENGTH, TRANSFER_ENCODING, Content, ContentKind
from .headers import SET_COOKIE, CookieList, HeaderSet, serialize_header_block
from .response import HTTPResponse, ResponseState, send_response
from .status import Status

__all__ = [
    # Response assembly
    "HTTPResponse",
    "ResponseState",
    "send_response",
    "Status",

    # Headers and cookies
    "HeaderSet",
    "CookieList",
    "serialize_header_block",
    "SET_COOKIE",

    # Bodies
    "Content",
    "ContentKind",
    "CONTENT_LENGTH",
    "TRANSFER_ENCODING",
    "CHUNKED",

    # Chunked framing
    "write_chunked",
    "format_chunk_size",
    "LAST_CHUNK",
    "CRLF",
]
