"""
=============================================================================
HEADER AND COOKIE BLOCK
=============================================================================

Everything between the status line and the body:

    Content-Length: 2\r\n            ┐
    Content-Type: text/plain\r\n     ├─ headers, sorted by name (ignoring case)
    X-Request-Id: a1b2\r\n           ┘
    Set-Cookie: session=abc\r\n      ┐
    Set-Cookie: theme=dark\r\n       ┘─ cookies, in the order they were added
    \r\n                             ← written by the response, not here

=============================================================================
CASE-INSENSITIVE HEADERS
=============================================================================

HTTP header names are case-insensitive: "Content-Type", "content-type" and
"CONTENT-TYPE" are the same header. A response must never carry two of
them, so HeaderSet stores one entry per lowercased name:

    headers.set("Content-Type", "text/html")
    headers.set("content-type", "text/plain")

    _entries = {"content-type": ("Content-Type", "text/plain")}
                 ─────┬──────    ──────┬──────   ─────┬─────
                      │                │              │
                  lookup key     written name    latest value

The name is written with the casing it had the first time it was set;
later sets with another casing only replace the value.

=============================================================================
WHY COOKIES ARE SEPARATE
=============================================================================

Set-Cookie is the one header that legitimately appears many times in a
response, one line per cookie. Folding cookies into one comma-joined
value breaks them (Expires dates contain commas), so cookies live in
their own append-only list instead of the header set.

=============================================================================
"""

from http.cookies import Morsel
from typing import Dict, Iterator, List, Optional, Tuple, Union


CRLF = "\r\n"
SET_COOKIE = "Set-Cookie"

# Header octets are opaque to HTTP; Latin-1 maps every code point < 256
# to exactly one byte.
HEADER_ENCODING = "latin-1"


class HeaderSet:
    """
    Case-insensitive header mapping serialized in sorted name order.

    Example:
        headers = HeaderSet()
        headers.set("X-B", "2").set("x-a", "1")
        list(headers.items())   # [("x-a", "1"), ("X-B", "2")]
    """

    def __init__(self):
        # lowercased name -> (name as first supplied, value)
        self._entries: Dict[str, Tuple[str, str]] = {}

    def set(self, name: str, value: str) -> "HeaderSet":
        """
        Insert a header, or overwrite the value of an existing one.

        No validation or escaping is done. Values must not contain CR/LF.

        Returns:
            Self for method chaining
        """
        key = name.lower()
        existing = self._entries.get(key)
        written_name = existing[0] if existing else name
        self._entries[key] = (written_name, str(value))
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        entry = self._entries.get(name.lower())
        return entry[1] if entry else default

    def remove(self, name: str) -> bool:
        """Remove a header. Returns True if it was present."""
        return self._entries.pop(name.lower(), None) is not None

    def copy(self) -> "HeaderSet":
        """A detached copy with the same entries and name casing."""
        duplicate = HeaderSet()
        duplicate._entries = dict(self._entries)
        return duplicate

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (name, value) pairs sorted by case-insensitive name."""
        for key in sorted(self._entries):
            yield self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HeaderSet({dict(self.items())!r})"


CookieValue = Union[str, Morsel]


class CookieList:
    """
    Ordered, append-only list of serialized cookies.

    Each entry becomes one Set-Cookie line. Attributes (Path, Expires, ...)
    are the caller's business: the string is written exactly as given.
    Duplicates are allowed, since distinct cookies may share a name
    (different Path or Domain).
    """

    def __init__(self):
        self._cookies: List[str] = []

    def add(self, cookie: CookieValue) -> "CookieList":
        """
        Append a cookie.

        Args:
            cookie: A serialized cookie ("id=42; Path=/; HttpOnly"), an
                    http.cookies.Morsel, or anything whose str() is the
                    serialized cookie.

        Returns:
            Self for method chaining
        """
        if isinstance(cookie, Morsel):
            # OutputString() omits the "Set-Cookie: " prefix str() adds
            self._cookies.append(cookie.OutputString())
        else:
            self._cookies.append(str(cookie))
        return self

    def copy(self) -> "CookieList":
        duplicate = CookieList()
        duplicate._cookies = list(self._cookies)
        return duplicate

    def __iter__(self) -> Iterator[str]:
        return iter(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)

    def __repr__(self) -> str:
        return f"CookieList({self._cookies!r})"


def serialize_header_block(headers: HeaderSet, cookies: CookieList) -> bytes:
    """
    Serialize headers then cookies, one CRLF-terminated line each.

    The blank line ending the preamble is not included.

    Args:
        headers: Regular headers (written in sorted order).
        cookies: Cookies (written in append order, after the headers).

    Returns:
        The header block as bytes.
    """
    lines = [f"{name}: {value}{CRLF}" for name, value in headers.items()]

    # Every cookie line gets its own CRLF, whatever the cookie count
    lines.extend(f"{SET_COOKIE}: {cookie}{CRLF}" for cookie in cookies)

    return "".join(lines).encode(HEADER_ENCODING)
