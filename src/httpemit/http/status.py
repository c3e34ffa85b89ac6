"""
=============================================================================
RESPONSE STATUS
=============================================================================

The first line of every response:

    200 OK\r\n
    ─┬─ ─┬
     │   └── Reason phrase
     └────── Status code

The emitter doesn't know which codes exist or what they mean. A status is
just a (code, reason) pair supplied by the caller. For convenience it can
be built from the standard library's http.HTTPStatus (or any enum member
exposing .value and .phrase):

    Status(200, "OK")
    Status.coerce(HTTPStatus.NOT_FOUND)   # Status(404, "Not Found")
    Status.coerce((418, "I'm a teapot"))

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Status:
    """An opaque status code and reason phrase."""

    code: int
    reason: str

    def __str__(self) -> str:
        return f"{self.code} {self.reason}"

    def line(self, version: Optional[str] = None) -> str:
        """
        Render the status line (without line terminator).

        Args:
            version: Optional protocol version prefix, e.g. "HTTP/1.1".
        """
        if version:
            return f"{version} {self}"
        return str(self)

    @classmethod
    def coerce(cls, value: Any) -> "Status":
        """
        Convert a supported status representation to a Status.

        Accepts a Status, a (code, reason) pair, or an object with
        .value and .phrase attributes (http.HTTPStatus).

        Raises:
            TypeError: If the value isn't a recognized status shape.
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, tuple) and len(value) == 2:
            code, reason = value
            return cls(int(code), str(reason))

        phrase = getattr(value, "phrase", None)
        if phrase is not None and hasattr(value, "value"):
            return cls(int(value.value), str(phrase))

        raise TypeError(f"Cannot use {value!r} as a response status")
