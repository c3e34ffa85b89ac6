"""
End-to-end tests: sending responses over a real socket.
"""

import io
import socket
import threading
from http import HTTPStatus

from httpemit import HTTPResponse, ResponseConfig


def _read_all(sock: socket.socket) -> bytes:
    """Read until the peer closes its write side."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _send_in_thread(sock: socket.socket, build) -> threading.Thread:
    """Send a response from a background thread, then half-close."""
    def run():
        with sock.makefile("wb") as out:
            build(HTTPResponse(out, ResponseConfig(chunk_size=1000))).send()
        sock.shutdown(socket.SHUT_WR)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


class TestSocketOutput:
    """Tests writing to socket files."""

    def test_fixed_response_over_socket(self, socket_pair):
        """Test a fixed-length response arrives intact."""
        server, client = socket_pair

        thread = _send_in_thread(server, lambda r: (r
            .set_status(HTTPStatus.OK)
            .set_header("Content-Type", "text/plain")
            .add_cookie("session=abc")
            .set_content("hello over tcp")))

        received = _read_all(client)
        thread.join(timeout=5.0)

        head, body = received.split(b"\r\n\r\n", 1)
        assert head.split(b"\r\n") == [
            b"200 OK",
            b"Content-Length: 14",
            b"Content-Type: text/plain",
            b"Set-Cookie: session=abc",
        ]
        assert body == b"hello over tcp"

    def test_large_chunked_response_over_socket(self, socket_pair, decode_chunked):
        """Test a chunked body larger than socket buffers decodes correctly."""
        server, client = socket_pair
        data = bytes(i % 256 for i in range(250_000))

        thread = _send_in_thread(server, lambda r: (r
            .set_status(HTTPStatus.OK)
            .set_chunked_content(io.BytesIO(data))))

        received = _read_all(client)
        thread.join(timeout=5.0)

        head, body = received.split(b"\r\n\r\n", 1)
        assert b"Transfer-Encoding: chunked" in head

        sizes, payload, rest = decode_chunked(body)
        assert payload == data
        assert rest == b""
        assert sizes[:-1] == [1000] * (len(sizes) - 1)
