"""
Unit tests for configuration and status values.
"""

from http import HTTPStatus

import pytest

from httpemit.config import ResponseConfig
from httpemit.http.status import Status


class TestResponseConfig:
    """Tests for ResponseConfig."""

    def test_defaults(self):
        """Test default values are valid."""
        config = ResponseConfig()
        config.validate()

        assert config.chunk_size == 8192
        assert config.hex_chunk_sizes is False
        assert config.http_version is None
        assert config.default_encoding == "utf-8"

    @pytest.mark.parametrize("kwargs", [
        {"chunk_size": 0},
        {"chunk_size": -8},
        {"copy_buffer_size": 0},
        {"default_encoding": "no-such-codec"},
        {"http_version": ""},
        {"http_version": "HTTP/1.1\r\n"},
        {"http_version": "HTTP 1.1"},
    ])
    def test_invalid(self, kwargs):
        """Test invalid values fail validation."""
        with pytest.raises(ValueError):
            ResponseConfig(**kwargs).validate()


class TestStatus:
    """Tests for Status values."""

    def test_str(self):
        """Test status rendering."""
        assert str(Status(200, "OK")) == "200 OK"

    def test_line_with_version(self):
        """Test the status line with a protocol prefix."""
        assert Status(404, "Not Found").line("HTTP/1.1") == "HTTP/1.1 404 Not Found"
        assert Status(404, "Not Found").line() == "404 Not Found"

    def test_coerce(self):
        """Test conversion from supported shapes."""
        assert Status.coerce(HTTPStatus.NOT_FOUND) == Status(404, "Not Found")
        assert Status.coerce((201, "Created")) == Status(201, "Created")

        status = Status(500, "Oops")
        assert Status.coerce(status) is status

    def test_coerce_rejects_bare_int(self):
        """Test a bare code without a reason is refused."""
        with pytest.raises(TypeError):
            Status.coerce(200)

    def test_immutable(self):
        """Test statuses can't be modified."""
        status = Status(200, "OK")
        with pytest.raises(AttributeError):
            status.code = 201
