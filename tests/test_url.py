"""Tests for URL parsing."""

import pytest

from sio_client.errors import SIOMalformedUrlError
from sio_client.url import parse_url


class TestParseUrl:
    def test_http_with_port(self):
        url = parse_url("http://localhost:1337")
        assert url.scheme == "http"
        assert url.host == "localhost"
        assert url.port == 1337
        assert url.path == "socket.io"
        assert url.secured is False

    def test_https_defaults_to_443(self):
        url = parse_url("https://host")
        assert url.port == 443
        assert url.secured is True

    def test_http_defaults_to_80(self):
        assert parse_url("http://example.com").port == 80

    def test_root_path_means_socket_io(self):
        assert parse_url("http://example.com/").path == "socket.io"

    def test_custom_path_kept(self):
        url = parse_url("http://example.com/custom/io/")
        assert url.path == "/custom/io/"
        assert url.resource == "custom/io"

    def test_query(self):
        url = parse_url("http://example.com:8080/?token=abc&room=")
        assert dict(url.query) == {"token": "abc", "room": ""}

    def test_query_is_read_only(self):
        url = parse_url("http://example.com/?a=1")
        with pytest.raises(TypeError):
            url.query["a"] = "2"

    def test_ipv6_netloc(self):
        url = parse_url("http://[::1]:3000")
        assert url.host == "::1"
        assert url.netloc == "[::1]:3000"

    def test_descriptor_is_frozen(self):
        url = parse_url("http://localhost:1337")
        with pytest.raises(AttributeError):
            url.port = 1

    @pytest.mark.parametrize("bad", ["http://host:notaport", "http://[::1"])
    def test_malformed(self, bad):
        with pytest.raises(SIOMalformedUrlError) as exc_info:
            parse_url(bad)
        assert exc_info.value.url == bad
