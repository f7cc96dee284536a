"""Tests for base URL reconstruction and path-segment encoding."""

import pytest
from starlette.requests import Request

from blogsite.services.urls import build_base_url, encode_path_segment


def _request(
    headers: dict[str, str] | None = None,
    host: str | None = "blog.internal:8080",
    scheme: str = "http",
    server: tuple[str, int] | None = ("10.0.0.5", 8080),
    client: tuple[str, int] | None = None,
) -> Request:
    """Build a bare Starlette request for /blog/hello."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if host is not None:
        raw_headers.append((b"host", host.encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": scheme,
        "server": server,
        "client": client,
        "path": "/blog/hello",
        "raw_path": b"/blog/hello",
        "root_path": "",
        "query_string": b"",
        "headers": raw_headers,
    }
    return Request(scope)


class TestBuildBaseUrl:
    """Tests for build_base_url()."""

    def test_direct_request_keeps_non_default_port(self):
        assert build_base_url(_request()) == "http://blog.internal:8080"

    def test_default_http_port_is_dropped(self):
        assert build_base_url(_request(host="blog.example:80")) == "http://blog.example"

    def test_default_https_port_is_dropped(self):
        req = _request(host="blog.example:443", scheme="https")
        assert build_base_url(req) == "https://blog.example"

    def test_host_without_port(self):
        assert build_base_url(_request(host="blog.example")) == "http://blog.example"

    def test_x_forwarded_proto_and_host(self):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "www.example.com"}
        )
        assert build_base_url(req) == "https://www.example.com"

    def test_forwarded_proto_alone_drops_backend_port(self):
        req = _request(headers={"X-Forwarded-Proto": "https"})
        assert build_base_url(req) == "https://blog.internal"

    def test_x_forwarded_port_is_honoured(self):
        req = _request(
            headers={
                "X-Forwarded-Proto": "https",
                "X-Forwarded-Host": "www.example.com",
                "X-Forwarded-Port": "8443",
            }
        )
        assert build_base_url(req) == "https://www.example.com:8443"

    def test_forwarded_default_port_is_dropped(self):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "www.example.com:443"}
        )
        assert build_base_url(req) == "https://www.example.com"

    def test_first_value_of_proxy_chain_wins(self):
        req = _request(
            headers={
                "X-Forwarded-Proto": "https, http",
                "X-Forwarded-Host": "www.example.com, edge.internal",
            }
        )
        assert build_base_url(req) == "https://www.example.com"

    def test_rfc7239_forwarded_header_takes_precedence(self):
        req = _request(
            headers={
                "Forwarded": 'for=192.0.2.60;proto=https;host="news.example.org"',
                "X-Forwarded-Host": "www.example.com",
                "X-Forwarded-Proto": "http",
            }
        )
        assert build_base_url(req) == "https://news.example.org"

    def test_proto_is_lowercased(self):
        req = _request(headers={"X-Forwarded-Proto": "HTTPS", "X-Forwarded-Host": "a.example"})
        assert build_base_url(req) == "https://a.example"

    def test_ipv6_host_keeps_brackets(self):
        assert build_base_url(_request(host="[::1]:8080")) == "http://[::1]:8080"

    def test_no_trailing_slash(self):
        assert not build_base_url(_request()).endswith("/")

    def test_missing_host_uses_fallback(self):
        req = _request(host=None, server=None)
        assert build_base_url(req, "https://blog.example/") == "https://blog.example"

    def test_missing_host_without_fallback_is_relative(self):
        assert build_base_url(_request(host=None, server=None)) == ""

    @pytest.mark.parametrize(
        "forwarded_host",
        ["[::1", "evil.example/path?x=", "a b", "host:99999", "user@evil.example"],
    )
    def test_malformed_forwarded_host_falls_back_to_request_host(self, forwarded_host):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": forwarded_host}
        )
        assert build_base_url(req, "https://fallback.example") == "https://blog.internal"

    def test_malformed_rfc7239_host_falls_back_to_request_host(self):
        req = _request(headers={"Forwarded": 'proto=https;host="evil.example/x"'})
        assert build_base_url(req) == "https://blog.internal"

    @pytest.mark.parametrize(
        "forwarded_host", ["[::1", "evil.example/path?x=", "a b", "host:99999"]
    )
    def test_malformed_forwarded_host_without_request_host_uses_fallback(
        self, forwarded_host
    ):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": forwarded_host},
            host=None,
            server=None,
        )
        result = build_base_url(req, "https://fallback.example")
        assert result == "https://fallback.example"

    @pytest.mark.parametrize("port", ["99999", "0", "abc", "-1"])
    def test_malformed_forwarded_port_is_ignored(self, port):
        req = _request(
            headers={
                "X-Forwarded-Proto": "https",
                "X-Forwarded-Host": "www.example.com",
                "X-Forwarded-Port": port,
            }
        )
        assert build_base_url(req) == "https://www.example.com"

    def test_unsupported_forwarded_proto_is_ignored(self):
        req = _request(
            headers={"X-Forwarded-Proto": "javascript", "X-Forwarded-Host": "www.example.com"}
        )
        assert build_base_url(req) == "http://www.example.com"

    def test_forwarded_headers_ignored_from_untrusted_peer(self):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "evil.example"},
            client=("203.0.113.9", 5000),
        )
        result = build_base_url(req, trusted_proxies=("127.0.0.1",))
        assert result == "http://blog.internal:8080"

    def test_forwarded_headers_used_from_trusted_peer(self):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "www.example.com"},
            client=("10.1.2.3", 5000),
        )
        result = build_base_url(req, trusted_proxies=("10.1.2.3",))
        assert result == "https://www.example.com"

    def test_wildcard_trusts_every_peer(self):
        req = _request(
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "www.example.com"},
            client=("203.0.113.9", 5000),
        )
        result = build_base_url(req, trusted_proxies=("*",))
        assert result == "https://www.example.com"

    def test_unknown_peer_address_is_untrusted(self):
        req = _request(headers={"X-Forwarded-Host": "www.example.com"})
        result = build_base_url(req, trusted_proxies=("127.0.0.1",))
        assert result == "http://blog.internal:8080"


class TestEncodePathSegment:
    """Tests for encode_path_segment()."""

    def test_slash_and_space_are_escaped(self):
        encoded = encode_path_segment("a/b c")
        assert encoded == "a%2Fb%20c"
        assert "/" not in encoded

    @pytest.mark.parametrize("segment", ["hello", "hello-world_2.0~x", "a:b@c", "x=1;y"])
    def test_segment_characters_are_kept(self, segment):
        assert encode_path_segment(segment) == segment

    def test_percent_is_escaped(self):
        assert encode_path_segment("100%") == "100%25"

    def test_non_ascii_is_utf8_encoded(self):
        assert encode_path_segment("café") == "caf%C3%A9"

    def test_query_and_fragment_markers_are_escaped(self):
        assert encode_path_segment("a?b#c") == "a%3Fb%23c"
