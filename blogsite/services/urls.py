"""Public URL helpers — base URL reconstruction and path-segment encoding."""

import ipaddress
import logging
import re
from collections.abc import Collection
from urllib.parse import quote

from starlette.requests import Request

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}

# RFC 3986 pchar minus unreserved (quote() always keeps those)
_PATH_SEGMENT_SAFE = "!$&'()*+,;=:@"


def _first(value: str | None) -> str | None:
    """Return the first entry of a comma-separated proxy header, or None."""
    if not value:
        return None
    first = value.split(",", 1)[0].strip()
    return first or None


def _parse_forwarded(value: str | None) -> dict[str, str]:
    """Parse the first element of an RFC 7239 ``Forwarded`` header.

    ``for=192.0.2.60;proto=https;host=example.com, for=...`` yields
    ``{"for": "192.0.2.60", "proto": "https", "host": "example.com"}``.
    """
    element = _first(value)
    if not element:
        return {}
    params: dict[str, str] = {}
    for pair in element.split(";"):
        key, sep, val = pair.partition("=")
        if not sep:
            continue
        params[key.strip().lower()] = val.strip().strip('"')
    return params


# host[:port] with a reg-name (IDNA labels allowed) or a bracketed IPv6 literal
_AUTHORITY_RE = re.compile(
    r"^(?:\[(?P<ipv6>[0-9A-Fa-f:.]+)\]|(?P<host>[\w.-]+))(?::(?P<port>\d{1,5}))?$"
)


def _parse_authority(value: str) -> tuple[str, int | None] | None:
    """Split ``host[:port]`` into its parts, or return None if malformed.

    Anything carrying a path, query, fragment, userinfo, whitespace, an
    unclosed IPv6 bracket or a port outside 1-65535 is rejected.
    """
    match = _AUTHORITY_RE.match(value)
    if not match:
        return None
    if match.group("ipv6") is not None:
        host = match.group("ipv6")
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return None
    else:
        host = match.group("host")
        if host.startswith(".") or ".." in host:
            return None
    port = match.group("port")
    if port is None:
        return host, None
    if not 1 <= int(port) <= 65535:
        return None
    return host, int(port)


def _is_trusted(request: Request, trusted_proxies: Collection[str] | None) -> bool:
    """Whether forwarding headers on this request may be believed."""
    if trusted_proxies is None or "*" in trusted_proxies:
        return True
    return request.client is not None and request.client.host in trusted_proxies


def build_base_url(
    request: Request,
    fallback_base_url: str | None = None,
    trusted_proxies: Collection[str] | None = None,
) -> str:
    """Reconstruct ``scheme://host[:port]`` as the external client sees it.

    Reverse-proxy headers win over the connection's own scheme, host and
    port: ``Forwarded`` first, then ``X-Forwarded-Proto`` / ``-Host`` /
    ``-Port``.  They are only read when the peer address is listed in
    ``trusted_proxies`` (``"*"`` or None trusts every peer).  Malformed
    forwarded values are ignored.  Default ports are dropped and there is
    no trailing slash.

    When no valid host can be resolved the configured ``fallback_base_url``
    is returned, or ``""`` so that callers produce site-relative URLs.
    """
    forwarded_proto = forwarded_host = forwarded_port = None
    if _is_trusted(request, trusted_proxies):
        headers = request.headers
        forwarded = _parse_forwarded(headers.get("forwarded"))
        forwarded_proto = forwarded.get("proto") or _first(
            headers.get("x-forwarded-proto")
        )
        forwarded_host = forwarded.get("host") or _first(
            headers.get("x-forwarded-host")
        )
        forwarded_port = _first(headers.get("x-forwarded-port"))

    if forwarded_proto and forwarded_proto.lower() not in _DEFAULT_PORTS:
        logger.warning("Ignoring unsupported forwarded proto %r", forwarded_proto)
        forwarded_proto = None

    authority = None
    if forwarded_host:
        authority = _parse_authority(forwarded_host)
        if authority is None:
            logger.warning("Ignoring malformed forwarded host %r", forwarded_host)

    scheme = (forwarded_proto or request.url.scheme or "http").lower()

    if authority is not None:
        host, port = authority
    else:
        host, port = _parse_authority(request.url.netloc) or ("", None)
        if forwarded_proto:
            # The proxy terminated the connection; the backend port means nothing
            port = None

    if forwarded_port:
        if forwarded_port.isdigit() and 1 <= int(forwarded_port) <= 65535:
            port = int(forwarded_port)
        else:
            logger.warning("Ignoring malformed forwarded port %r", forwarded_port)

    if not host:
        if fallback_base_url:
            return fallback_base_url.rstrip("/")
        logger.warning("Could not resolve request host for %s", request.url.path)
        return ""

    if ":" in host:
        host = f"[{host}]"

    if port is None or port == _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def encode_path_segment(segment: str) -> str:
    """Percent-encode a single URL path segment.

    Characters legal inside a segment are kept; everything else, including
    ``/``, is escaped as UTF-8.
    """
    return quote(segment, safe=_PATH_SEGMENT_SAFE)
