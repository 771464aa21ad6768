"""
Engine endpoint parsing.

A run configuration stores the engine URL as a schema prefix plus the
rest of the URL. parse_endpoint() joins the two and pulls out the
protocol, host and port the engine variables are built from.

Parsing follows generic URI rules rather than "what a browser would
guess": "myhost:53000" without a "//" is a URI with scheme "myhost"
and no host at all, so the host and port defaults apply.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from sparkrun.errors import EndpointValidationError

logger = logging.getLogger(__name__)

# Characters that may never appear unescaped in a URI
_ILLEGAL_CHARS = re.compile(r'[\s"<>\\^`{|}]')
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


@dataclass(frozen=True)
class ConnectionEndpoint:
    """
    Protocol, host and port derived from a run configuration.

    Any part may be None when the URL does not carry it.
    """

    protocol: str | None = None
    host: str | None = None
    port: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.protocol is None and self.host is None and self.port is None

    def to_dict(self) -> dict[str, str | None]:
        return {"protocol": self.protocol, "host": self.host, "port": self.port}


def parse_endpoint(schema: str | None, url: str | None) -> ConnectionEndpoint:
    """
    Derive the engine endpoint from a schema prefix and URL.

    Args:
        schema: Scheme prefix such as "http://" (None treated as "")
        url: Remainder of the URL such as "myhost:53000" (None treated as "")

    Returns:
        ConnectionEndpoint with protocol, host and port (each possibly None)

    Raises:
        EndpointValidationError: If the joined text is not a valid URI
    """
    text = (schema or "").strip() + (url or "").strip()
    _validate(text)

    try:
        parts = urlsplit(text)
    except ValueError as e:
        raise EndpointValidationError(text, str(e)) from e

    endpoint = ConnectionEndpoint(
        protocol=parts.scheme or None,
        host=_extract_host(parts.netloc),
        port=_extract_port(text, parts.netloc),
    )
    logger.debug(f"[endpoint] Parsed '{text}' -> {endpoint}")
    return endpoint


def _validate(text: str) -> None:
    """Reject text that no URI parser would accept."""
    match = _ILLEGAL_CHARS.search(text)
    if match:
        raise EndpointValidationError(
            text, f"illegal character {match.group()!r} at index {match.start()}"
        )

    match = _BAD_ESCAPE.search(text)
    if match:
        raise EndpointValidationError(text, f"malformed escape at index {match.start()}")

    # A colon before the first '/', '?' or '#' ends the scheme
    head = re.split(r"[/?#]", text, maxsplit=1)[0]
    if ":" in head:
        scheme = head.split(":", 1)[0]
        if not scheme:
            raise EndpointValidationError(text, "expected scheme name at index 0")
        if not _SCHEME.match(scheme):
            raise EndpointValidationError(text, f"illegal scheme name '{scheme}'")


def _extract_host(netloc: str) -> str | None:
    """
    Host part of an authority, case preserved.

    IPv6 literals keep their brackets so the value can be dropped
    straight back into a URL.
    """
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        end = hostport.find("]")
        host = hostport[: end + 1] if end != -1 else hostport
    else:
        host = hostport.partition(":")[0]
    return host or None


def _extract_port(text: str, netloc: str) -> str | None:
    """
    Port part of an authority.

    Any run of digits is accepted; ports are not range-checked, so
    "myhost:99999" keeps its port. Leading zeros are dropped.
    """
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        hostport = hostport[hostport.find("]") + 1 :]
    _, sep, port = hostport.partition(":")
    if not sep or not port:
        return None
    if not (port.isascii() and port.isdigit()):
        raise EndpointValidationError(text, f"malformed port number '{port}'")
    return str(int(port))
