"""The request contract consumed by the matcher rules.

Matching reads four things from a request: the path, the method token,
CGI-style server values, and the Accept header. ``RequestLike`` names
that contract so any framework's request object can be matched as long
as it exposes those attributes. ``Request`` is the frozen implementation
shipped here, built from an ASGI scope, a WSGI environ, or plain values.

``path`` is always the decoded path, as ASGI ``path`` and WSGI
``PATH_INFO`` deliver it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

_SECURE_SCHEMES = frozenset({"https", "wss"})


@runtime_checkable
class RequestLike(Protocol):
    """What the rules read from a request. Nothing else is touched."""

    @property
    def path(self) -> str: ...

    @property
    def method(self) -> str: ...

    @property
    def server(self) -> Mapping[str, str]: ...

    @property
    def accept(self) -> str | None: ...


def _header_key(name: str) -> str:
    """``Content-Type`` -> ``HTTP_CONTENT_TYPE``."""
    return "HTTP_" + name.upper().replace("-", "_")


def _mirror_headers(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Fold header pairs into ``HTTP_*`` keys, joining repeats with ", "."""
    values: dict[str, str] = {}
    for name, value in pairs:
        key = _header_key(name)
        values[key] = f"{values[key]}, {value}" if key in values else value
    return values


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable request as seen by the router.

    ``server`` holds CGI-style values (``HTTPS``, ``SERVER_PORT``,
    ``HTTP_HOST``, ...) that the Server and Secure rules inspect. Request
    headers live there too, under their ``HTTP_*`` keys.
    """

    method: str
    path: str
    server: Mapping[str, str] = field(default_factory=dict)

    @property
    def accept(self) -> str | None:
        """The Accept header, repeated values joined with commas."""
        return self.server.get("HTTP_ACCEPT")

    # -- Factories --

    @classmethod
    def build(
        cls,
        path: str,
        *,
        method: str = "GET",
        server: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> Request:
        """Create a Request from plain values.

        Headers are mirrored into ``server`` as ``HTTP_*`` keys unless
        *server* already carries that key.
        """
        pairs = headers.items() if isinstance(headers, Mapping) else headers or ()
        values: dict[str, str] = {"REQUEST_METHOD": method, **_mirror_headers(pairs)}
        values.update(server or {})
        return cls(method=method, path=path, server=MappingProxyType(values))

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        values: dict[str, str] = {
            "REQUEST_METHOD": scope["method"],
            "HTTPS": "on" if scope.get("scheme", "http") in _SECURE_SCHEMES else "off",
        }
        server = scope.get("server")
        if server:
            host, port = server
            values["SERVER_NAME"] = str(host)
            if port is not None:
                values["SERVER_PORT"] = str(port)
        values.update(
            _mirror_headers(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in scope.get("headers", ())
            )
        )
        return cls(method=scope["method"], path=scope["path"], server=MappingProxyType(values))

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Request:
        """Create a Request from a WSGI environ.

        The environ already uses CGI-style keys, so its string values
        become ``server`` unchanged. ``wsgi.url_scheme`` fills in
        ``HTTPS`` when the server did not set it.
        """
        values = {k: v for k, v in environ.items() if isinstance(k, str) and isinstance(v, str)}
        if "HTTPS" not in values:
            scheme = environ.get("wsgi.url_scheme", "http")
            values["HTTPS"] = "on" if scheme in _SECURE_SCHEMES else "off"
        path = values.get("SCRIPT_NAME", "") + values.get("PATH_INFO", "")
        return cls(
            method=values.get("REQUEST_METHOD", "GET"),
            path=path or "/",
            server=MappingProxyType(values),
        )
