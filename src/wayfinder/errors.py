"""Wayfinder exception hierarchy.

Shared across Route, Router, the rules, and generation so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class WayfinderError(Exception):
    """Base for all wayfinder-specific errors."""


class ConfigurationError(WayfinderError):
    """Raised when a route definition is invalid.

    Typically raised while routes are being registered at startup.
    """


class ImmutableProperty(WayfinderError):  # noqa: N818
    """A write-once route field was written twice.

    Also raised when a name or path prefix is appended after the field
    it prefixes has been set, since the prefix could never take effect.
    """


class RouteAlreadyExists(WayfinderError):  # noqa: N818
    """A route with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Route {name!r} already exists.")


class RouteNotFound(WayfinderError, KeyError):  # noqa: N818
    """No route is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Route {name!r} not found.")

    def __str__(self) -> str:
        return str(self.args[0])


class MissingAttribute(WayfinderError):  # noqa: N818
    """Generation needs an attribute that was neither supplied nor defaulted."""

    def __init__(self, route_name: str, attribute: str) -> None:
        self.route_name = route_name
        self.attribute = attribute
        super().__init__(f"Route {route_name!r} needs a value for {attribute!r}.")


class InvalidAttribute(WayfinderError):  # noqa: N818
    """A value supplied for generation does not match its token pattern."""

    def __init__(self, route_name: str, attribute: str, value: str, pattern: str) -> None:
        self.route_name = route_name
        self.attribute = attribute
        self.value = value
        self.pattern = pattern
        super().__init__(
            f"Route {route_name!r}: {attribute}={value!r} does not match {pattern!r}."
        )


@dataclass(frozen=True, slots=True)
class HTTPError(WayfinderError):
    """An error that maps directly to an HTTP status code.

    Matching never raises these. A boundary layer builds one from a
    ``NoMatch`` via ``NoMatch.to_http_error()`` when it wants an
    exception to dispatch on.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: a route matched the path but not the HTTP method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string for developer visibility.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class NotAcceptable(HTTPError):  # noqa: N818
    """406: a route matched but cannot produce any media type the client accepts."""

    def __init__(self, available: tuple[str, ...] = (), detail: str = "") -> None:
        default_detail = "Not Acceptable"
        if available:
            default_detail = f"Not Acceptable. Available: {', '.join(available)}"
        super().__init__(status=406, detail=detail or default_detail)
