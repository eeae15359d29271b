"""Route definition plus the Matched / NoMatch results of a match attempt.

A Route is configured once during registration and then treated as
read-only. ``name`` and ``path`` are write-once; the constraint
collections may be replaced (``set_*``) or merged (``add_*``) while the
route is being set up. Matching never touches the canonical instance:
each attempt runs on ``route.copy()``, whose attributes start from the
defaults and whose diagnostic is cleared.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from wayfinder.errors import (
    ConfigurationError,
    HTTPError,
    ImmutableProperty,
    MethodNotAllowed,
    NotAcceptable,
    NotFound,
)
from wayfinder.routing.compiler import compile_path

if TYPE_CHECKING:
    from wayfinder.routing.rules import Rule


class Secure(Enum):
    """Transport-security constraint of a route."""

    INDIFFERENT = "indifferent"
    REQUIRED = "required"
    FORBIDDEN = "forbidden"

    @classmethod
    def coerce(cls, value: Secure | bool | None) -> Secure:
        """``True`` -> REQUIRED, ``False`` -> FORBIDDEN, ``None`` -> INDIFFERENT."""
        if isinstance(value, Secure):
            return value
        if value is None:
            return cls.INDIFFERENT
        return cls.REQUIRED if value else cls.FORBIDDEN


def _as_values(value: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _merge_values(existing: Iterable[str], added: Iterable[str]) -> tuple[str, ...]:
    # dict keeps first-seen order and drops repeats
    return tuple(dict.fromkeys((*existing, *added)))


class Route:
    """A named, path-templated endpoint and its matching constraints.

    Usage::

        route = (
            Route()
            .set_name("blog.read")
            .set_path("/blog/{id}")
            .set_tokens({"id": r"\\d+"})
            .set_defaults({"format": "html"})
            .set_methods(["GET", "HEAD"])
        )

    Every mutator returns the route so calls can be chained.
    """

    __slots__ = (
        "_accept",
        "_attributes",
        "_defaults",
        "_failed_rule",
        "_handler",
        "_methods",
        "_name",
        "_name_prefix",
        "_path",
        "_path_prefix",
        "_pattern",
        "_routable",
        "_secure",
        "_server",
        "_tokens",
        "_wildcard",
    )

    def __init__(
        self,
        path: str | None = None,
        name: str | None = None,
        handler: Any = None,
    ) -> None:
        self._name: str | None = None
        self._path: str | None = None
        self._name_prefix = ""
        self._path_prefix = ""
        self._tokens: dict[str, str] = {}
        self._server: dict[str, str] = {}
        self._methods: tuple[str, ...] = ()
        self._accept: tuple[str, ...] = ()
        self._defaults: dict[str, Any] = {}
        self._secure = Secure.INDIFFERENT
        self._wildcard: str | None = None
        self._routable = True
        self._handler = handler
        self._attributes: dict[str, Any] = {}
        self._failed_rule: Rule | None = None
        self._pattern: re.Pattern[str] | None = None
        if path is not None:
            self.set_path(path)
        if name is not None:
            self.set_name(name)

    def __repr__(self) -> str:
        return f"Route(name={self._name!r}, path={self._path!r})"

    # -- Read access --

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def name_prefix(self) -> str:
        return self._name_prefix

    @property
    def path_prefix(self) -> str:
        return self._path_prefix

    @property
    def tokens(self) -> Mapping[str, str]:
        return MappingProxyType(self._tokens)

    @property
    def server(self) -> Mapping[str, str]:
        return MappingProxyType(self._server)

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self._methods)

    @property
    def accept(self) -> tuple[str, ...]:
        return self._accept

    @property
    def defaults(self) -> Mapping[str, Any]:
        return MappingProxyType(self._defaults)

    @property
    def secure(self) -> Secure:
        return self._secure

    @property
    def wildcard(self) -> str | None:
        return self._wildcard

    @property
    def routable(self) -> bool:
        return self._routable

    @property
    def handler(self) -> Any:
        return self._handler

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Values gathered during the current match attempt."""
        return MappingProxyType(self._attributes)

    @property
    def failed_rule(self) -> Rule | None:
        """The rule that rejected this candidate, if any."""
        return self._failed_rule

    @property
    def pattern(self) -> re.Pattern[str]:
        """The compiled path pattern, memoized on first use.

        Concurrent first uses compute equal patterns, so whichever
        assignment lands last is harmless.
        """
        pattern = self._pattern
        if pattern is None:
            if self._path is None:
                msg = f"{self!r} has no path to compile."
                raise ConfigurationError(msg)
            pattern = compile_path(self._path, self._tokens, self._wildcard)
            self._pattern = pattern
        return pattern

    # -- Write-once fields --

    def append_name_prefix(self, prefix: str) -> Route:
        if self._name is not None:
            msg = "Route name prefix is immutable once the name is set."
            raise ImmutableProperty(msg)
        self._name_prefix += prefix
        return self

    def append_path_prefix(self, prefix: str) -> Route:
        if self._path is not None:
            msg = "Route path prefix is immutable once the path is set."
            raise ImmutableProperty(msg)
        self._path_prefix += prefix
        return self

    def set_name(self, name: str) -> Route:
        if self._name is not None:
            msg = f"Route name is immutable once set (already {self._name!r})."
            raise ImmutableProperty(msg)
        self._name = self._name_prefix + name
        return self

    def set_path(self, path: str) -> Route:
        if self._path is not None:
            msg = f"Route path is immutable once set (already {self._path!r})."
            raise ImmutableProperty(msg)
        self._path = self._path_prefix + path
        self._pattern = None
        return self

    # -- Replace / merge collections --

    def set_tokens(self, tokens: Mapping[str, str]) -> Route:
        self._tokens = {}
        return self.add_tokens(tokens)

    def add_tokens(self, tokens: Mapping[str, str]) -> Route:
        self._tokens = {**self._tokens, **tokens}
        self._pattern = None
        return self

    def set_server(self, server: Mapping[str, str]) -> Route:
        self._server = {}
        return self.add_server(server)

    def add_server(self, server: Mapping[str, str]) -> Route:
        self._server = {**self._server, **server}
        return self

    def set_methods(self, methods: str | Iterable[str]) -> Route:
        self._methods = ()
        return self.add_methods(methods)

    def add_methods(self, methods: str | Iterable[str]) -> Route:
        self._methods = _merge_values(self._methods, _as_values(methods))
        return self

    def set_accept(self, accept: str | Iterable[str]) -> Route:
        self._accept = ()
        return self.add_accept(accept)

    def add_accept(self, accept: str | Iterable[str]) -> Route:
        self._accept = _merge_values(self._accept, _as_values(accept))
        return self

    def set_defaults(self, defaults: Mapping[str, Any]) -> Route:
        self._defaults = {}
        return self.add_defaults(defaults)

    def add_defaults(self, defaults: Mapping[str, Any]) -> Route:
        self._defaults = {**self._defaults, **defaults}
        return self

    # -- Plain setters --

    def set_secure(self, secure: Secure | bool | None = True) -> Route:
        """Require HTTPS (``True``), forbid it (``False``), or ignore it (``None``)."""
        self._secure = Secure.coerce(secure)
        return self

    def set_wildcard(self, wildcard: str | None) -> Route:
        self._wildcard = wildcard or None
        self._pattern = None
        return self

    def set_routable(self, routable: bool = True) -> Route:
        """A non-routable route is only used to generate paths."""
        self._routable = bool(routable)
        return self

    def set_handler(self, handler: Any) -> Route:
        self._handler = handler
        return self

    # -- Per-attempt state --

    def add_attributes(self, attributes: Mapping[str, Any]) -> Route:
        self._attributes = {**self._attributes, **attributes}
        return self

    def set_failed_rule(self, rule: Rule | None) -> Route:
        self._failed_rule = rule
        return self

    def copy(self) -> Route:
        """Return an isolated candidate for one match attempt.

        The copy shares nothing mutable with this route: its attributes
        are a fresh dict built from the defaults and its diagnostic is
        cleared. Collections are replaced, never mutated in place, so the
        two can diverge safely afterwards.
        """
        clone = Route.__new__(Route)
        for slot in Route.__slots__:
            object.__setattr__(clone, slot, getattr(self, slot))
        clone._attributes = dict(self._defaults)
        clone._failed_rule = None
        return clone


@dataclass(frozen=True, slots=True)
class Matched:
    """Result of a successful match.

    ``route`` is the per-attempt copy that passed every rule;
    ``attributes`` are its defaults merged with the captured values.
    """

    route: Route
    name: str | None
    attributes: Mapping[str, Any]

    @property
    def handler(self) -> Any:
        return self.route.handler

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class NoMatch:
    """Result of a match attempt that exhausted every candidate.

    Carries the candidate that got furthest through the rules and the
    rule that stopped it. Both are ``None`` when nothing was routable.
    ``allowed`` gathers the methods of every candidate whose path matched
    but whose method did not, so a 405 can list them all.
    """

    route: Route | None = None
    rule: Rule | None = None
    allowed: frozenset[str] = frozenset()

    @property
    def kind(self) -> str | None:
        """Name of the rule that rejected the best candidate ("path", "method", ...)."""
        return self.rule.name if self.rule is not None else None

    def to_http_error(self) -> HTTPError:
        """Translate the diagnostic into a 404, 405 or 406 error."""
        if self.route is not None and self.kind == "method":
            return MethodNotAllowed(self.allowed or self.route.methods)
        if self.route is not None and self.kind == "accept":
            return NotAcceptable(self.route.accept)
        return NotFound()

    def __bool__(self) -> bool:
        return False
