"""Matcher rules: the fixed pipeline a candidate route runs through.

Each rule answers one question about a (candidate, request) pair. The
router evaluates them in ``build_rules`` order and stops at the first
``False``; the rejecting rule is recorded on the candidate.

    PathRule -> ServerRule -> MethodRule -> SecureRule -> AcceptRule
"""

import re
from abc import ABC, abstractmethod
from typing import ClassVar

from wayfinder.config import RouterConfig
from wayfinder.http.request import RequestLike
from wayfinder.routing.route import Route, Secure

_HTTPS_ON = frozenset({"on", "1", "true"})


class Rule(ABC):
    """One predicate in the matching pipeline.

    Subclasses implement ``check``; ``evaluate`` wraps it and records
    the rule on the candidate when the check fails.
    """

    __slots__ = ()

    name: ClassVar[str]

    def evaluate(self, route: Route, request: RequestLike) -> bool:
        if self.check(route, request):
            return True
        route.set_failed_rule(self)
        return False

    @abstractmethod
    def check(self, route: Route, request: RequestLike) -> bool: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PathRule(Rule):
    """Apply the compiled path pattern and capture attributes.

    Captured values that came back empty are skipped so the route's
    defaults stay in place for them.
    """

    __slots__ = ("basepath",)

    name = "path"

    def __init__(self, basepath: str = "") -> None:
        self.basepath = basepath.rstrip("/")

    def check(self, route: Route, request: RequestLike) -> bool:
        path = request.path
        if self.basepath:
            if path != self.basepath and not path.startswith(self.basepath + "/"):
                return False
            path = path[len(self.basepath) :] or "/"

        found = route.pattern.match(path)
        if found is None:
            return False

        captured = {key: value for key, value in found.groupdict().items() if value}
        if captured:
            route.add_attributes(captured)
        return True


class ServerRule(Rule):
    """Every declared server value must be found by its pattern."""

    __slots__ = ()

    name = "server"

    def check(self, route: Route, request: RequestLike) -> bool:
        server = request.server
        return all(
            re.search(pattern, str(server.get(key, ""))) is not None
            for key, pattern in route.server.items()
        )


class MethodRule(Rule):
    """The request method must be one the route allows (any, if none declared)."""

    __slots__ = ()

    name = "method"

    def check(self, route: Route, request: RequestLike) -> bool:
        methods = route.methods
        return not methods or request.method in methods


class SecureRule(Rule):
    """Enforce the route's HTTPS requirement.

    A request is secure when ``HTTPS`` is on or it arrived on the
    configured TLS port.
    """

    __slots__ = ("port",)

    name = "secure"

    def __init__(self, port: int = 443) -> None:
        self.port = port

    def is_secure(self, request: RequestLike) -> bool:
        server = request.server
        if str(server.get("HTTPS", "")).lower() in _HTTPS_ON:
            return True
        return str(server.get("SERVER_PORT", "")) == str(self.port)

    def check(self, route: Route, request: RequestLike) -> bool:
        if route.secure is Secure.INDIFFERENT:
            return True
        secure = self.is_secure(request)
        return secure if route.secure is Secure.REQUIRED else not secure


def parse_accept(header: str) -> list[tuple[str, str, float]]:
    """Parse an Accept header into ``(type, subtype, q)`` media ranges.

    Malformed ranges are skipped; a missing or unparsable ``q`` counts
    as 1.0.
    """
    ranges: list[tuple[str, str, float]] = []
    for item in header.split(","):
        media, *params = (piece.strip() for piece in item.split(";"))
        if "/" not in media:
            if media == "*":
                media = "*/*"
            else:
                continue
        main, sub = (piece.strip().lower() for piece in media.split("/", 1))
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 1.0
        ranges.append((main, sub, q))
    return ranges


def _media_matches(offered: str, main: str, sub: str) -> bool:
    offered_main, _, offered_sub = offered.lower().partition("/")
    offered_main = offered_main.strip()
    offered_sub = offered_sub.split(";", 1)[0].strip() or "*"
    if "*" in (main, offered_main):
        return True
    if main != offered_main:
        return False
    return "*" in (sub, offered_sub) or sub == offered_sub


class AcceptRule(Rule):
    """The client must accept at least one media type the route produces.

    Passes when the route declares nothing or the request sends no
    Accept value. Ranges weighted ``q=0`` are refusals. A ``*/*`` or
    ``type/*`` on either side accepts anything within its scope.
    """

    __slots__ = ()

    name = "accept"

    def check(self, route: Route, request: RequestLike) -> bool:
        offered = route.accept
        header = request.accept
        if not offered or not header or not header.strip():
            return True
        for main, sub, q in parse_accept(header):
            if q <= 0:
                continue
            if any(_media_matches(media, main, sub) for media in offered):
                return True
        return False


def build_rules(config: RouterConfig | None = None) -> tuple[Rule, ...]:
    """The pipeline in its fixed evaluation order."""
    config = config or RouterConfig()
    return (
        PathRule(config.basepath),
        ServerRule(),
        MethodRule(),
        SecureRule(config.secure_port),
        AcceptRule(),
    )
