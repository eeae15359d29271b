"""Router: the ordered, named route collection.

Routes are registered during setup (a single-writer phase that ends
with ``freeze()``), then matched and generated from concurrently. The
collection is never mutated by matching: each candidate is copied before
the rules run against it.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from wayfinder.config import RouterConfig
from wayfinder.errors import ConfigurationError, RouteAlreadyExists, RouteNotFound
from wayfinder.http.request import RequestLike
from wayfinder.routing.generator import generate_path
from wayfinder.routing.route import Matched, NoMatch, Route
from wayfinder.routing.rules import Rule, build_rules

logger = logging.getLogger("wayfinder.routing")


class Router:
    """Ordered route collection with matching and reverse generation.

    Usage::

        router = Router()
        router.get("blog.read", "/blog/{id}").set_tokens({"id": r"\\d+"})
        router.freeze()

        result = router.match(Request.build("/blog/42"))
        if result:
            result.name        # "blog.read"
            result.attributes  # {"id": "42"}

        router.generate("blog.read", {"id": 42})  # "/blog/42"
    """

    __slots__ = ("_by_name", "_config", "_frozen", "_proto", "_routes", "_rules")

    def __init__(self, config: RouterConfig | None = None, proto: Route | None = None) -> None:
        self._config = config or RouterConfig()
        self._proto = proto or Route()
        self._rules: tuple[Rule, ...] = build_rules(self._config)
        self._routes: list[Route] = []
        self._by_name: dict[str, Route] = {}
        self._frozen = False

    # -- Registration --

    def add(self, route: Route) -> Route:
        """Register *route*. Must be called before ``freeze()``.

        The path pattern is compiled here so matching never has to.
        """
        if self._frozen:
            msg = "Cannot add routes after the router is frozen."
            raise RuntimeError(msg)
        if route.path is None:
            msg = f"{route!r} has no path."
            raise ConfigurationError(msg)

        name = route.name
        if name is not None and name in self._by_name:
            raise RouteAlreadyExists(name)
        route.pattern  # noqa: B018
        if name is not None:
            self._by_name[name] = route
        self._routes.append(route)
        return route

    def route(self, name: str | None, path: str, handler: Any = None) -> Route:
        """Create a route from the proto route, register it and return it."""
        route = self._proto.copy()
        if name is not None:
            route.set_name(name)
        route.set_path(path)
        if handler is not None:
            route.set_handler(handler)
        return self.add(route)

    def get(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("GET")

    def post(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("POST")

    def put(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("PUT")

    def patch(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("PATCH")

    def delete(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("DELETE")

    def head(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("HEAD")

    def options(self, name: str | None, path: str, handler: Any = None) -> Route:
        return self.route(name, path, handler).set_methods("OPTIONS")

    def attach(
        self,
        name_prefix: str,
        path_prefix: str,
        callback: Callable[["Router"], None],
    ) -> None:
        """Register a group of routes sharing a name and path prefix.

        Routes created through ``route()`` and the verb helpers inside
        *callback* get both prefixes. Attachments nest.
        """
        saved = self._proto
        self._proto = saved.copy().append_name_prefix(name_prefix).append_path_prefix(path_prefix)
        try:
            callback(self)
        finally:
            self._proto = saved

    def freeze(self) -> None:
        """End registration. The collection is read-only from here on.

        Compiles every route pattern, including any cleared by tokens or
        a wildcard set after ``add()``. A bad token raises
        ``ConfigurationError`` here.
        """
        for route in self._routes:
            route.pattern  # noqa: B018
        self._frozen = True
        logger.info("router frozen with %d routes", len(self._routes))

    # -- Introspection --

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def routes(self) -> list[Route]:
        """All registered routes in registration order."""
        return list(self._routes)

    def get_route(self, name: str) -> Route:
        """Return the canonical route registered as *name*."""
        try:
            return self._by_name[name]
        except KeyError:
            raise RouteNotFound(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    # -- Matching --

    def match(self, request: RequestLike) -> Matched | NoMatch:
        """Find the first routable route whose rules all pass.

        Returns ``Matched`` on success. Otherwise returns ``NoMatch``
        carrying the candidate that passed the most rules before one
        rejected it (the earliest such candidate on a tie). Its ``allowed``
        set holds the methods of every candidate rejected only by method.
        """
        best: Route | None = None
        best_score = -1
        allowed: set[str] = set()

        for canonical in self._routes:
            if not canonical.routable:
                continue
            candidate = canonical.copy()
            score = self._apply_rules(candidate, request)
            if score is None:
                logger.debug("%s %s MATCHED %s", request.method, request.path, candidate.name)
                return Matched(
                    route=candidate,
                    name=candidate.name,
                    attributes=dict(candidate.attributes),
                )
            if candidate.failed_rule is not None and candidate.failed_rule.name == "method":
                allowed.update(candidate.methods)
            if score > best_score:
                best, best_score = candidate, score

        logger.debug(
            "%s %s NO MATCH (best: %s failed %s)",
            request.method,
            request.path,
            best.name if best is not None else None,
            best.failed_rule.name if best is not None and best.failed_rule else None,
        )
        if best is None:
            return NoMatch()
        return NoMatch(route=best, rule=best.failed_rule, allowed=frozenset(allowed))

    def _apply_rules(self, candidate: Route, request: RequestLike) -> int | None:
        """Run the pipeline; ``None`` on success, else the number of rules passed."""
        for score, rule in enumerate(self._rules):
            if not rule.evaluate(candidate, request):
                logger.debug("%s FAILED %s ON %s", request.path, rule.name, candidate.name)
                return score
        return None

    # -- Generation --

    def generate(self, name: str, attributes: Mapping[str, Any] | None = None) -> str:
        """Build the path for route *name*, percent-encoding values.

        Raises ``RouteNotFound``, ``MissingAttribute`` or ``InvalidAttribute``.
        """
        return generate_path(self.get_route(name), attributes, basepath=self._config.basepath)

    def generate_raw(self, name: str, attributes: Mapping[str, Any] | None = None) -> str:
        """Like ``generate`` but substitutes values without encoding them."""
        return generate_path(
            self.get_route(name), attributes, raw=True, basepath=self._config.basepath
        )
