"""Wayfinder: named-route matching and reverse routing.

Matches an inbound request against an ordered collection of named
routes, and builds request paths back from a route name and attributes.

Basic usage::

    from wayfinder import Request, Router

    router = Router()
    router.get("blog.read", "/blog/{id}").set_tokens({"id": r"\\d+"})
    router.freeze()

    result = router.match(Request.build("/blog/42"))
    if not result:
        raise result.to_http_error()
    router.generate(result.name, result.attributes)  # "/blog/42"
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "HTTPError",
    "ImmutableProperty",
    "InvalidAttribute",
    "Matched",
    "MethodNotAllowed",
    "MissingAttribute",
    "NoMatch",
    "NotAcceptable",
    "NotFound",
    "Request",
    "RequestLike",
    "Route",
    "RouteAlreadyExists",
    "RouteNotFound",
    "Router",
    "RouterConfig",
    "Secure",
    "WayfinderError",
]

# Public name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "wayfinder.errors",
    "HTTPError": "wayfinder.errors",
    "ImmutableProperty": "wayfinder.errors",
    "InvalidAttribute": "wayfinder.errors",
    "Matched": "wayfinder.routing.route",
    "MethodNotAllowed": "wayfinder.errors",
    "MissingAttribute": "wayfinder.errors",
    "NoMatch": "wayfinder.routing.route",
    "NotAcceptable": "wayfinder.errors",
    "NotFound": "wayfinder.errors",
    "Request": "wayfinder.http.request",
    "RequestLike": "wayfinder.http.request",
    "Route": "wayfinder.routing.route",
    "RouteAlreadyExists": "wayfinder.errors",
    "RouteNotFound": "wayfinder.errors",
    "Router": "wayfinder.routing.router",
    "RouterConfig": "wayfinder.config",
    "Secure": "wayfinder.routing.route",
    "WayfinderError": "wayfinder.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wayfinder`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
