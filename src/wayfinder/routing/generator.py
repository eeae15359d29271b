"""Reverse routing: build a request path from a route and attribute values."""

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from wayfinder.errors import ConfigurationError, InvalidAttribute, MissingAttribute
from wayfinder.routing.compiler import DEFAULT_TOKEN, parse_template
from wayfinder.routing.route import Route

# RFC 3986 pchar sub-delims plus ":" and "@" need no escaping in a segment
_SEGMENT_SAFE = "!$&'()*+,;=:@"


def _lookup(name: str, supplied: Mapping[str, Any], defaults: Mapping[str, Any]) -> Any:
    value = supplied.get(name)
    if value is None:
        value = defaults.get(name)
    return value


def _wildcard_tail(value: Any, *, raw: bool) -> str:
    if isinstance(value, (list, tuple)):
        segments = [str(segment) for segment in value]
    else:
        text = str(value).strip("/")
        segments = text.split("/") if text else []
    if not raw:
        segments = [quote(segment, safe=_SEGMENT_SAFE) for segment in segments]
    return "/".join(segments)


def generate_path(
    route: Route,
    attributes: Mapping[str, Any] | None = None,
    *,
    raw: bool = False,
    basepath: str = "",
) -> str:
    """Substitute attribute values into *route*'s path template.

    Each placeholder takes the supplied value, else the route default.
    A required placeholder with neither raises ``MissingAttribute``; an
    optional group stops at its first absent value. Every substituted
    value must fully match its token pattern or ``InvalidAttribute`` is
    raised. The wildcard value (a string or a sequence of segments) is
    appended as the path remainder.

    Attribute values are decoded path text, as matching captures them.
    Unless *raw* is true each value is percent-encoded as a path segment
    (characters legal in a segment, such as ``@`` and ``,``, are kept),
    so generating from a match yields the encoded form of the matched
    path.
    """
    if route.path is None:
        msg = f"{route!r} has no path to generate from."
        raise ConfigurationError(msg)

    supplied = attributes or {}
    defaults = route.defaults
    tokens = route.tokens
    route_name = route.name or route.path

    def substitute(name: str) -> str:
        text = str(_lookup(name, supplied, defaults))
        token = tokens.get(name, DEFAULT_TOKEN)
        if re.fullmatch(token, text) is None:
            raise InvalidAttribute(route_name, name, text, token)
        return text if raw else quote(text, safe=_SEGMENT_SAFE)

    template = route.path.rstrip("/") if route.wildcard else route.path
    pieces: list[str] = [basepath.rstrip("/")]
    for part in parse_template(template):
        if not part.is_param:
            pieces.append(part.value)
        elif part.optional:
            for name in part.names:
                if _lookup(name, supplied, defaults) is None:
                    break
                pieces.append("/" + substitute(name))
        else:
            name = part.names[0]
            if _lookup(name, supplied, defaults) is None:
                raise MissingAttribute(route_name, name)
            pieces.append(substitute(name))

    if route.wildcard:
        value = _lookup(route.wildcard, supplied, defaults)
        if value is not None:
            tail = _wildcard_tail(value, raw=raw)
            if tail:
                pieces.append("/" + tail)

    return "".join(pieces) or "/"
