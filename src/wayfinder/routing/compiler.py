"""Path compiler: route templates to anchored regular expressions.

A template mixes literal text with three kinds of placeholder::

    "/blog/{id}"            required token, captured as ``id``
    "/archive{/year,month}" optional tail; ``/2024`` and ``/2024/05`` both match
    wildcard="rest"         declared on the route, captures everything after the path

Compilation is pure: the same (path, tokens, wildcard) always yields an
equal pattern, so the result can be shared freely between threads.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from wayfinder.errors import ConfigurationError

DEFAULT_TOKEN = r"[^/]+"

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_PARAM_RE = re.compile(rf"\{{/({_NAME}(?:,{_NAME})*)\}}|\{{({_NAME})\}}")
_FLASK_STYLE_RE = re.compile(r"<[A-Za-z_][^<>/]*>")


@dataclass(frozen=True, slots=True)
class TemplatePart:
    """A parsed piece of a route template.

    Literal:  ``/blog/``      (names=())
    Token:    ``{id}``        (names=("id",))
    Optional: ``{/year,month}`` (names=("year", "month"), optional=True)
    """

    value: str
    names: tuple[str, ...] = ()
    optional: bool = False

    @property
    def is_param(self) -> bool:
        return bool(self.names)


def parse_template(path: str) -> list[TemplatePart]:
    """Split a route template into literal and placeholder parts.

    Examples::

        "/blog/{id}"        -> [TemplatePart("/blog/"), TemplatePart("{id}", ("id",))]
        "/a{/b,c}"          -> [TemplatePart("/a"), TemplatePart("{/b,c}", ("b", "c"), True)]

    Raises ``ConfigurationError`` for Flask-style ``<param>`` placeholders.
    """
    if _FLASK_STYLE_RE.search(path):
        msg = (
            f"Route path {path!r} uses <param> placeholders. "
            "Use {param} instead, e.g. '/users/{id}'."
        )
        raise ConfigurationError(msg)

    parts: list[TemplatePart] = []
    pos = 0
    for found in _PARAM_RE.finditer(path):
        if found.start() > pos:
            parts.append(TemplatePart(path[pos : found.start()]))
        optional, name = found.groups()
        if optional is not None:
            parts.append(TemplatePart(found.group(0), tuple(optional.split(",")), optional=True))
        else:
            parts.append(TemplatePart(found.group(0), (name,)))
        pos = found.end()
    if pos < len(path):
        parts.append(TemplatePart(path[pos:]))
    return parts


def placeholders(path: str) -> tuple[str, ...]:
    """Names of every placeholder in *path*, in template order."""
    return tuple(name for part in parse_template(path) for name in part.names)


def _capture(name: str, tokens: Mapping[str, str]) -> str:
    return f"(?P<{name}>{tokens.get(name, DEFAULT_TOKEN)})"


def _optional_group(names: tuple[str, ...], tokens: Mapping[str, str], *, leading: bool) -> str:
    # Each later name is only reachable once the one before it matched.
    inner = ""
    for name in reversed(names[1:]):
        inner = f"(?:/{_capture(name, tokens)}{inner})?"
    first = _capture(names[0], tokens)
    if leading:
        return f"/(?:{first}{inner})?"
    return f"(?:/{first}{inner})?"


def compile_path(
    path: str,
    tokens: Mapping[str, str] | None = None,
    wildcard: str | None = None,
) -> re.Pattern[str]:
    """Compile a route template into an anchored pattern with named groups.

    Undeclared tokens fall back to ``DEFAULT_TOKEN``. With a *wildcard*,
    any trailing slash is dropped from the template and an optional
    ``/(?P<wildcard>.*)`` group consumes the rest of the path, separators
    included.

    Raises ``ConfigurationError`` when the template or a token pattern
    cannot be compiled (bad regex, a repeated placeholder or wildcard
    name, ``<param>`` syntax).
    """
    tokens = tokens or {}
    template = path.rstrip("/") if wildcard else path

    names = list(placeholders(template))
    if wildcard:
        names.append(wildcard)
    seen: set[str] = set()
    for name in names:
        if name in seen:
            msg = f"Route path {path!r} repeats placeholder {name!r}."
            raise ConfigurationError(msg)
        seen.add(name)

    chunks: list[str] = []
    for index, part in enumerate(parse_template(template)):
        if not part.is_param:
            chunks.append(re.escape(part.value))
        elif part.optional:
            chunks.append(_optional_group(part.names, tokens, leading=index == 0))
        else:
            chunks.append(_capture(part.names[0], tokens))

    if wildcard:
        chunks.append(f"(?:/(?P<{wildcard}>.*))?")

    try:
        return re.compile("^" + "".join(chunks) + "$")
    except re.error as exc:
        msg = f"Cannot compile route path {path!r}: {exc}"
        raise ConfigurationError(msg) from exc
