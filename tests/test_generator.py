"""Tests for wayfinder.routing.generator: reverse routing."""

import pytest

from wayfinder.errors import ConfigurationError, InvalidAttribute, MissingAttribute
from wayfinder.routing.generator import generate_path
from wayfinder.routing.route import Route


class TestRequired:
    def test_static(self) -> None:
        assert generate_path(Route("/about", "about")) == "/about"

    def test_supplied_value(self) -> None:
        route = Route("/blog/{id}", "blog").set_tokens({"id": r"\d+"})
        assert generate_path(route, {"id": "42"}) == "/blog/42"

    def test_non_string_value(self) -> None:
        route = Route("/blog/{id}", "blog").set_tokens({"id": r"\d+"})
        assert generate_path(route, {"id": 42}) == "/blog/42"

    def test_default_fills_in(self) -> None:
        route = Route("/{lang}/about", "about").set_defaults({"lang": "en"})
        assert generate_path(route) == "/en/about"
        assert generate_path(route, {"lang": "fr"}) == "/fr/about"

    def test_missing(self) -> None:
        route = Route("/blog/{id}", "blog")
        with pytest.raises(MissingAttribute) as exc_info:
            generate_path(route, {})
        assert exc_info.value.attribute == "id"
        assert exc_info.value.route_name == "blog"

    def test_none_counts_as_missing(self) -> None:
        with pytest.raises(MissingAttribute):
            generate_path(Route("/blog/{id}", "blog"), {"id": None})

    def test_invalid(self) -> None:
        route = Route("/blog/{id}", "blog").set_tokens({"id": r"\d+"})
        with pytest.raises(InvalidAttribute) as exc_info:
            generate_path(route, {"id": "abc"})
        assert exc_info.value.value == "abc"
        assert exc_info.value.pattern == r"\d+"

    def test_default_token_rejects_slash(self) -> None:
        with pytest.raises(InvalidAttribute):
            generate_path(Route("/u/{name}", "u"), {"name": "a/b"})

    def test_extra_values_ignored(self) -> None:
        route = Route("/blog/{id}", "blog")
        assert generate_path(route, {"id": "1", "format": "json"}) == "/blog/1"

    def test_no_path(self) -> None:
        with pytest.raises(ConfigurationError):
            generate_path(Route(name="x"))


class TestEncoding:
    def test_values_are_encoded(self) -> None:
        route = Route("/search/{q}", "search")
        assert generate_path(route, {"q": "fish & chips"}) == "/search/fish%20&%20chips"

    def test_segment_characters_kept(self) -> None:
        route = Route("/users/{email}", "user")
        assert generate_path(route, {"email": "a@b.com"}) == "/users/a@b.com"
        assert generate_path(route, {"email": "x,y;z=1"}) == "/users/x,y;z=1"

    def test_reserved_characters_escaped(self) -> None:
        route = Route("/search/{q}", "search").set_tokens({"q": ".+"})
        assert generate_path(route, {"q": "100%"}) == "/search/100%25"
        assert generate_path(route, {"q": "a?b#c"}) == "/search/a%3Fb%23c"
        assert generate_path(route, {"q": "a/b"}) == "/search/a%2Fb"

    def test_wildcard_segments_keep_segment_characters(self) -> None:
        route = Route("/files", "files").set_wildcard("rest")
        assert generate_path(route, {"rest": "a@b/c,d"}) == "/files/a@b/c,d"

    def test_raw_leaves_values_alone(self) -> None:
        route = Route("/search/{q}", "search")
        assert generate_path(route, {"q": "fish & chips"}, raw=True) == "/search/fish & chips"


class TestOptional:
    def test_emits_values_in_order(self) -> None:
        route = Route("/archive{/year,month,day}", "archive")
        assert generate_path(route) == "/archive"
        assert generate_path(route, {"year": 2024}) == "/archive/2024"
        assert generate_path(route, {"year": 2024, "month": "05"}) == "/archive/2024/05"

    def test_stops_at_first_gap(self) -> None:
        route = Route("/archive{/year,month,day}", "archive")
        assert generate_path(route, {"year": 2024, "day": 9}) == "/archive/2024"

    def test_optional_values_validated(self) -> None:
        route = Route("/archive{/year}", "archive").set_tokens({"year": r"\d{4}"})
        with pytest.raises(InvalidAttribute):
            generate_path(route, {"year": "24"})


class TestWildcard:
    def test_string_value(self) -> None:
        route = Route("/files", "files").set_wildcard("rest")
        assert generate_path(route, {"rest": "a/b/c"}) == "/files/a/b/c"

    def test_sequence_value(self) -> None:
        route = Route("/files", "files").set_wildcard("rest")
        assert generate_path(route, {"rest": ["a", "b c"]}) == "/files/a/b%20c"
        assert generate_path(route, {"rest": ["a", "b c"]}, raw=True) == "/files/a/b c"

    def test_absent_value(self) -> None:
        route = Route("/files/", "files").set_wildcard("rest")
        assert generate_path(route) == "/files"
        assert generate_path(route, {"rest": ""}) == "/files"

    def test_after_token(self) -> None:
        route = Route("/repo/{name}", "repo").set_wildcard("path")
        assert generate_path(route, {"name": "w", "path": "src/app.py"}) == "/repo/w/src/app.py"


class TestBasepath:
    def test_prefixed(self) -> None:
        assert generate_path(Route("/about", "about"), basepath="/app") == "/app/about"

    def test_root(self) -> None:
        assert generate_path(Route("/", "home"), basepath="/app/") == "/app/"
