"""Tests for origin computation and validation."""

from __future__ import annotations

import pytest

from editor_bridge.origin import OriginValidator, origin_of


class TestOriginOf:
    """Tests for origin_of()."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://e.example", "https://e.example"),
            ("https://e.example/editor/index.html?x=1#top", "https://e.example"),
            ("HTTPS://E.Example/path", "https://e.example"),
            ("https://e.example:443/", "https://e.example"),
            ("http://e.example:80/", "http://e.example"),
            ("https://e.example:8443/", "https://e.example:8443"),
            ("http://localhost:3000", "http://localhost:3000"),
            ("https://user:pw@e.example/", "https://e.example"),
            ("http://[::1]:8080/", "http://[::1]:8080"),
        ],
    )
    def test_serializes_origin(self, url: str, expected: str) -> None:
        assert origin_of(url) == expected

    @pytest.mark.parametrize("url", ["", "e.example", "/relative/path", "https://"])
    def test_rejects_url_without_origin(self, url: str) -> None:
        with pytest.raises(ValueError):
            origin_of(url)


class TestOriginValidator:
    """Tests for OriginValidator."""

    def test_rejects_everything_without_url(self) -> None:
        validator = OriginValidator()
        assert validator.origin is None
        assert not validator.accepts("https://e.example")

    def test_accepts_exact_origin_only(self) -> None:
        validator = OriginValidator("https://e.example/editor")
        assert validator.accepts("https://e.example")
        assert not validator.accepts("https://e.example:8443")
        assert not validator.accepts("http://e.example")
        assert not validator.accepts("https://evil.example")
        assert not validator.accepts("https://e.example.evil.example")
        assert not validator.accepts("null")
        assert not validator.accepts(None)

    def test_origin_follows_url_changes(self) -> None:
        validator = OriginValidator("https://a.example")
        assert validator.accepts("https://a.example")

        validator.url = "https://b.example"

        assert validator.origin == "https://b.example"
        assert not validator.accepts("https://a.example")
        assert validator.accepts("https://b.example")

    def test_unusable_url_rejects(self) -> None:
        validator = OriginValidator("not a url")
        assert validator.origin is None
        assert not validator.accepts("not a url")
