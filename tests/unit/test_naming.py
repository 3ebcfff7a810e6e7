"""Tests for deployment name normalization and validation."""

from __future__ import annotations

import pytest

from bobhost.core.errors import InvalidInputError
from bobhost.core.naming import (
    MAX_NAME_LENGTH,
    display_name,
    normalize_name,
    require_site_name,
    to_site_name,
    validate_name,
)


class TestNormalizeName:
    def test_spaces_and_punctuation(self):
        assert normalize_name("My Cool Site!!") == "my-cool-site"

    def test_strips_scheme_and_www(self):
        assert normalize_name("https://www.example-site/path") == "example-site"

    def test_strips_existing_suffix(self):
        assert normalize_name("portfolio.bob") == "portfolio"

    def test_collapses_and_trims_hyphens(self):
        assert normalize_name("--a  --  b--") == "a-b"

    def test_removes_underscores_and_dots(self):
        assert normalize_name("my_site.v2") == "mysitev2"

    def test_idempotent(self):
        once = normalize_name("  Hello   World ")
        assert normalize_name(once) == once


class TestValidateName:
    def test_valid(self):
        assert validate_name("abc") == "abc"
        assert validate_name("a-b-c") == "a-b-c"

    def test_too_short(self):
        with pytest.raises(InvalidInputError):
            validate_name("ab")

    def test_too_long(self):
        with pytest.raises(InvalidInputError):
            validate_name("a" * (MAX_NAME_LENGTH + 1))

    def test_max_length_ok(self):
        assert validate_name("a" * MAX_NAME_LENGTH)

    @pytest.mark.parametrize("name", ["-abc", "abc-", "a--b", "ABC", "a_b"])
    def test_pattern(self, name: str):
        with pytest.raises(InvalidInputError):
            validate_name(name)


class TestSiteName:
    def test_to_site_name(self):
        assert to_site_name("My Cool Site!!") == "my-cool-site.bob"

    def test_to_site_name_too_short_after_normalizing(self):
        with pytest.raises(InvalidInputError):
            to_site_name("A!")

    def test_require_site_name(self):
        assert require_site_name("abc.bob") == "abc.bob"
        with pytest.raises(InvalidInputError):
            require_site_name("abc")

    def test_display_name(self):
        assert display_name("my-site.bob") == "my-site"
