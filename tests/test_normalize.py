"""Tests for URL canonicalization."""

from __future__ import annotations

import pytest

from linkcrawler.core import host_of, is_same_host, normalize_url
from linkcrawler.errors import MalformedURLError


class TestNormalizeUrl:
    def test_scheme_www_slash_and_case_fold_together(self):
        expected = "example.com/path"
        assert normalize_url("https://WWW.Example.com/Path/") == expected
        assert normalize_url("example.com/path") == expected
        assert normalize_url("http://example.com/path/") == expected

    def test_root_with_and_without_slash(self):
        assert normalize_url("https://example.com/") == "example.com"
        assert normalize_url("https://example.com") == "example.com"

    def test_only_one_trailing_slash_removed(self):
        assert normalize_url("https://example.com/a//") == "example.com/a/"

    def test_only_leading_www_label_removed(self):
        assert normalize_url("https://blog.www.example.com/x") == "blog.www.example.com/x"
        assert normalize_url("https://wwwexample.com/x") == "wwwexample.com/x"

    def test_port_is_dropped(self):
        assert normalize_url("http://example.com:8080/a") == "example.com/a"

    def test_query_strings_are_kept(self):
        a = normalize_url("https://example.com/p?a=1")
        b = normalize_url("https://example.com/p?a=2")
        assert a == "example.com/p?a=1"
        assert a != b

    def test_fragment_is_kept(self):
        assert normalize_url("https://example.com/p#Top") == "example.com/p#top"

    def test_trailing_slash_before_query(self):
        assert normalize_url("https://example.com/p/?q=1") == "example.com/p?q=1"

    @pytest.mark.parametrize(
        "url",
        [
            "https://WWW.Example.com/Path/",
            "http://example.com",
            "https://example.com/p?a=1#frag",
            "https://example.com/p/?Q=1",
            "example.com/path",
            "http://localhost:8000/docs/",
            "https://example.com/caf%C3%A9/",
            "http://[::1]:8000/x",
            "https://[2001:DB8::1]/",
        ],
    )
    def test_idempotent(self, url):
        once = normalize_url(url)
        assert normalize_url(once) == once

    def test_ipv6_host_keeps_brackets(self):
        assert normalize_url("http://[::1]:8000/x") == "[::1]/x"
        assert normalize_url("https://[2001:DB8::1]/") == "[2001:db8::1]"

    def test_repeated_www_and_double_slash_shrink_per_pass(self):
        assert normalize_url("https://www.www.example.com/a") == "www.example.com/a"
        assert normalize_url("www.example.com/a") == "example.com/a"
        assert normalize_url("example.com/a/") == "example.com/a"

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "   ",
            "mailto:someone@example.com",
            "javascript:void(0)",
            "http://[::1",
            "http://example.com:99999/",
            "https:///no-host",
        ],
    )
    def test_malformed(self, url):
        with pytest.raises(MalformedURLError):
            normalize_url(url)

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_url("http://[::1")


class TestHostOf:
    def test_raw_host_without_www_folding(self):
        assert host_of("https://www.example.com/a") == "www.example.com"
        assert host_of("http://Example.com:8080/a") == "example.com"

    def test_no_host(self):
        assert host_of("mailto:someone@example.com") == ""

    def test_invalid(self):
        with pytest.raises(MalformedURLError):
            host_of("http://[::1")

    def test_same_host_ignores_scheme(self):
        assert is_same_host("http://example.com/a", "example.com")
        assert is_same_host("https://example.com/b", "example.com")
        assert not is_same_host("https://www.example.com/b", "example.com")
        assert not is_same_host("https://other.com/", "example.com")
