"""Tests for helper functions."""

import pytest

from config import ConfigError, EnumeratorConfig
from utils import (
    base_domain,
    format_result,
    format_time,
    load_resolvers_from_file,
    normalize_resolver,
    resolve_resolver_host,
    parse_resolver_list,
    validate_domain,
)


class TestResolvers:
    """Test resolver list and file loading."""

    def test_normalize(self):
        assert normalize_resolver("8.8.8.8") == "8.8.8.8:53"
        assert normalize_resolver(" 1.1.1.1:5353 ") == "1.1.1.1:5353"
        assert normalize_resolver("2001:db8::1") == "[2001:db8::1]:53"
        assert normalize_resolver("[2001:db8::1]") == "[2001:db8::1]:53"

    def test_comma_list(self):
        assert parse_resolver_list("8.8.8.8:53,1.1.1.1") == ["8.8.8.8:53", "1.1.1.1:53"]
        assert parse_resolver_list("") == []

    def test_file_skips_comments_and_blanks(self, tmp_path):
        path = tmp_path / "resolvers.txt"
        path.write_text("# public\n8.8.8.8\n\n  1.1.1.1:53  \n#9.9.9.9\n")
        assert load_resolvers_from_file(str(path)) == ["8.8.8.8:53", "1.1.1.1:53"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_resolvers_from_file(str(tmp_path / "nope.txt"))

    @pytest.mark.parametrize("entry", ["8.8.8.8:0", "8.8.8.8:70000", "[::1", ":53"])
    def test_malformed(self, entry):
        with pytest.raises(ConfigError):
            normalize_resolver(entry)


class TestConfig:
    """Test run configuration validation."""

    def test_defaults_are_valid(self):
        config = EnumeratorConfig().validate()
        assert config.resolvers == ("8.8.8.8:53", "1.1.1.1:53")
        assert config.rate == 10
        assert config.wildcard_check

    @pytest.mark.parametrize("kwargs", [
        {"resolvers": ()},
        {"rate": 0},
        {"timeout": 0},
        {"max_concurrent": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            EnumeratorConfig(**kwargs).validate()


def test_base_domain():
    assert base_domain("a.b.example.com") == "example.com"
    assert base_domain("example.com.") == "example.com"
    assert base_domain("localhost") == ""
    assert base_domain("bad..com") == ""


def test_format_result():
    assert format_result("a.example.com", ["10.0.0.1", "10.0.0.2"]) == "a.example.com [10.0.0.1, 10.0.0.2]"
    assert format_result("a.example.com", []) == "a.example.com []"


def test_validate_domain():
    assert validate_domain("example.com")
    assert not validate_domain("example")
    assert not validate_domain("ex..com")
    assert not validate_domain("-example.com")


def test_format_time():
    assert format_time(1.5) == "1.50s"
    assert format_time(125) == "2m 5s"
    assert format_time(3720) == "1h 2m"


def test_resolve_resolver_host_keeps_addresses(monkeypatch):
    def getaddrinfo(*args, **kwargs):
        raise AssertionError("addresses must not be looked up")

    monkeypatch.setattr("socket.getaddrinfo", getaddrinfo)
    assert resolve_resolver_host("8.8.8.8:53") == "8.8.8.8:53"
    assert resolve_resolver_host("[2001:db8::1]:53") == "[2001:db8::1]:53"
