"""
Tests for subscription path matching.
"""
import pytest

from gateway_service.core import pathtree


@pytest.mark.parametrize("pattern,path,params", [
    ("/", "/", {}),
    ("/users", "/users", {}),
    ("/users", "/users/", {}),
    ("/users/:id", "/users/42", {"id": "42"}),
    ("/users/:id/posts/:post", "/users/1/posts/2", {"id": "1", "post": "2"}),
    ("/static/*file", "/static/css/site.css", {"file": "css/site.css"}),
])
def test_match(pattern, path, params):
    assert pathtree.match(pattern, path) == params


@pytest.mark.parametrize("pattern,path", [
    ("/", "/users"),
    ("/users", "/accounts"),
    ("/users/:id", "/users"),
    ("/users/:id", "/users/1/posts"),
    ("/users/*rest", "/users"),
    ("/*all", "/"),
])
def test_no_match(pattern, path):
    assert pathtree.match(pattern, path) is None


def test_static_beats_parameter():
    pattern, params = pathtree.best_match(["/users/:id", "/users/me"], "/users/me")
    assert pattern == "/users/me"
    assert params == {}


def test_parameter_beats_wildcard():
    pattern, params = pathtree.best_match(["/users/*rest", "/users/:id"], "/users/7")
    assert pattern == "/users/:id"
    assert params == {"id": "7"}


def test_wildcard_as_fallback():
    pattern, params = pathtree.best_match(["/users/*rest", "/users/:id"], "/users/7/posts")
    assert pattern == "/users/*rest"
    assert params == {"rest": "7/posts"}


def test_static_beats_empty_wildcard():
    pattern, params = pathtree.best_match(["/users/*rest", "/users"], "/users")
    assert pattern == "/users"
    assert params == {}


def test_root_beats_catch_all():
    assert pathtree.best_match(["/*all", "/"], "/") == ("/", {})
    assert pathtree.best_match(["/*all", "/"], "/docs/intro") == ("/*all", {"all": "docs/intro"})


def test_best_match_none():
    assert pathtree.best_match(["/users/:id"], "/accounts/1") is None


@pytest.mark.parametrize("first,second,expected", [
    ("/users/:id", "/users/:name", True),
    ("/users/:id", "/users/me", False),
    ("/users", "/users", True),
    ("/users/:id", "/users/:id/posts", False),
    ("/files/*path", "/files/*rest", True),
])
def test_conflicts(first, second, expected):
    assert pathtree.conflicts(first, second) is expected
