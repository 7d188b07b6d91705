# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for UrlPattern matching, parsing and expansion."""

import pytest

from genro_navigation import UrlPattern


def test_static_pattern_matches_whole_path_only():
    url = UrlPattern("/users")
    assert url.matches("/users")
    assert not url.matches("/users/1")
    assert not url.matches("/prefix/users")
    assert url.parse("/users") == []
    assert url.expand([]) == "/users"


def test_bare_and_braced_params_are_equivalent():
    bare = UrlPattern("/users/:id/posts/:post")
    braced = UrlPattern("/users/{id}/posts/{post}")
    for url in (bare, braced):
        assert url.names == ("id", "post")
        assert url.parse("/users/7/posts/hello") == ["7", "hello"]
        assert url.expand(["7", "hello"]) == "/users/7/posts/hello"


def test_typed_params_restrict_matching_and_convert():
    url = UrlPattern("/items/{id:int}/{price:float}")
    assert url.matches("/items/12/3.5")
    assert not url.matches("/items/abc/3.5")
    params = url.parse("/items/12/3.5")
    assert params == ["12", "3.5"]
    assert url.convert(params) == {"id": 12, "price": 3.5}
    assert url.named(params) == {"id": "12", "price": "3.5"}


def test_path_converter_consumes_rest():
    url = UrlPattern("/files/{rest:path}")
    assert url.parse("/files/a/b/c.txt") == ["a/b/c.txt"]
    assert url.expand(["a/b/c.txt"]) == "/files/a/b/c.txt"


def test_fragment_pattern_matches_both_forms():
    url = UrlPattern("/app#article/{id:int}")
    assert url.matches("/app#article/12")
    assert url.matches("/app/article/12")
    assert url.parse("/app#article/12") == ["12"]
    assert url.expand([12], use_fragment=True) == "/app#article/12"
    assert url.expand([12]) == "/app/article/12"


def test_str_param_stops_at_fragment():
    url = UrlPattern("/users/:id")
    assert not url.matches("/users/1#tab")


def test_expand_validates_arity_and_converters():
    url = UrlPattern("/items/{id:int}")
    with pytest.raises(ValueError, match="expects 1 params"):
        url.expand([])
    with pytest.raises(ValueError, match="Invalid value"):
        url.expand(["abc"])


def test_parse_mismatch_raises():
    with pytest.raises(ValueError, match="does not match"):
        UrlPattern("/users/:id").parse("/teams/1")


def test_round_trip_parse_expand():
    url = UrlPattern("/orgs/:org/repos/{repo}/issues/{n:int}")
    params = ["genro", "routes", "42"]
    assert url.parse(url.expand(params)) == params
    assert url.parse(url.expand(params, use_fragment=True)) == params


def test_invalid_patterns():
    with pytest.raises(ValueError, match="Unknown converter"):
        UrlPattern("/x/{id:uuid}")
    with pytest.raises(ValueError, match="Duplicate parameter"):
        UrlPattern("/x/:id/:id")
    with pytest.raises(ValueError, match="more than one"):
        UrlPattern("/a#b#c")


def test_equality_and_hash_follow_pattern_text():
    assert UrlPattern("/a/:id") == UrlPattern("/a/:id")
    assert UrlPattern("/a/:id") != UrlPattern("/a/{id}")
    assert len({UrlPattern("/a"), UrlPattern("/a")}) == 1
    assert str(UrlPattern("/a")) == "/a"
    assert repr(UrlPattern("/a")) == "UrlPattern('/a')"


def test_literal_regex_characters_are_escaped():
    url = UrlPattern("/v1.0/(x)")
    assert url.matches("/v1.0/(x)")
    assert not url.matches("/v1a0/(x)")
