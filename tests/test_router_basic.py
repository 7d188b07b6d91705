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

"""Tests for route registration, resolution and event dispatch."""

import asyncio
import logging

import pytest

from genro_navigation import (
    BaseRouter,
    MemoryNavigationHost,
    NotFound,
    RouteEnterEvent,
    RouteErrorEvent,
    Router,
    UndefinedRouteEvent,
    UrlPattern,
)


def make_router(path="/", **kwargs):
    host = MemoryNavigationHost(path)
    return Router(host, **kwargs), host


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


def test_router_requires_host():
    with pytest.raises(ValueError, match="navigation host"):
        Router(None)


def test_use_fragment_defaults_to_host_push_state_support():
    assert Router(MemoryNavigationHost(push_state=True)).use_fragment is False
    assert Router(MemoryNavigationHost(push_state=False)).use_fragment is True
    assert Router(MemoryNavigationHost(push_state=True), use_fragment=True).use_fragment is True


def test_use_fragment_is_read_only():
    router, _ = make_router()
    with pytest.raises(AttributeError):
        router.use_fragment = True


def test_add_route_accepts_string_or_pattern_and_chains():
    router, _ = make_router()
    result = router.add_route("/a", Recorder(), name="a").add_route(UrlPattern("/b/:id"), Recorder())
    assert result is router
    assert [r.pattern.pattern for r in router.routes] == ["/a", "/b/:id"]
    assert [r.title for r in router.routes] == ["a", "/b/:id"]


def test_add_route_rejects_non_callable_and_unknown_options():
    router, _ = make_router()
    with pytest.raises(TypeError):
        router.add_route("/a", "nope")
    with pytest.raises(TypeError, match="Unexpected route options: color"):
        router.add_route("/a", Recorder(), color="red")
    base = BaseRouter(MemoryNavigationHost())
    with pytest.raises(TypeError, match="logging_before"):
        base.add_route("/a", Recorder(), logging_before=False)


def test_route_decorator_registers_and_returns_function():
    router, _ = make_router()

    @router.route("/users/{id:int}", name="user")
    def show_user(event):
        """Show one user."""

    assert router.routes[0].on_enter is show_user
    assert router.routes[0].name == "user"


def test_first_registered_pattern_wins():
    router, host = make_router()
    by_id, new = Recorder(), Recorder()
    router.add_route("/users/:id", by_id)
    router.add_route("/users/new", new)
    router.goto_path("/users/new")
    assert len(by_id.events) == 1
    assert by_id.events[0].params == ("new",)
    assert new.events == []
    assert host.current_path() == "/users/new"


def test_reregistering_pattern_replaces_route_in_place():
    router, _ = make_router()
    old, exact, latest = Recorder(), Recorder(), Recorder()
    router.add_route("/x/:id", old)
    router.add_route("/x/1", exact)
    router.add_route("/x/:id", latest)
    assert [r.on_enter for r in router.routes] == [latest, exact]
    router.goto_path("/x/1")
    assert old.events == []
    assert exact.events == []
    assert len(latest.events) == 1


def test_unmatched_path_without_error_subscriber_raises():
    router, host = make_router()
    router.add_route("/a", Recorder())
    with pytest.raises(NotFound, match="/nope") as exc:
        router.goto_path("/nope")
    assert exc.value.path == "/nope"
    assert host.history == [("", "/")]


def test_unmatched_path_with_error_subscriber_fires_one_error_event():
    router, host = make_router()
    errors = Recorder()
    router.on_error(errors)
    router.goto_path("/nope")
    assert len(errors.events) == 1
    event = errors.events[0]
    assert isinstance(event, RouteErrorEvent)
    assert event.path == "/nope"
    assert isinstance(event.error, NotFound)
    assert host.history == [("", "/")]


def test_route_callback_runs_without_stream_subscribers():
    router, _ = make_router()
    callback = Recorder()
    router.add_route("/a", callback)
    router.goto_path("/a")
    assert len(callback.events) == 1
    assert router._on_enter is None


def test_route_callback_runs_before_stream_subscriber():
    router, _ = make_router()
    order = []
    router.add_route("/a/:id", lambda e: order.append(("route", e.params)))
    router.on_enter(lambda e: order.append(("stream", e.params)))
    router.goto_path("/a/1")
    assert order == [("route", ("1",)), ("stream", ("1",))]


def test_enter_channel_is_dropped_after_last_cancel():
    router, _ = make_router()
    router.add_route("/a", Recorder())
    first = Recorder()
    sub = router.on_enter(first)
    assert router._on_enter is not None
    sub.cancel()
    assert router._on_enter is None

    router.goto_path("/a")
    second = Recorder()
    router.on_enter(second)
    assert second.events == []
    router.goto_path("/a")
    assert len(second.events) == 1
    assert first.events == []


def test_error_channel_teardown_restores_fatal_policy():
    router, _ = make_router()
    sub = router.on_error(Recorder())
    router.goto_path("/nope")
    sub.cancel()
    assert router._on_error is None
    with pytest.raises(NotFound):
        router.goto_path("/nope")


def test_fire_rejects_unknown_event():
    router, _ = make_router()
    with pytest.raises(UndefinedRouteEvent):
        router._fire("not an event")


def test_error_event_without_subscriber_is_dropped():
    router, _ = make_router()
    router._fire(RouteErrorEvent(NotFound("/x"), "/x"))


def test_handle_logs_unmatched_paths(caplog):
    router, _ = make_router()
    caplog.set_level(logging.INFO, logger="genro_navigation")
    router._handle("/nowhere")
    assert "Unhandled path: /nowhere" in caplog.text


def test_handle_with_error_subscriber_delivers_error_event():
    router, _ = make_router()
    errors = Recorder()
    router.on_error(errors)
    router._handle("/nowhere")
    assert [e.path for e in errors.events] == ["/nowhere"]


def test_handle_fires_canonical_path():
    router, _ = make_router(use_fragment=True)
    callback = Recorder()
    router.add_route("/app#item/{id:int}", callback)
    router._handle("/app/item/3")
    event = callback.events[0]
    assert isinstance(event, RouteEnterEvent)
    assert event.path == "/app#item/3"
    assert event.params == ("3",)
    assert event.named_params == {"id": "3"}


def test_nodes_describes_routes_in_order():
    router, _ = make_router(name="main")

    def show(event):
        """Show an item."""

    router.add_route("/items/{id:int}", show, name="item")
    router.add_route("/about", Recorder())
    info = router.nodes()
    assert info["name"] == "main"
    assert info["use_fragment"] is False
    assert info["listening"] is False
    assert list(info["routes"]) == ["/items/{id:int}", "/about"]
    item = info["routes"]["/items/{id:int}"]
    assert item["name"] == "item"
    assert item["params"] == ["id"]
    assert item["doc"] == "Show an item."


def test_nodes_keeps_routes_whose_titles_collide():
    router, _ = make_router()
    router.add_route("/about", Recorder())
    router.add_route("/info", Recorder(), name="/about")
    routes = router.nodes()["routes"]
    assert list(routes) == ["/about", "/info"]
    assert routes["/about"]["name"] is None
    assert routes["/info"]["name"] == "/about"


def test_failing_enter_subscriber_does_not_block_route_callback(caplog):
    router, _ = make_router()
    entered = []
    router.add_route("/a", lambda e: entered.append(e.path))

    def broken(event):
        raise RuntimeError("subscriber down")

    later = Recorder()
    router.on_enter(broken)
    router.on_enter(later)
    caplog.set_level(logging.ERROR, logger="genro_navigation")
    router.goto_path("/a")
    assert entered == ["/a"]
    assert [e.path for e in later.events] == ["/a"]
    assert "Subscriber failed on /a: subscriber down" in caplog.text


def test_failing_error_subscriber_does_not_escape_pop_state(caplog):
    router, host = make_router()
    router.add_route("/a", Recorder())
    router.listen()

    def broken(event):
        raise RuntimeError("error subscriber down")

    router.on_error(broken)
    host.push_history("", "/legacy")
    host.push_history("", "/a")
    caplog.set_level(logging.ERROR, logger="genro_navigation")
    host.back()
    assert host.current_path() == "/legacy"
    assert "Subscriber failed on /legacy" in caplog.text


def test_route_callback_exception_propagates_after_subscribers_run():
    router, _ = make_router()
    seen = Recorder()

    def explode(event):
        raise KeyError("boom")

    router.add_route("/a", explode)
    router.on_enter(seen)
    with pytest.raises(KeyError):
        router.goto_path("/a")
    assert [e.path for e in seen.events] == ["/a"]


def test_navigation_from_subscriber_is_delivered_after_current_event():
    router, _ = make_router()
    order = []
    router.add_route("/a", lambda e: order.append("route /a"))
    router.add_route("/b", lambda e: order.append("route /b"))

    def follow(event):
        order.append(f"stream {event.path}")
        if event.path == "/a":
            router.goto_path("/b")

    router.on_enter(follow)
    router.goto_path("/a")
    assert order == ["route /a", "stream /a", "route /b", "stream /b"]


def test_subscribers_are_called_on_next_loop_iteration():
    router, _ = make_router()
    order = []
    router.add_route("/a", lambda e: order.append("route"))
    router.on_enter(lambda e: order.append("stream"))
    router.on_error(lambda e: order.append(f"error {e.path}"))

    async def navigate():
        router.goto_path("/a")
        router.goto_path("/nope")
        assert order == ["route"]
        await asyncio.sleep(0)
        return list(order)

    assert asyncio.run(navigate()) == ["route", "stream", "error /nope"]
