"""Plugin-free router runtime for Genro Navigation.

This module exposes :class:`BaseRouter`, which keeps an ordered registry of
URL patterns, listens to a navigation host, resolves paths and broadcasts
route events. Subclasses add plugin observers but must preserve these
semantics.

Constructor
-----------
Constructor signature::

    BaseRouter(host, *, use_fragment=None, name=None)

- ``host`` is required; ``None`` raises ``ValueError``. It must implement
  :class:`~genro_navigation.core.navigation_host.NavigationHost`.
- ``use_fragment``: navigate with ``#`` fragments and ``assign_location``
  instead of ``push_history``. ``None`` derives it from
  ``host.supports_push_state()``. Fixed for the life of the router.

Registry
--------
``add_route(path, enter, name=None, **options)`` stores a ``Route`` under its
``UrlPattern``. The registry is an insertion ordered dict; registering an
identical pattern again replaces the route but keeps its position.
Resolution scans patterns in that order and the first match wins, so
``/users/:id`` registered before ``/users/new`` also captures
``/users/new``.

Listening
---------
``listen(ignore_click=False)`` subscribes to the host once. Fragment mode
uses hash-change notifications and resolves the current path immediately;
path mode uses pop-state notifications only. Same-host anchor clicks are
routed through ``goto_path`` unless ``ignore_click`` is set.

Events
------
``on_enter(callback)`` and ``on_error(callback)`` return ``Subscription``
handles. Channels are created on first subscription and dropped when the
last subscription is cancelled. A ``RouteEnterEvent`` always reaches the
matched route's own callback first, subscribers or not. Channel delivery is
deferred: with a running asyncio loop it is scheduled with ``call_soon``,
otherwise it is queued and drained once the outermost dispatch returns.
A failing subscriber is logged and its exception never reaches the caller.
Unresolved paths raise ``NotFound`` unless an error subscriber is attached,
in which case a ``RouteErrorEvent`` is delivered instead.

Callbacks must not register routes while the router is resolving a path;
the registry is iterated without a copy.

Hooks for subclasses
--------------------
- ``_enter_route``: call the route callback (plugins observe around it).
- ``_plugin_codes``: plugin prefixes accepted as ``add_route`` options.
- ``_after_route_registered``: invoked after registering a route.
- ``_describe_route_extra``: extend per-route description in ``nodes()``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any

from genro_toolbox import dictExtract
from genro_toolbox.typeutils import safe_is_instance

from genro_navigation.exceptions import (
    AlreadyListening,
    NotFound,
    UndefinedRouteEvent,
    UnknownPattern,
)

from .channel import BroadcastChannel, Subscription
from .navigation_host import ClickEvent, NavigationHost
from .route import Route, RouteEnterEvent, RouteErrorEvent, RouteEvent
from .url_pattern import UrlPattern

__all__ = ["BaseRouter"]

logger = logging.getLogger("genro_navigation")


def _as_pattern(path: Any) -> UrlPattern:
    if safe_is_instance(path, "genro_navigation.core.url_pattern.UrlPattern"):
        return path
    return UrlPattern(str(path))


class BaseRouter:
    """Plugin-free client-side router.

    Responsibilities:
        - Keep the ordered pattern → route registry
        - Subscribe to navigation host notifications (once)
        - Resolve paths with first-registered-wins matching
        - Navigate via push-state or fragment assignment
        - Broadcast enter/error events and call route callbacks
    """

    __slots__ = (
        "host",
        "name",
        "_use_fragment",
        "_listening",
        "_routes",
        "_on_enter",
        "_on_error",
        "_pending",
        "_dispatch_depth",
    )

    def __init__(
        self,
        host: NavigationHost,
        *,
        use_fragment: bool | None = None,
        name: str | None = None,
    ) -> None:
        if host is None:
            raise ValueError("Router requires a navigation host")
        self.host = host
        self.name = name
        self._use_fragment = (
            not host.supports_push_state() if use_fragment is None else bool(use_fragment)
        )
        self._listening = False
        self._routes: dict[UrlPattern, Route] = {}
        self._on_enter: BroadcastChannel[RouteEnterEvent] | None = None
        self._on_error: BroadcastChannel[RouteErrorEvent] | None = None
        self._pending: deque[tuple[BroadcastChannel, RouteEvent]] = deque()
        self._dispatch_depth = 0

    @property
    def use_fragment(self) -> bool:
        return self._use_fragment

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def routes(self) -> list[Route]:
        """Registered routes in resolution order."""
        return list(self._routes.values())

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add_route(
        self,
        path: UrlPattern | str,
        enter: Callable[[RouteEnterEvent], Any],
        name: str | None = None,
        **options: Any,
    ) -> BaseRouter:
        """Register ``enter`` for paths matching ``path``.

        Args:
            path: ``UrlPattern`` or pattern string.
            enter: Callback receiving a ``RouteEnterEvent``.
            name: Optional display name.
            options: Per-route plugin configuration as ``<plugin>_<key>=value``.

        Returns:
            self (to allow chaining).

        Raises:
            TypeError: when ``enter`` is not callable or an option does not
                belong to a known plugin.
            ValueError: when ``path`` is not a valid pattern.
        """
        if not callable(enter):
            raise TypeError(f"Route callback must be callable, got {type(enter).__name__}")
        plugin_options: dict[str, dict[str, Any]] = {}
        for code in self._plugin_codes():
            extracted = dictExtract(options, f"{code}_", slice_prefix=True, pop=False)
            if extracted:
                plugin_options[code] = dict(extracted)
                for key in extracted:
                    options.pop(f"{code}_{key}", None)
        if options:
            raise TypeError(f"Unexpected route options: {', '.join(sorted(options))}")

        route = Route(name, _as_pattern(path), enter)
        logger.debug("addRoute %s -> %s", route.title, route.pattern.pattern)
        previous = self._routes.get(route.pattern)
        self._routes[route.pattern] = route
        self._after_route_registered(route, plugin_options, previous)
        return self

    def route(
        self, path: UrlPattern | str, *, name: str | None = None, **options: Any
    ) -> Callable[[Callable], Callable]:
        """Decorator form of ``add_route``.

        Example::

            @router.route("/users/{id:int}", name="user")
            def show_user(event):
                ...
        """

        def decorator(func: Callable) -> Callable:
            self.add_route(path, func, name=name, **options)
            return func

        return decorator

    # ------------------------------------------------------------------
    # Listening
    # ------------------------------------------------------------------
    def listen(self, ignore_click: bool = False) -> None:
        """Subscribe to the navigation host. May be called once.

        Raises:
            AlreadyListening: on a second call.
        """
        logger.debug("listen ignoreClick=%s useFragment=%s", ignore_click, self._use_fragment)
        if self._listening:
            raise AlreadyListening()
        self._listening = True

        if self._use_fragment:
            self.host.on_hash_change(lambda: self._handle(self.host.current_path(), "onHashChange"))
            self._handle(self.host.current_path())
        else:
            self.host.on_pop_state(lambda: self._handle(self.host.current_path(), "onPopState"))

        if not ignore_click:
            self.host.on_click(self._on_click)

    def _on_click(self, event: ClickEvent) -> None:
        anchor = event.target
        if anchor is None or anchor.host != self.host.location_host():
            return
        self.goto_path(anchor.path, anchor.title)
        event.prevent_default()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def goto_url(
        self, pattern: UrlPattern | str, params: Sequence[Any], title: str | None = None
    ) -> None:
        """Navigate to ``pattern`` expanded with ``params`` and fire its route.

        Raises:
            UnknownPattern: when ``pattern`` is not registered.
        """
        url = _as_pattern(pattern)
        route = self._routes.get(url)
        if route is None:
            raise UnknownPattern(url.pattern)
        fixed_path = url.expand(params, use_fragment=self._use_fragment)
        self._go(fixed_path, title)
        self._fire(RouteEnterEvent(route, fixed_path, tuple(str(p) for p in params)))

    def goto_path(self, path: str, title: str | None = None) -> None:
        """Navigate to a concrete ``path`` if a route matches it.

        In fragment mode, once listening, the host's hash-change notification
        fires the route, so no event is fired here.
        """
        logger.debug("gotoPath %s", path)
        url = self._get_url(path)
        if url is None:
            return
        self._go(path, title)
        if not self._listening or not self._use_fragment:
            self._fire(self._enter_event(url, path))

    def click_handler(
        self, pattern: UrlPattern | str, params: Sequence[Any], title: str | None = None
    ) -> Callable[[ClickEvent], None]:
        """Return a click handler that prevents the default action and calls ``goto_url``."""

        def handler(event: ClickEvent) -> None:
            event.prevent_default()
            self.goto_url(pattern, params, title)

        return handler

    def _go(self, path: str, title: str | None) -> None:
        title = title or ""
        if self._use_fragment:
            self.host.assign_location(path)
            self.host.set_document_title(title)
        else:
            self.host.push_history(title, path)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def on_enter(self, callback: Callable[[RouteEnterEvent], Any]) -> Subscription:
        if self._on_enter is None:
            self._on_enter = BroadcastChannel(on_empty=self._drop_enter_channel)
        return self._on_enter.subscribe(callback)

    def on_error(self, callback: Callable[[RouteErrorEvent], Any]) -> Subscription:
        if self._on_error is None:
            self._on_error = BroadcastChannel(on_empty=self._drop_error_channel)
        return self._on_error.subscribe(callback)

    def _drop_enter_channel(self) -> None:
        self._on_enter = None

    def _drop_error_channel(self) -> None:
        self._on_error = None

    # ------------------------------------------------------------------
    # Resolution and dispatch
    # ------------------------------------------------------------------
    def _handle(self, path: str, source: str = "handle") -> None:
        """Resolve ``path`` coming from a host notification. Never raises ``NotFound``."""
        logger.debug("%s handle(%s)", source, path)
        try:
            url = self._get_url(path)
        except NotFound:
            url = None
        if url is None:
            logger.info("Unhandled path: %s", path)
            return
        self._fire(self._enter_event(url, path))

    def _get_url(self, path: str) -> UrlPattern | None:
        for url in self._routes:
            if url.matches(path):
                return url
        error = NotFound(path)
        if self._on_error is not None and self._on_error.has_subscribers():
            self._fire(RouteErrorEvent(error, path))
            return None
        raise error

    def _enter_event(self, url: UrlPattern, path: str) -> RouteEnterEvent:
        params = url.parse(path)
        fixed_path = url.expand(params, use_fragment=self._use_fragment)
        return RouteEnterEvent(self._routes[url], fixed_path, tuple(params))

    def _fire(self, event: RouteEvent) -> None:
        self._dispatch_depth += 1
        try:
            match event:
                case RouteErrorEvent():
                    if self._on_error is not None and self._on_error.has_subscribers():
                        self._schedule(self._on_error, event)
                case RouteEnterEvent(route=route):
                    if self._on_enter is not None and self._on_enter.has_subscribers():
                        self._schedule(self._on_enter, event)
                    self._enter_route(route, event)
                case _:
                    raise UndefinedRouteEvent(event)
        finally:
            self._dispatch_depth -= 1
            if not self._dispatch_depth:
                self._drain()

    def _schedule(self, channel: BroadcastChannel, event: RouteEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending.append((channel, event))
        else:
            loop.call_soon(self._deliver, channel, event)

    def _drain(self) -> None:
        """Deliver queued channel events. Navigation from a subscriber queues behind them."""
        self._dispatch_depth += 1
        try:
            while self._pending:
                channel, event = self._pending.popleft()
                self._deliver(channel, event)
        finally:
            self._dispatch_depth -= 1

    def _deliver(self, channel: BroadcastChannel, event: RouteEvent) -> None:
        channel.publish(event, on_error=self._subscriber_failed)

    def _subscriber_failed(self, error: Exception, event: RouteEvent) -> None:
        logger.error("Subscriber failed on %s: %s", event.path, error, exc_info=error)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def nodes(self) -> dict[str, Any]:
        """Describe the router and its routes.

        Returns:
            Dict with ``name``, ``use_fragment``, ``listening`` and a
            ``routes`` mapping (pattern string → description), in resolution
            order. Patterns are unique keys; titles may repeat.
        """
        return {
            "name": self.name,
            "use_fragment": self._use_fragment,
            "listening": self._listening,
            "routes": {
                pattern.pattern: self._route_node_info(route)
                for pattern, route in self._routes.items()
            },
        }

    def _route_node_info(self, route: Route) -> dict[str, Any]:
        info: dict[str, Any] = {
            "name": route.name,
            "pattern": route.pattern.pattern,
            "params": list(route.pattern.names),
            "doc": inspect.getdoc(route.on_enter) or "",
        }
        extra = self._describe_route_extra(route, info)
        if extra:
            info.update(extra)
        return info

    # ------------------------------------------------------------------
    # Plugin hooks (no-op for BaseRouter)
    # ------------------------------------------------------------------
    def _enter_route(self, route: Route, event: RouteEnterEvent) -> None:
        route.on_enter(event)

    def _plugin_codes(self) -> list[str]:
        return []

    def _after_route_registered(
        self,
        route: Route,
        plugin_options: dict[str, dict[str, Any]],
        previous: Route | None = None,
    ) -> None:
        """Hook invoked after a route is stored. ``previous`` is the route it replaced."""
        return None

    def _describe_route_extra(
        self, route: Route, base_description: dict[str, Any]
    ) -> dict[str, Any]:
        return {}
