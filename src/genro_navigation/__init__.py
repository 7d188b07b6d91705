"""Genro Navigation - Client-side URL router for single-page applications.

Maps URL patterns to entry callbacks, reacts to navigation host
notifications (history pop, hash change, link clicks) and broadcasts
route-enter / route-error events.

Public exports:
    - ``Router``: Plugin-enabled router
    - ``UrlPattern``: Pattern matcher/expander
    - ``RouteEnterEvent`` / ``RouteErrorEvent``: Broadcast events
    - ``MemoryNavigationHost`` / ``DomNavigationHost``: Navigation hosts

Built-in plugins (logging, title) are auto-registered on first import.

Example::

    from genro_navigation import MemoryNavigationHost, Router

    router = Router(MemoryNavigationHost("/"))

    @router.route("/users/{id:int}", name="user")
    def show_user(event):
        print(event.named_params["id"])

    router.listen()
    router.goto_path("/users/42")
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    Anchor,
    BaseRouter,
    BroadcastChannel,
    ClickEvent,
    DomNavigationHost,
    MemoryNavigationHost,
    NavigationHost,
    Route,
    RouteEnterEvent,
    RouteErrorEvent,
    Router,
    Subscription,
    UrlPattern,
)
from .exceptions import AlreadyListening, NotFound, UndefinedRouteEvent, UnknownPattern

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "title"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "Anchor",
    "BaseRouter",
    "BroadcastChannel",
    "ClickEvent",
    "DomNavigationHost",
    "MemoryNavigationHost",
    "NavigationHost",
    "Route",
    "RouteEnterEvent",
    "RouteErrorEvent",
    "Router",
    "Subscription",
    "UrlPattern",
    "AlreadyListening",
    "NotFound",
    "UndefinedRouteEvent",
    "UnknownPattern",
]
