"""Core runtime aggregator for Genro Navigation.

Exposes the runtime building blocks from a single module:
``BaseRouter``, ``Router``, ``UrlPattern``, route events and navigation hosts.

Importing this module performs only imports; it does not register plugins
or instantiate routers.
"""

from .base_router import BaseRouter
from .channel import BroadcastChannel, Subscription
from .navigation_host import (
    Anchor,
    ClickEvent,
    DomNavigationHost,
    MemoryNavigationHost,
    NavigationHost,
)
from .route import Route, RouteEnterEvent, RouteErrorEvent, RouteEvent
from .router import Router
from .url_pattern import UrlPattern

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
    "RouteEvent",
    "Router",
    "Subscription",
    "UrlPattern",
]
