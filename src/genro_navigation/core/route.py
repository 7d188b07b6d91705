"""Route and route event frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .url_pattern import UrlPattern

__all__ = ["Route", "RouteEnterEvent", "RouteErrorEvent", "RouteEvent"]


@dataclass(frozen=True, slots=True)
class Route:
    """A registered pattern with its entry callback.

    Attributes:
        name: Optional display name.
        pattern: Compiled URL pattern (registry key).
        on_enter: Callback invoked with a ``RouteEnterEvent``.
    """

    name: str | None
    pattern: UrlPattern
    on_enter: Callable[[RouteEnterEvent], Any]

    @property
    def title(self) -> str:
        """Name when given, pattern text otherwise.

        Plugin configuration and ``set_plugin_enabled`` are keyed by title, so
        routes sharing a name share those settings. ``nodes()`` is keyed by
        pattern and lists them separately.
        """
        return self.name or self.pattern.pattern


@dataclass(frozen=True, slots=True)
class RouteEnterEvent:
    """Fired when a path resolves to a route."""

    route: Route
    path: str
    params: tuple[str, ...] = ()

    @property
    def named_params(self) -> dict[str, str]:
        """Raw string params keyed by the pattern's parameter names."""
        return self.route.pattern.named(self.params)


@dataclass(frozen=True, slots=True)
class RouteErrorEvent:
    """Fired when a path does not resolve and someone listens for errors."""

    error: Exception
    path: str


RouteEvent = RouteEnterEvent | RouteErrorEvent
