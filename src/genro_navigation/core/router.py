"""Router with plugin observers for Genro Navigation.

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances observing route entries, and plugin state stored on the
router.

Internal state
--------------
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance.
- ``_plugin_info``: per-plugin config store (``"_all_"`` plus one bucket per
  route title).

Global registry
---------------
``Router.register_plugin(plugin_class)`` validates that ``plugin_class`` is a
subclass of ``BasePlugin`` carrying a ``plugin_code``.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the plugin class by name in the
global registry, instantiates it, runs ``on_route_added`` for the routes
already registered and returns ``self``.

Per-route options
-----------------
``add_route(..., logging_after=False)`` stores ``{"after": False}`` as the
``logging`` configuration of that route. Options for registered plugins that
are not attached yet are kept and apply once the plugin is plugged. When a
pattern is registered again, the configuration stored for the replaced route
is discarded first.

Observers
---------
Plugins observe route entries, they cannot replace or skip the route
callback. ``_enter_route`` calls ``before_enter`` on the plugins enabled for
the route in attach order, runs the callback, then calls ``after_enter`` in
reverse order with the elapsed time. A failing hook is logged and the route
callback still runs.

Example::

    from genro_navigation import MemoryNavigationHost, Router

    router = Router(MemoryNavigationHost()).plug("logging")
    router.add_route("/users/{id:int}", show_user, name="user", logging_before=False)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from genro_navigation.core.base_router import BaseRouter
from genro_navigation.core.route import Route, RouteEnterEvent
from genro_navigation.plugins._base_plugin import BasePlugin

__all__ = ["Router"]

logger = logging.getLogger("genro_navigation")

_PLUGIN_REGISTRY: dict[str, type[BasePlugin]] = {}


class Router(BaseRouter):
    """Router with plugin registry and observer support.

    Extends BaseRouter with:
        - Global plugin registry for registering plugin classes
        - Per-router plugin instances observing route entries
        - Plugin configuration, router-wide and per route
    """

    __slots__ = BaseRouter.__slots__ + (
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(self, *args, **kwargs):
        self._plugins: list[BasePlugin] = []
        self._plugins_by_name: dict[str, BasePlugin] = {}
        self._plugin_info: dict[str, dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: type[BasePlugin], name: str | None = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with a different class.

        Raises:
            TypeError: If plugin_class is not a BasePlugin subclass.
            ValueError: If plugin_code is missing or name collision occurs.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> dict[str, type[BasePlugin]]:
        """Return a copy of the global plugin registry."""
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> Router:
        """Attach a plugin by name (previously registered globally).

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If plugin is not a string.
            ValueError: If plugin is not registered or already attached.
        """
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(
                f"Plugin '{plugin}' is already attached to this router. "
                "Use configure() to update settings."
            )
        instance = plugin_class(self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        for route in self._routes.values():
            instance.on_route_added(self, route)
        return self

    def iter_plugins(self) -> list[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_title: str | None = None) -> dict[str, Any]:
        """Return plugin config (router-wide + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return plugin.configuration(route_title)

    def __getattr__(self, name: str) -> Any:
        # Slots are not set yet while __init__ runs.
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router '{self.name}'")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_title: str, plugin_name: str, enabled: bool = True) -> None:
        """Enable or disable a plugin for a specific route (``"_all_"`` for every route)."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_title, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_title: str, plugin_name: str) -> bool:
        """Check if a plugin is enabled for a specific route.

        Resolution order (first found wins):
        1. route locals (runtime override via set_plugin_enabled)
        2. route config (static via add_route options or configure(_target=...))
        3. router-wide locals
        4. router-wide config
        5. default: True
        """
        bucket = self._get_plugin_bucket(plugin_name)
        for key in (route_title, "_all_"):
            data = bucket.get(key, {})
            if "enabled" in data.get("locals", {}):
                return bool(data["locals"]["enabled"])
            if "enabled" in data.get("config", {}):
                return bool(data["config"]["enabled"])
        return True

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _plugin_codes(self) -> list[str]:
        return list(_PLUGIN_REGISTRY)

    def _enter_route(self, route: Route, event: RouteEnterEvent) -> None:
        observers = [
            plugin for plugin in self._plugins if self.is_plugin_enabled(route.title, plugin.name)
        ]
        for plugin in observers:
            self._notify_plugin(plugin, plugin.before_enter, route, event)
        started = time.perf_counter()
        super()._enter_route(route, event)
        elapsed_ms = (time.perf_counter() - started) * 1000
        for plugin in reversed(observers):
            self._notify_plugin(plugin, plugin.after_enter, route, event, elapsed_ms)

    def _notify_plugin(
        self, plugin: BasePlugin, hook: Callable[..., Any], route: Route, *args: Any
    ) -> None:
        try:
            hook(self, route, *args)
        except Exception:
            logger.exception(
                "Plugin '%s' failed in %s for %s", plugin.name, hook.__name__, route.title
            )

    def _after_route_registered(
        self,
        route: Route,
        plugin_options: dict[str, dict[str, Any]],
        previous: Route | None = None,
    ) -> None:
        if previous is not None and previous.title != "_all_":
            for bucket in self._plugin_info.values():
                bucket.pop(previous.title, None)
        for pname, cfg in plugin_options.items():
            plugin = self._plugins_by_name.get(pname)
            if plugin:
                plugin.configure(_target=route.title, **cfg)
            else:
                bucket = self._plugin_info.setdefault(
                    pname, {"_all_": {"config": {}, "locals": {}}}
                )
                bucket.setdefault(route.title, {"config": {}, "locals": {}})["config"].update(cfg)
        for plugin in self._plugins:
            plugin.on_route_added(self, route)

    def _describe_route_extra(
        self, route: Route, base_description: dict[str, Any]
    ) -> dict[str, Any]:
        """Gather plugin config and metadata for a route."""
        plugins_info: dict[str, dict[str, Any]] = {}
        for plugin in self._plugins:
            plugin_data: dict[str, Any] = {}
            config = plugin.configuration(route.title)
            if config:
                plugin_data["config"] = config
            meta = plugin.route_metadata(self, route)
            if meta:
                plugin_data["metadata"] = meta
            if plugin_data:
                plugins_info[plugin.name] = plugin_data
        if plugins_info:
            return {"plugins": plugins_info}
        return {}
