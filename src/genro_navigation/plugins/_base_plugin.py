"""Plugin contract definitions for Genro Navigation.

This module defines the base class used by the Router plugin system.

``BasePlugin``
    Base class that every plugin must subclass. Provides:
        - Configuration helpers that delegate to the router's ``_plugin_info`` store
        - Optional observer hooks ``on_route_added``, ``before_enter`` and ``after_enter``

    Required class attributes:
        - ``plugin_code``: unique identifier used for registration (e.g. "logging")
        - ``plugin_description``: human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``

    Key methods:
        - ``configure(**config)``: Define accepted configuration parameters
        - ``configuration(route_title=None)``: Read merged configuration
        - ``on_route_added(router, route)``: Called when a route is registered
        - ``before_enter(router, route, event)``: Called before the route callback
        - ``after_enter(router, route, event, elapsed_ms)``: Called after it returns
        - ``route_metadata(router, route)``: Provide plugin-specific metadata

Hooks observe only. The router always calls the route callback itself, and an
exception raised by a hook is logged by the router instead of propagating.

Configuration is stored per router under ``"_all_"`` (router-wide) and under
each route title (per-route override). ``configure`` is validated against the
subclass signature with pydantic ``validate_call``.

Example::

    from genro_navigation.plugins._base_plugin import BasePlugin

    class AuditPlugin(BasePlugin):
        plugin_code = "audit"
        plugin_description = "Records entered paths"

        def configure(self, enabled: bool = True):
            pass  # Storage handled by wrapper

        def after_enter(self, router, route, event, elapsed_ms):
            audit_log.append((route.title, event.path))
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from pydantic import validate_call

__all__ = ["BasePlugin"]


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    @wraps(original_configure)
    def wrapper(
        self: BasePlugin, *, _target: str = "_all_", flags: str | None = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))
        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface and configuration helpers for router plugins.

    Subclass this to create custom plugins. Override the hooks you need
    and define your configuration schema in ``configure()``.
    """

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])  # type: ignore[method-assign]

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "_all_", {"config": {"enabled": True}, "locals": {}}
        )

    def _write_config(self, target: str, config: dict[str, Any]) -> None:
        if not config:
            return
        plugin_bucket = self._get_store().setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_title: str | None = None) -> dict[str, Any]:
        """Read merged configuration (base + optional per-route override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("_all_", {}).get("config", {}))
        if route_title:
            merged.update(plugin_bucket.get(route_title, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> dict[str, bool]:
        """Parse flag string like "enabled,before:off" into boolean dict."""
        mapping: dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def _get_store(self) -> dict[str, Any]:
        return self._router._plugin_info  # type: ignore[no-any-return]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def configure(self, enabled: bool = True) -> None:
        """Default configuration schema: only ``enabled``."""

    def on_route_added(self, router: Any, route: Any) -> None:
        """Called once per route when it is registered or the plugin is attached."""

    def before_enter(self, router: Any, route: Any, event: Any) -> None:
        """Called before the route callback runs."""

    def after_enter(self, router: Any, route: Any, event: Any, elapsed_ms: float) -> None:
        """Called after the route callback returned, with its duration in milliseconds."""

    def route_metadata(self, router: Any, route: Any) -> dict[str, Any]:
        return {}


BasePlugin.configure = _wrap_configure(BasePlugin.__dict__["configure"])  # type: ignore[method-assign]
