"""Route entry logging for Genro Navigation.

Reports every route entry on a standard ``logging`` logger: one record when
the route is entered (path and parameters) and one when its callback has
returned (duration). Nothing is printed; attach handlers to the logger to see
the records.

Configuration
-------------
Router-wide through ``plug("logging", ...)`` or per route through
``logging_<key>`` options on ``add_route``:

    - ``enabled``: gate the plugin (default True)
    - ``before``: record the entry (default True)
    - ``after``: record the completion with its duration (default True)
    - ``level``: ``"debug"``, ``"info"`` or ``"warning"`` (default ``"info"``)

The logger itself is a constructor argument: ``plug("logging", logger=...)``.
It defaults to ``genro_navigation.routes``.

Example::

    router = Router(MemoryNavigationHost()).plug("logging", level="debug")
    router.add_route("/users/:id", show_user, name="user")
    router.add_route("/ping", ping, logging_after=False)
"""

from __future__ import annotations

import logging
from typing import Literal

from genro_navigation.core.router import Router
from genro_navigation.plugins._base_plugin import BasePlugin

_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warning": logging.WARNING}


class LoggingPlugin(BasePlugin):
    plugin_code = "logging"
    plugin_description = "Logs route entries and callback duration"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: logging.Logger | None = None, **cfg):
        self._logger = logger or logging.getLogger("genro_navigation.routes")
        super().__init__(router, **cfg)

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        level: Literal["debug", "info", "warning"] = "info",
    ):
        pass  # Storage is handled by the wrapper

    def before_enter(self, router, route, event):
        cfg = self.configuration(route.title)
        if cfg.get("before", True):
            self._logger.log(
                _LEVELS[cfg.get("level", "info")],
                "enter %s path=%s params=%s",
                route.title,
                event.path,
                event.named_params,
            )

    def after_enter(self, router, route, event, elapsed_ms):
        cfg = self.configuration(route.title)
        if cfg.get("after", True):
            self._logger.log(
                _LEVELS[cfg.get("level", "info")],
                "entered %s in %.2f ms",
                route.title,
                elapsed_ms,
            )


Router.register_plugin(LoggingPlugin)
