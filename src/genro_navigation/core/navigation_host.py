# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""NavigationHost - Abstract boundary between the router and the browser.

Defines the minimal interface a router drives: reading the current location,
subscribing to navigation notifications and changing the location. Two
implementations ship with the package:

    - ``MemoryNavigationHost``: in-process host with a history stack, used by
      tests and headless applications.
    - ``DomNavigationHost``: adapter over a DOM ``window`` object, for example
      ``js.window`` under Pyodide.

Click notifications are normalised into ``ClickEvent`` objects whose
``target`` is an ``Anchor`` (or None when the click did not hit a link).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = [
    "Anchor",
    "ClickEvent",
    "DomNavigationHost",
    "MemoryNavigationHost",
    "NavigationHost",
]


@dataclass(frozen=True, slots=True)
class Anchor:
    """The parts of a clicked link the router needs."""

    pathname: str
    hash: str = ""
    host: str = ""
    title: str = ""

    @property
    def path(self) -> str:
        return f"{self.pathname}{self.hash}"


class ClickEvent:
    """A click notification.

    Attributes:
        target: The clicked anchor, or None.
        default_prevented: True once ``prevent_default`` was called.
    """

    __slots__ = ("target", "default_prevented", "_native")

    def __init__(self, target: Anchor | None = None, native: Any = None) -> None:
        self.target = target
        self.default_prevented = False
        self._native = native

    def prevent_default(self) -> None:
        self.default_prevented = True
        if self._native is not None:
            self._native.preventDefault()


def _split(path: str) -> tuple[str, str]:
    pathname, sep, fragment = path.partition("#")
    return pathname, f"{sep}{fragment}"


class NavigationHost(ABC):
    """Minimal interface for navigation hosts."""

    @abstractmethod
    def current_path(self) -> str:
        """Return ``pathname + hash`` of the current location."""
        ...

    @abstractmethod
    def location_host(self) -> str:
        """Return the host part of the current location."""
        ...

    @abstractmethod
    def on_hash_change(self, callback: Callable[[], Any]) -> None: ...

    @abstractmethod
    def on_pop_state(self, callback: Callable[[], Any]) -> None: ...

    @abstractmethod
    def on_click(self, callback: Callable[[ClickEvent], Any]) -> None: ...

    @abstractmethod
    def push_history(self, title: str, path: str) -> None:
        """Add a history entry without reloading."""
        ...

    @abstractmethod
    def assign_location(self, path: str) -> None: ...

    @abstractmethod
    def set_document_title(self, title: str) -> None: ...

    @abstractmethod
    def supports_push_state(self) -> bool: ...


class MemoryNavigationHost(NavigationHost):
    """In-process navigation host.

    Keeps a history stack of ``(title, path)`` entries and dispatches
    notifications synchronously:

    - ``back()`` moves one entry back and fires pop-state.
    - ``assign_location`` fires hash-change when only the fragment changed.
      A different pathname counts as a document load (``loads`` increments).
    - ``click(anchor)`` dispatches a ``ClickEvent`` and returns it.
    """

    def __init__(
        self,
        path: str = "/",
        *,
        host: str = "localhost",
        push_state: bool = True,
    ) -> None:
        self.pathname, self.hash = _split(path)
        self.host = host
        self.title = ""
        self.loads = 0
        self.history: list[tuple[str, str]] = [("", path)]
        self._push_state = push_state
        self._listeners: dict[str, list[Callable[..., Any]]] = {
            "hashchange": [],
            "popstate": [],
            "click": [],
        }

    def listener_count(self, kind: str) -> int:
        return len(self._listeners[kind])

    def _dispatch(self, kind: str, *args: Any) -> None:
        for callback in list(self._listeners[kind]):
            callback(*args)

    def current_path(self) -> str:
        return f"{self.pathname}{self.hash}"

    def location_host(self) -> str:
        return self.host

    def on_hash_change(self, callback: Callable[[], Any]) -> None:
        self._listeners["hashchange"].append(callback)

    def on_pop_state(self, callback: Callable[[], Any]) -> None:
        self._listeners["popstate"].append(callback)

    def on_click(self, callback: Callable[[ClickEvent], Any]) -> None:
        self._listeners["click"].append(callback)

    def push_history(self, title: str, path: str) -> None:
        self.history.append((title, path))
        self.pathname, self.hash = _split(path)

    def assign_location(self, path: str) -> None:
        pathname, fragment = _split(path)
        previous = (self.pathname, self.hash)
        self.history.append((self.title, path))
        self.pathname, self.hash = pathname, fragment
        if pathname != previous[0]:
            self.loads += 1
        elif fragment != previous[1]:
            self._dispatch("hashchange")

    def set_document_title(self, title: str) -> None:
        self.title = title

    def supports_push_state(self) -> bool:
        return self._push_state

    def back(self) -> None:
        """Go back one history entry and fire pop-state."""
        if len(self.history) < 2:
            return
        self.history.pop()
        _title, path = self.history[-1]
        self.pathname, self.hash = _split(path)
        self._dispatch("popstate")

    def click(self, anchor: Anchor | None) -> ClickEvent:
        event = ClickEvent(anchor)
        self._dispatch("click", event)
        return event


class DomNavigationHost(NavigationHost):
    """Adapter over a DOM ``window``.

    Args:
        window: Object exposing ``location``, ``history``, ``document`` and
            ``addEventListener`` like a browser window.
        create_proxy: Wraps Python callbacks before handing them to the DOM
            (``pyodide.ffi.create_proxy`` under Pyodide). Identity by default.
    """

    def __init__(self, window: Any, create_proxy: Callable[[Callable], Any] | None = None) -> None:
        self._window = window
        self._create_proxy = create_proxy or (lambda fn: fn)
        # Proxies must stay referenced for as long as the DOM may call them.
        self._proxies: list[Any] = []

    def _listen(self, kind: str, callback: Callable[[Any], Any]) -> None:
        proxy = self._create_proxy(callback)
        self._proxies.append(proxy)
        self._window.addEventListener(kind, proxy)

    def current_path(self) -> str:
        location = self._window.location
        return f"{location.pathname}{location.hash}"

    def location_host(self) -> str:
        return self._window.location.host

    def on_hash_change(self, callback: Callable[[], Any]) -> None:
        self._listen("hashchange", lambda _event: callback())

    def on_pop_state(self, callback: Callable[[], Any]) -> None:
        self._listen("popstate", lambda _event: callback())

    def on_click(self, callback: Callable[[ClickEvent], Any]) -> None:
        self._listen("click", lambda event: callback(self.click_event(event)))

    @staticmethod
    def click_event(native: Any) -> ClickEvent:
        """Translate a DOM click event into a ``ClickEvent``."""
        target = getattr(native, "target", None)
        anchor = None
        if str(getattr(target, "tagName", "")).upper() == "A":
            anchor = Anchor(
                pathname=target.pathname,
                hash=target.hash or "",
                host=target.host,
                title=target.title or "",
            )
        return ClickEvent(anchor, native=native)

    def push_history(self, title: str, path: str) -> None:
        self._window.history.pushState(None, title, path)

    def assign_location(self, path: str) -> None:
        self._window.location.assign(path)

    def set_document_title(self, title: str) -> None:
        self._window.document.title = title

    def supports_push_state(self) -> bool:
        history = getattr(self._window, "history", None)
        return callable(getattr(history, "pushState", None))
