# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Genro Navigation.

This module defines custom exceptions used throughout the navigation system.
"""

from typing import Any

__all__ = [
    "AlreadyListening",
    "NotFound",
    "UndefinedRouteEvent",
    "UnknownPattern",
]


class AlreadyListening(RuntimeError):
    """Raised when ``listen()`` is called on a router that already listens."""

    def __init__(self) -> None:
        super().__init__("listen should be called once")


class UnknownPattern(ValueError):
    """Raised when navigating to a pattern that was never registered.

    Attributes:
        pattern: The pattern string that was requested.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Unknown URL pattern: {pattern}")


class NotFound(ValueError):
    """Raised when no registered pattern matches a path.

    When an error subscriber is attached the router delivers this exception
    inside a ``RouteErrorEvent`` instead of raising it.

    Attributes:
        path: The path that could not be resolved.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No handler found for {path}")


class UndefinedRouteEvent(ValueError):
    """Raised when something other than a route event reaches the dispatcher.

    Attributes:
        event: The offending object.
    """

    def __init__(self, event: Any) -> None:
        self.event = event
        super().__init__(f"Undefined route event: {event!r}")
