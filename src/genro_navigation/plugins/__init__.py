"""Plugin package for Genro Navigation.

This package contains built-in plugins for the Router.

Note: Do not import concrete plugins here to keep imports side-effect free.
Concrete plugin modules (logging, title) self-register when imported
via the main genro_navigation package.
"""

__all__: list[str] = []
