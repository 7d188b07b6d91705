"""Title plugin for Genro Navigation.

Sets the document title after a route callback runs. The title is built from
a ``template`` formatted with the event parameters, positionally and by name.

Configuration
-------------
    - ``enabled``: Gate the plugin (default True)
    - ``template``: Format string, e.g. ``"User {id}"`` or ``"Page {0}"``.
      Routes without a template leave the title untouched.

Example::

    router = Router(host).plug("title", template="My app")
    router.add_route("/users/{id:int}", show_user, title_template="User {id}")
"""

from __future__ import annotations

from genro_navigation.core.router import Router
from genro_navigation.plugins._base_plugin import BasePlugin


class TitlePlugin(BasePlugin):
    plugin_code = "title"
    plugin_description = "Sets the document title on route entry"

    def configure(self, enabled: bool = True, template: str | None = None):  # type: ignore[override]
        pass  # Storage is handled by the wrapper

    def after_enter(self, router, route, event, elapsed_ms):
        template = self.configuration(route.title).get("template")
        if template:
            router.host.set_document_title(template.format(*event.params, **event.named_params))

    def route_metadata(self, router, route):
        template = self.configuration(route.title).get("template")
        return {"template": template} if template else {}


Router.register_plugin(TitlePlugin)
