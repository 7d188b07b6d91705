"""Headless inbox navigation with a MemoryNavigationHost.

Run with ``python examples/inbox_app.py``.
"""

import logging

from genro_navigation import Anchor, MemoryNavigationHost, Router


def main():
    logging.basicConfig(level=logging.INFO)
    host = MemoryNavigationHost("/inbox", host="mail.example.com")
    router = Router(host).plug("logging").plug("title")

    @router.route("/inbox", name="inbox", title_template="Inbox")
    def inbox(event):
        print("showing inbox")

    @router.route("/messages/{id:int}", name="message", title_template="Message {id}")
    def message(event):
        print("showing message", event.route.pattern.convert(event.params)["id"])

    router.on_error(lambda event: print("not found:", event.path))
    router.listen()

    host.click(Anchor("/messages/12", host="mail.example.com"))
    print("title:", host.title)
    host.back()
    router.goto_path("/drafts")


if __name__ == "__main__":
    main()
