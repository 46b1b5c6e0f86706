"""A web-engine content viewer that never fetches external resources."""

import logging
from html.parser import HTMLParser
from urllib.parse import urlsplit

from .resources import get_protocol
from .schemes import CID_SCHEME, CidSchemeHandler, NullSchemeHandler
from .viewer import ContentViewer

_log = logging.getLogger(__name__)

BLOCKED_SCHEMES = ("http", "https", "file", "ftp")
MSG_OPEN_URL_QUESTION = "Open URL?\n\n{}"
_LOCAL_SCHEME = "about"


class _SourceCollector(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.sources = []

    def handle_starttag(self, tag, attrs):
        for name, value in attrs:
            if name == "src" and value:
                self.sources.append(value.strip())


class WebContentViewer(ContentViewer):
    """Shows content with external loads blocked and links handed to the user.

    `confirm_open` is asked with a question text before a link is opened and
    `open_url` opens it; without them links are never opened.
    """

    def __init__(self, confirm_open=None, open_url=None):
        self.confirm_open = confirm_open
        self.open_url = open_url
        self.content = ""
        self._handlers = {scheme: NullSchemeHandler(scheme) for scheme in BLOCKED_SCHEMES}

    def set_content_data_provider(self, proc):
        self._handlers[CID_SCHEME] = CidSchemeHandler(proc)
        return True

    def _null_handlers(self):
        return [h for h in self._handlers.values() if isinstance(h, NullSchemeHandler)]

    def _load(self):
        collector = _SourceCollector()
        collector.feed(self.content or "")
        collector.close()
        for source in collector.sources:
            if ":" in source:
                self.request_resource(source)
        _log.debug("document loaded")

    def set_content(self, content):
        for handler in self._null_handlers():
            handler.queried = False
        self.content = content
        self._load()
        return True

    def reload_content(self):
        self._load()
        return True

    def has_external_images(self):
        return any(handler.queried for handler in self._null_handlers())

    def request_resource(self, uri):
        """Serve a resource the page asks for; None when it is refused."""
        handler = self._handlers.get(get_protocol(uri).lower())
        if isinstance(handler, CidSchemeHandler):
            return handler.open_file(uri)
        if isinstance(handler, NullSchemeHandler):
            return handler.get_file(uri)
        return None

    def _open(self, url):
        if self.confirm_open is None or self.open_url is None:
            return
        if self.confirm_open(MSG_OPEN_URL_QUESTION.format(url)):
            self.open_url(url)

    def on_navigating(self, url):
        """True when navigation may proceed; other URLs are offered to the user."""
        if urlsplit(url).scheme != _LOCAL_SCHEME:
            self._open(url)
            return False
        return True

    def on_new_window(self, url, user_action=True):
        """Never opens a window; a user's request is offered to the user."""
        if user_action:
            self._open(url)
        return False