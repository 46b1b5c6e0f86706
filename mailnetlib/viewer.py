"""Views of message content and the HTML viewer's resource policy."""

import abc
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from html.parser import HTMLParser
from urllib.parse import urlsplit

from .resources import ExtResMgr, can_open_url
from .schemes import CID_SCHEME, CidSchemeHandler

_log = logging.getLogger(__name__)

_DATA_SCHEME = "data"
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class OpeningStatus(Enum):
    """What the viewer does with a URL it is about to load."""

    OPEN = "open"
    BLOCK = "block"
    REDIRECT = "redirect"


@dataclass
class HtmlViewStatus:
    """External images that were referenced but not loaded."""

    external_images: deque = field(default_factory=deque)

    def clear(self):
        self.external_images.clear()


class ContentViewer(abc.ABC):
    """Shows message content; resources may be supplied by a data provider."""

    ext_download = False

    def set_content_data_provider(self, proc):
        """Install a provider of embedded parts; False when not supported."""
        return False

    @abc.abstractmethod
    def set_content(self, content):
        """Show new content."""

    @abc.abstractmethod
    def reload_content(self):
        """Show the current content again."""

    def has_external_images(self):
        return False


def _to_base36(value):
    value = abs(value)
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
        if not value:
            return "".join(reversed(digits))


class _ImageCollector(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.sources = []

    def handle_starttag(self, tag, attrs):
        if tag == "img":
            for name, value in attrs:
                if name == "src" and value is not None:
                    self.sources.append(value)


def _image_sources(content):
    collector = _ImageCollector()
    collector.feed(content or "")
    collector.close()
    return collector.sources


class HtmlContentViewer(ContentViewer):
    """An HTML viewer that loads only embedded and already fetched images.

    Internet images are loaded when downloads are allowed or when they are
    cached; otherwise they are listed in `status`. The outcome for every
    image of the current content is kept in `images` as
    (url, status, redirect) tuples.
    """

    def __init__(self, resource_manager=None):
        self.resource_manager = resource_manager
        self.ext_download = False
        self.status = HtmlViewStatus()
        self.cid_handler = None
        self.images = []
        self._content = ""
        # Scheme names start with a letter and may hold letters, digits, '.', '+', '-'.
        self.scheme_prefix = "X" + _to_base36(id(self)) + "-"

    def _manager(self):
        if self.resource_manager is None:
            self.resource_manager = ExtResMgr.instance()
        return self.resource_manager

    def on_opening_url(self, is_image, url):
        """Decide on a URL: returns (OpeningStatus, redirect URL or None)."""
        _log.debug("opening URL: %s %s", is_image, url)
        if not is_image:
            return OpeningStatus.BLOCK, None
        norm_url = url.strip()
        prefix = self.scheme_prefix
        if norm_url[:len(prefix)].lower() == prefix.lower():
            return OpeningStatus.OPEN, None
        scheme = urlsplit(norm_url).scheme.lower()
        if _DATA_SCHEME in scheme:
            return OpeningStatus.OPEN, None
        if CID_SCHEME in scheme:
            return OpeningStatus.REDIRECT, prefix + norm_url
        if can_open_url(norm_url):
            if self.ext_download or self._manager().get_resource_data(norm_url, True):
                return OpeningStatus.OPEN, None
            self.status.external_images.append(norm_url)
        return OpeningStatus.BLOCK, None

    def set_content_data_provider(self, proc):
        self.cid_handler = CidSchemeHandler(proc, self.scheme_prefix)
        return True

    def _render(self):
        self.images = [(url, *self.on_opening_url(True, url)) for url in _image_sources(self._content)]

    def set_content(self, content):
        self._content = content
        self.status.clear()
        self._render()
        return True

    def reload_content(self):
        """Start downloads of listed images if allowed, then show the content again."""
        if self.ext_download:
            for url in list(self.status.external_images):
                self._manager().start_download(url)
        self._render()
        return True

    def has_external_images(self):
        return len(self.status.external_images) > 0


class MailMsgFileView(abc.ABC):
    """A view showing one mail message file."""

    can_edit = False

    def __init__(self):
        self.mail_msg_file = None

    def set_mail_msg_file(self, msg_file):
        """Show another file; returns the change handler's result, or 0 if unchanged."""
        prev = self.mail_msg_file
        self.mail_msg_file = msg_file
        return self.on_mail_msg_file_changed(prev) if prev is not msg_file else 0

    @abc.abstractmethod
    def on_mail_msg_file_changed(self, prev_value):
        """React to a new file; `prev_value` is the one shown before."""