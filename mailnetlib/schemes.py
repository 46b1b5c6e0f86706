"""URL scheme handlers for message content: embedded parts and blocked resources."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Optional
from urllib.parse import unquote

from .resources import get_protocol

_log = logging.getLogger(__name__)

CID_SCHEME = "cid"


@dataclass
class ContentData:
    """A message part supplied for a content id: its MIME type and data stream."""

    type: str = ""
    data: Optional[BinaryIO] = None


@dataclass
class OpenedFile:
    """A resource opened by a scheme handler."""

    stream: BinaryIO
    mime_type: str
    location: str = ""
    modified: datetime = field(default_factory=datetime.now)


class CidSchemeHandler:
    """Opens "cid:<content-id>" locations through a data provider.

    The provider is called with the unescaped content id and returns a
    ContentData. A scheme prefix keeps the locations of one viewer apart
    from those of another.
    """

    def __init__(self, data_provider, scheme_prefix=None):
        self.data_provider = data_provider
        self.url_scheme = (scheme_prefix or "") + CID_SCHEME

    def can_open(self, location):
        return get_protocol(location).lower() == self.url_scheme.lower()

    def open_file(self, location):
        """The part named by the location, or None if it is not provided."""
        if self.data_provider is None:
            return None
        pos = location.find(":")
        if pos <= 0:
            return None
        content = self.data_provider(unquote(location[pos + 1:]))
        if content is None or content.data is None:
            return None
        return OpenedFile(content.data, content.type, location)


class NullSchemeHandler:
    """Refuses every request for its scheme, noting that one was made."""

    def __init__(self, scheme):
        self.scheme = scheme
        self.queried = False

    def get_file(self, uri):
        _log.debug("null handler get file %s", uri)
        self.queried = True
        return None