"""Download and cache of external resources referenced by messages."""

import io
import logging
import threading
import time

from .netclient import NetClient
from .rescodes import NetError

_log = logging.getLogger(__name__)

TASK_WAIT_FINISH_MS = 20000
DOWNLOAD_ATTEMPT_DELAY_MS = 6000
TRANSFER_TIMEOUT_MS = 16000

INET_SCHEMES = ("ftp", "http", "https")


def get_protocol(location):
    """The scheme of a location, or "file" when it has none."""
    for pos, char in enumerate(location):
        if char == ":" and pos != 1:  # position 1 is a drive letter
            return location[:pos]
    return "file"


def can_open_url(location):
    """True for FTP and HTTP(S) locations."""
    return get_protocol(location).lower() in INET_SCHEMES


class _Task:
    def __init__(self):
        self.finished_at = None
        self.thread = None


class ExtResMgr:
    """Downloads resources in the background and keeps what was fetched.

    A failed download is retried only after a delay.
    """

    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self, client_factory=None, user_agent=""):
        self._client_factory = client_factory if client_factory is not None else NetClient
        self.user_agent = user_agent
        self._data = {}
        self._tasks = {}
        self._lock = threading.Lock()

    @classmethod
    def instance(cls):
        """The process-wide manager."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def _is_available(self, url):
        return bool(self._data.get(url))

    def start_download(self, url):
        """Start fetching a resource unless it is cached or being fetched.

        Returns True when the resource is cached or a download is running.
        """
        with self._lock:
            if self._is_available(url):
                return True
            task = self._tasks.get(url)
            if task is None:
                start_needed = True
            elif task.finished_at is not None:
                elapsed_ms = (time.monotonic() - task.finished_at) * 1000
                start_needed = elapsed_ms >= DOWNLOAD_ATTEMPT_DELAY_MS
            else:
                start_needed = False

            if not start_needed:
                return task.finished_at is None

            task = _Task()
            task.thread = threading.Thread(target=self._download, args=(url, task), daemon=True)
            self._tasks[url] = task
            try:
                task.thread.start()
            except RuntimeError:
                task.finished_at = time.monotonic()
                _log.error("download start failed: %s", url)
            else:
                _log.info("download: %s", url)
            return True

    def _download(self, url, task):
        try:
            client = self._client_factory(TRANSFER_TIMEOUT_MS, self.user_agent)
            data = client.exec(url)
            if data:
                with self._lock:
                    self._data[url] = bytes(data)
        except NetError as exc:
            _log.error("download failed: %s %s", url, exc)
        finally:
            task.finished_at = time.monotonic()

    def wait(self, url, timeout_ms=TASK_WAIT_FINISH_MS):
        """Wait for the download of a resource; True when none is running."""
        with self._lock:
            task = self._tasks.get(url)
        if task is None or task.thread is None:
            return True
        task.thread.join(timeout_ms / 1000)
        return not task.thread.is_alive()

    def get_resource_data(self, url, peek_cache_only=False):
        """The bytes of a resource, downloading and waiting if needed.

        With `peek_cache_only` only the cache is consulted. None when the
        resource is not available.
        """
        if not self._is_available(url) and not peek_cache_only:
            if self.start_download(url):
                self.wait(url, TASK_WAIT_FINISH_MS)
        with self._lock:
            return self._data.get(url) or None


class InetSchemeHandler:
    """Opens FTP and HTTP(S) locations through the resource manager."""

    mime_type = "application/octet-stream"

    def __init__(self, manager=None):
        self.manager = manager if manager is not None else ExtResMgr.instance()

    def can_open(self, location):
        return can_open_url(location)

    def open_file(self, location):
        """A binary stream over the resource, or None if unavailable."""
        data = self.manager.get_resource_data(location, False)
        return io.BytesIO(data) if data else None