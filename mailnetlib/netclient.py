"""Client side of network connections: raw sessions and one-shot transfers."""

import logging
import socket
import ssl
import urllib.error
import urllib.request
from urllib.parse import urlsplit

from .rescodes import NetError, ResultCode

_log = logging.getLogger(__name__)

_RECV_BUFFER_SIZE = 4096
_SOCKET_WAIT_TIMEOUT = 60.0

_DEFAULT_PORTS = {
    "pop3": 110,
    "pop3s": 995,
    "smtp": 25,
    "smtps": 465,
    "imap": 143,
    "imaps": 993,
    "http": 80,
    "https": 443,
    "ftp": 21,
    "ftps": 990,
    "telnet": 23,
}
_TLS_SCHEMES = frozenset({"pop3s", "smtps", "imaps", "https", "ftps"})


class _Destination:
    """Where received data goes: an in-memory buffer, a stream or a callback.

    A callback returning False interrupts the transfer.
    """

    def __init__(self, sink, limit):
        self._sink = sink
        self._limit = limit
        self._buffer = bytearray()
        self._count = 0

    def write(self, data: bytes) -> None:
        sink = self._sink
        if sink is None:
            if self._limit is not None and len(self._buffer) + len(data) > self._limit:
                _log.error("data write failed: insufficient buffer")
                raise NetError(ResultCode.DATA_WRITE_INSUFFICIENT_BUFFER, "insufficient buffer")
            self._buffer += data
        elif hasattr(sink, "write"):
            sink.write(data)
        elif callable(sink):
            if sink(data) is False:
                _log.warning("data write stopped: callback interruption")
                raise NetError(ResultCode.DATA_WRITE_INTERRUPTED_BY_CALLER, "interrupted by caller")
        else:
            _log.error("data write failed: unknown destination")
            raise NetError(ResultCode.DATA_WRITE_UNKNOWN_DESTINATION, "unknown destination")
        self._count += len(data)

    def result(self):
        return bytes(self._buffer) if self._sink is None else self._count


class NetClient:
    """A connection to a server, plus one-shot URL transfers.

    Received data is returned as bytes when no sink is given; otherwise it
    is passed to the sink (a binary stream or a callable) and the number of
    bytes delivered is returned.
    """

    def __init__(self, default_timeout_ms=0, default_user_agent=""):
        self.default_timeout_ms = default_timeout_ms
        self.default_user_agent = default_user_agent
        self._sock = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def open(self, url):
        """Connect to the host named by the URL, without any exchange."""
        self.close()
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        host = parts.hostname
        if not scheme or not host:
            _log.error("open failed: malformed URL %s", url)
            raise NetError(ResultCode.URL_MALFORMAT, f"malformed URL: {url}")
        if scheme not in _DEFAULT_PORTS:
            _log.error("open failed: unsupported protocol %s", url)
            raise NetError(ResultCode.UNSUPPORTED_PROTOCOL, f"unsupported protocol: {scheme}")
        try:
            port = parts.port or _DEFAULT_PORTS[scheme]
        except ValueError as exc:
            raise NetError(ResultCode.URL_MALFORMAT, f"malformed port: {url}") from exc

        timeout = self.default_timeout_ms / 1000 if self.default_timeout_ms else _SOCKET_WAIT_TIMEOUT
        try:
            sock = socket.create_connection((host, port), timeout)
        except socket.gaierror as exc:
            _log.error("open failed: cannot resolve %s", url)
            raise NetError(ResultCode.COULDNT_RESOLVE_HOST, str(exc)) from exc
        except TimeoutError as exc:
            _log.error("open failed: timeout %s", url)
            raise NetError(ResultCode.OPERATION_TIMEDOUT, str(exc)) from exc
        except OSError as exc:
            _log.error("open failed: cannot connect %s", url)
            raise NetError(ResultCode.COULDNT_CONNECT, str(exc)) from exc

        if scheme in _TLS_SCHEMES:
            try:
                sock = ssl.create_default_context().wrap_socket(sock, server_hostname=host)
            except (ssl.SSLError, OSError) as exc:
                sock.close()
                _log.error("open failed: TLS handshake %s", url)
                raise NetError(ResultCode.SSL_CONNECT_ERROR, str(exc)) from exc

        sock.settimeout(_SOCKET_WAIT_TIMEOUT)
        self._sock = sock
        _log.debug("open succeeded: %s", url)

    def close(self):
        """Drop the connection, if any."""
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def _require_socket(self):
        if self._sock is None:
            raise NetError(ResultCode.BAD_FUNCTION_ARGUMENT, "connection is not open")
        return self._sock

    def send(self, data):
        """Send all of the data over the open connection."""
        sock = self._require_socket()
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            sock.sendall(data)
        except TimeoutError as exc:
            _log.error("send timeout")
            raise NetError(ResultCode.SOCKET_TIMEOUT, "send timeout") from exc
        except OSError as exc:
            _log.error("send failed: %s", exc)
            raise NetError(ResultCode.SEND_ERROR, str(exc)) from exc
        _log.debug("send =%d bytes", len(data))

    def recv(self, sink=None, limit=None):
        """Receive one chunk of data from the open connection.

        Without a sink the chunk is returned as bytes, and `limit` caps its
        size. An empty result means the peer closed the connection.
        """
        sock = self._require_socket()
        dest = _Destination(sink, limit)
        try:
            chunk = sock.recv(_RECV_BUFFER_SIZE)
        except TimeoutError as exc:
            _log.error("recv socket timeout")
            raise NetError(ResultCode.SOCKET_TIMEOUT, "receive timeout") from exc
        except OSError as exc:
            _log.error("recv failed: %s", exc)
            raise NetError(ResultCode.RECV_ERROR, str(exc)) from exc
        if chunk:
            dest.write(chunk)
        _log.debug("recv =%d bytes", len(chunk))
        return dest.result()

    def exec(self, url, post_fields=None, sink=None, limit=None):
        """Fetch a URL, posting the fields if given, following redirects."""
        dest = _Destination(sink, limit)
        body = post_fields.encode("utf-8") if isinstance(post_fields, str) else post_fields
        try:
            request = urllib.request.Request(url, data=body)
        except ValueError as exc:
            raise NetError(ResultCode.URL_MALFORMAT, str(exc)) from exc
        if self.default_user_agent:
            request.add_header("User-Agent", self.default_user_agent)
        options = {}
        if self.default_timeout_ms:
            options["timeout"] = self.default_timeout_ms / 1000

        try:
            response = urllib.request.urlopen(request, **options)
        except urllib.error.HTTPError as exc:
            response = exc
        except urllib.error.URLError as exc:
            _log.error("exec failed: %s %s", exc.reason, url)
            raise NetError(_url_error_code(exc.reason), str(exc.reason)) from exc
        except TimeoutError as exc:
            raise NetError(ResultCode.OPERATION_TIMEDOUT, str(exc)) from exc
        except ValueError as exc:
            raise NetError(ResultCode.URL_MALFORMAT, str(exc)) from exc

        try:
            while True:
                try:
                    chunk = response.read(_RECV_BUFFER_SIZE)
                except TimeoutError as exc:
                    raise NetError(ResultCode.OPERATION_TIMEDOUT, str(exc)) from exc
                except OSError as exc:
                    raise NetError(ResultCode.RECV_ERROR, str(exc)) from exc
                if not chunk:
                    break
                try:
                    dest.write(chunk)
                except NetError as exc:
                    _log.error("exec failed: write error %s", url)
                    raise NetError(ResultCode.WRITE_ERROR, exc.message) from exc
        finally:
            response.close()
        _log.debug("exec succeeded: %s", url)
        return dest.result()


def _url_error_code(reason) -> ResultCode:
    if isinstance(reason, str):
        if "unknown url type" in reason:
            return ResultCode.UNSUPPORTED_PROTOCOL
        return ResultCode.COULDNT_CONNECT
    if isinstance(reason, socket.gaierror):
        return ResultCode.COULDNT_RESOLVE_HOST
    if isinstance(reason, TimeoutError):
        return ResultCode.OPERATION_TIMEDOUT
    if isinstance(reason, ssl.SSLError):
        return ResultCode.SSL_CONNECT_ERROR
    return ResultCode.COULDNT_CONNECT