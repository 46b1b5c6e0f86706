"""A listening TCP endpoint serving one client at a time."""

import logging
import socket

from .rescodes import NetError, ResultCode

_log = logging.getLogger(__name__)


class NetServer:
    """Listens on an IPv4 address and talks to one accepted client."""

    def __init__(self):
        self._server = None
        self._client = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.stop()

    @property
    def server_address(self):
        """The (host, port) being listened on, or None when stopped."""
        return self._server.getsockname() if self._server is not None else None

    def start(self, addr, port):
        """Bind to the dotted IPv4 address and port and start listening."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        except OSError as exc:
            raise NetError(ResultCode.SOCKET_CREATE, str(exc)) from exc
        self._server = sock

        try:
            packed = socket.inet_aton(addr)
        except (OSError, ValueError, TypeError):
            packed = None
        if packed is None or packed == b"\xff\xff\xff\xff":
            self.stop()
            raise NetError(ResultCode.SOCKET_ADDRESS, f"invalid address: {addr}")

        try:
            sock.bind((socket.inet_ntoa(packed), port))
        except OSError as exc:
            _log.error("socket bind failed: %s", exc)
            self.stop()
            raise NetError(ResultCode.SOCKET_BIND, str(exc)) from exc

        try:
            sock.listen(1)
        except OSError as exc:
            _log.error("socket listen failed: %s", exc)
            self.stop()
            raise NetError(ResultCode.SOCKET_LISTEN, str(exc)) from exc

    def connect(self):
        """Wait for a client and accept it, dropping any previous one."""
        self._close_client()
        if self._server is None:
            raise NetError(ResultCode.SOCKET_ACCEPT, "server is not started")
        try:
            self._client, _ = self._server.accept()
        except OSError as exc:
            _log.error("socket accept failed: %s", exc)
            raise NetError(ResultCode.SOCKET_ACCEPT, str(exc)) from exc

    def send(self, data):
        """Send text or bytes to the accepted client."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if self._client is None:
            raise NetError(ResultCode.SOCKET_SEND, "no client connected")
        try:
            self._client.sendall(data)
        except OSError as exc:
            _log.error("socket send failed: %s", exc)
            raise NetError(ResultCode.SOCKET_SEND, str(exc)) from exc

    def recv(self, size):
        """Read up to `size` bytes from the client; empty once it has gone."""
        if self._client is None:
            raise NetError(ResultCode.SOCKET_READ, "no client connected")
        try:
            return self._client.recv(size)
        except OSError as exc:
            _log.error("socket read failed: %s", exc)
            raise NetError(ResultCode.SOCKET_READ, str(exc)) from exc

    def _close_client(self):
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None

    def stop(self):
        """Close the client connection and the listening socket."""
        self._close_client()
        if self._server is not None:
            try:
                self._server.close()
            finally:
                self._server = None