import io
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from mailnetlib.netclient import NetClient
from mailnetlib.netserver import NetServer
from mailnetlib.rescodes import NetError, ResultCode


class _EchoHandler(BaseHTTPRequestHandler):
    def _reply(self, status, body):
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path == "/missing":
            self._reply(404, b"not here")
        elif self.path == "/moved":
            self.send_response(302)
            self.send_header("Location", "/target")
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            agent = self.headers.get("User-Agent", "")
            self._reply(200, f"GET|{agent}|{self.path}".encode())

    def do_POST(self):
        length = int(self.headers.get("Content-Length", "0"))
        payload = self.rfile.read(length)
        agent = self.headers.get("User-Agent", "")
        self._reply(200, b"POST|" + agent.encode() + b"|" + payload)

    def log_message(self, *args):
        pass


@pytest.fixture
def http_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _EchoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def peer():
    server = NetServer()
    server.start("127.0.0.1", 0)
    yield server
    server.stop()


def _connect(client, server):
    port = server.server_address[1]
    client.open(f"pop3://127.0.0.1:{port}")
    server.connect()


def _server_read(server, size):
    data = b""
    while len(data) < size:
        chunk = server.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def test_defaults_are_kept():
    client = NetClient(1500, "agent/1.0")
    assert client.default_timeout_ms == 1500
    assert client.default_user_agent == "agent/1.0"


def test_exec_file_into_buffer(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"hello world" * 1000)
    assert NetClient().exec(path.as_uri()) == b"hello world" * 1000


def test_exec_file_into_stream(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"abc" * 3000)
    out = io.BytesIO()
    count = NetClient().exec(path.as_uri(), sink=out)
    assert count == 9000
    assert out.getvalue() == b"abc" * 3000


def test_exec_limit_exceeded_is_write_error(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"x" * 100)
    with pytest.raises(NetError) as info:
        NetClient().exec(path.as_uri(), limit=10)
    assert info.value.code == ResultCode.WRITE_ERROR


def test_exec_callback_interrupt_is_write_error(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"payload")
    seen = []

    def sink(chunk):
        seen.append(chunk)
        return False

    with pytest.raises(NetError) as info:
        NetClient().exec(path.as_uri(), sink=sink)
    assert info.value.code == ResultCode.WRITE_ERROR
    assert seen == [b"payload"]


def test_exec_unknown_scheme():
    with pytest.raises(NetError) as info:
        NetClient().exec("nosuchscheme://example.com/")
    assert info.value.code == ResultCode.UNSUPPORTED_PROTOCOL


def test_exec_without_scheme_is_malformed():
    with pytest.raises(NetError) as info:
        NetClient().exec("no scheme here")
    assert info.value.code == ResultCode.URL_MALFORMAT


def test_exec_get_sends_user_agent(http_url):
    client = NetClient(5000, "agent/1.0")
    assert client.exec(http_url + "/page") == b"GET|agent/1.0|/page"


def test_exec_post_fields(http_url):
    client = NetClient(5000, "agent/1.0")
    assert client.exec(http_url + "/", "a=1&b=2") == b"POST|agent/1.0|a=1&b=2"


def test_exec_http_error_returns_body(http_url):
    assert NetClient(5000).exec(http_url + "/missing") == b"not here"


def test_exec_follows_redirect(http_url):
    body = NetClient(5000).exec(http_url + "/moved")
    assert body.endswith(b"|/target")


def test_send_and_recv_roundtrip(peer):
    with NetClient() as client:
        _connect(client, peer)
        client.send("USER name\r\n")
        assert _server_read(peer, 11) == b"USER name\r\n"
        peer.send(b"+OK welcome\r\n")
        assert client.recv() == b"+OK welcome\r\n"


def test_recv_into_stream(peer):
    with NetClient() as client:
        _connect(client, peer)
        peer.send(b"line\r\n")
        out = io.BytesIO()
        assert client.recv(out) == 6
        assert out.getvalue() == b"line\r\n"


def test_recv_limit_exceeded(peer):
    with NetClient() as client:
        _connect(client, peer)
        peer.send(b"0123456789")
        with pytest.raises(NetError) as info:
            client.recv(limit=3)
        assert info.value.code == ResultCode.DATA_WRITE_INSUFFICIENT_BUFFER


def test_recv_callback_interrupt(peer):
    seen = []

    def sink(chunk):
        seen.append(chunk)
        return False

    with NetClient() as client:
        _connect(client, peer)
        peer.send(b"data")
        with pytest.raises(NetError) as info:
            client.recv(sink)
        assert info.value.code == ResultCode.DATA_WRITE_INTERRUPTED_BY_CALLER
        assert seen == [b"data"]


def test_recv_unknown_destination(peer):
    with NetClient() as client:
        _connect(client, peer)
        peer.send(b"data")
        with pytest.raises(NetError) as info:
            client.recv(sink=42)
        assert info.value.code == ResultCode.DATA_WRITE_UNKNOWN_DESTINATION


def test_recv_after_peer_closed_is_empty(peer):
    with NetClient() as client:
        _connect(client, peer)
        peer.stop()
        assert client.recv() == b""


def test_context_manager_closes(peer):
    with NetClient() as client:
        _connect(client, peer)
        assert client.is_open
    assert not client.is_open


def test_send_without_open():
    with pytest.raises(NetError) as info:
        NetClient().send(b"x")
    assert info.value.code == ResultCode.BAD_FUNCTION_ARGUMENT


def test_recv_without_open():
    with pytest.raises(NetError) as info:
        NetClient().recv()
    assert info.value.code == ResultCode.BAD_FUNCTION_ARGUMENT


def test_open_unsupported_protocol():
    with pytest.raises(NetError) as info:
        NetClient().open("nosuchscheme://127.0.0.1:1")
    assert info.value.code == ResultCode.UNSUPPORTED_PROTOCOL


def test_open_without_host():
    with pytest.raises(NetError) as info:
        NetClient().open("pop3://")
    assert info.value.code == ResultCode.URL_MALFORMAT


def test_open_refused():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = NetClient(2000)
    with pytest.raises(NetError) as info:
        client.open(f"smtp://127.0.0.1:{port}")
    assert info.value.code == ResultCode.COULDNT_CONNECT
    assert not client.is_open