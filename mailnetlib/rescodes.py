"""Result codes and the exception that carries them."""

from enum import IntEnum

_TRANSPORT_LAST = -100


class ResultCode(IntEnum):
    """Codes reported by the network clients and server.

    Transport failures occupy the range between 0 and -100; the codes of
    the higher layers follow below that, one block per layer.
    """

    OK = 0

    # Transport failures
    UNSUPPORTED_PROTOCOL = -1
    FAILED_INIT = -2
    URL_MALFORMAT = -3
    COULDNT_RESOLVE_HOST = -6
    COULDNT_CONNECT = -7
    WRITE_ERROR = -23
    OPERATION_TIMEDOUT = -28
    SSL_CONNECT_ERROR = -35
    BAD_FUNCTION_ARGUMENT = -43
    SEND_ERROR = -55
    RECV_ERROR = -56

    # Network client
    DATA_WRITE_UNKNOWN_DESTINATION = _TRANSPORT_LAST - 1
    DATA_WRITE_INTERRUPTED_BY_CALLER = _TRANSPORT_LAST - 2
    DATA_WRITE_INSUFFICIENT_BUFFER = _TRANSPORT_LAST - 3
    SOCKET_FAILURE = _TRANSPORT_LAST - 4
    SOCKET_TIMEOUT = _TRANSPORT_LAST - 5

    # Network server
    SOCKET_INIT = _TRANSPORT_LAST - 6
    SOCKET_CREATE = _TRANSPORT_LAST - 7
    SOCKET_ADDRESS = _TRANSPORT_LAST - 8
    SOCKET_BIND = _TRANSPORT_LAST - 9
    SOCKET_LISTEN = _TRANSPORT_LAST - 10
    SOCKET_ACCEPT = _TRANSPORT_LAST - 11
    SOCKET_SEND = _TRANSPORT_LAST - 12
    SOCKET_READ = _TRANSPORT_LAST - 13

    # Text protocol client
    SOME_ERROR = _TRANSPORT_LAST - 14

    # OAuth2 client
    PORT_SETUP_FAILED = _TRANSPORT_LAST - 15
    SYS_CMD_FAILURE = _TRANSPORT_LAST - 16
    NET_CONNECTION = _TRANSPORT_LAST - 17
    RESPONSE_NO_DATA = _TRANSPORT_LAST - 18
    RESPONSE_UNRECOGNIZED = _TRANSPORT_LAST - 19
    RESPONSE_IS_ERROR = _TRANSPORT_LAST - 20

    @property
    def is_transport_error(self) -> bool:
        """True for failures reported by the transport itself."""
        return _TRANSPORT_LAST < self.value < 0


class NetError(Exception):
    """A network operation failed with the given result code."""

    def __init__(self, code, message=""):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{int(self.code)}] {self.message}" if self.message else f"[{int(self.code)}]"