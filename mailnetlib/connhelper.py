"""Choices and value conversions for the connection fields of an account."""

import re
from enum import Enum


class ProtocolType(Enum):
    """Mail protocol of a connection."""

    NONE = "none"
    POP3 = "pop3"
    SMTP = "smtp"


class AuthenticationType(Enum):
    """How a connection authenticates."""

    NONE = "none"
    USER_PSWD = "user_pswd"
    PLAIN = "plain"
    OAUTH2 = "oauth2"


_INCOMING_PROTOCOLS = (
    (ProtocolType.NONE, ""),
    (ProtocolType.POP3, "POP3 (Post Office Protocol)"),
)
_OUTGOING_PROTOCOLS = (
    (ProtocolType.NONE, ""),
    (ProtocolType.SMTP, "SMTP (Simple Mail Transfer Protocol)"),
)
_DEFAULT_AUTH = (
    (AuthenticationType.NONE, ""),
    (AuthenticationType.USER_PSWD, "User password"),
    (AuthenticationType.PLAIN, "Plain"),
    (AuthenticationType.OAUTH2, "OAuth 2"),
)

AUTH_SPEC_SEPARATOR = " - "

_INTEGER = re.compile(r"\s*[+-]?\d+", re.ASCII)


def _protocols(incoming):
    return _INCOMING_PROTOCOLS if incoming else _OUTGOING_PROTOCOLS


def protocol_names(incoming):
    """Display names of the protocols offered for incoming or outgoing mail."""
    return [name for _, name in _protocols(incoming)]


def find_protocol_index(prot_type, incoming):
    """Position of a protocol among the choices, or -1 if it is not offered."""
    return next(
        (pos for pos, (value, _) in enumerate(_protocols(incoming)) if value is prot_type),
        -1,
    )


def protocol_at(index, incoming):
    """The protocol at a position of the choices."""
    table = _protocols(incoming)
    if not 0 <= index < len(table):
        raise IndexError(f"no protocol choice at {index}")
    return table[index][0]


def _is_spec_type(auth_type):
    return auth_type is AuthenticationType.OAUTH2


def _spec_of(name):
    pos = name.find(AUTH_SPEC_SEPARATOR)
    return name[pos + len(AUTH_SPEC_SEPARATOR):] if pos > 0 else ""


class AuthChoices:
    """The authentication choices, one per OAuth 2 provider specification."""

    def __init__(self, oauth2_specs=()):
        self._items = []
        for auth_type, name in _DEFAULT_AUTH:
            if _is_spec_type(auth_type):
                self._items.extend(
                    (auth_type, name + AUTH_SPEC_SEPARATOR + spec) for spec in oauth2_specs
                )
            else:
                self._items.append((auth_type, name))

    def names(self):
        """Display names of the choices."""
        return [name for _, name in self._items]

    def find_index(self, auth_type, auth_spec=""):
        """Position of the choice for a type and specification, or -1."""
        for pos, (value, name) in enumerate(self._items):
            if value is auth_type and (not _is_spec_type(value) or _spec_of(name) == auth_spec):
                return pos
        return -1

    def value_at(self, index):
        """(type, specification) of the choice at a position."""
        if not 0 <= index < len(self._items):
            raise IndexError(f"no authentication choice at {index}")
        auth_type, name = self._items[index]
        return auth_type, _spec_of(name) if _is_spec_type(auth_type) else ""


def check_port_value(value):
    """True for an empty value or a number between 1 and 65535."""
    if not value:
        return True
    if not _INTEGER.fullmatch(value):
        return False
    return 0 < int(value) < 65536


def parse_port_value(value):
    """The port number in a text; 0 when it holds none."""
    if not _INTEGER.fullmatch(value or ""):
        return 0
    number = int(value)
    return number & 0xFFFF if number >= 0 else 0