"""OAuth 2 access token as handed out by an authorization server."""

from dataclasses import dataclass


@dataclass
class OAuth2Token:
    """An access token with its type, lifetime and refresh token.

    `expires` is the lifetime in seconds and `created` the Unix time the
    token was issued; both are 0 when unknown.
    """

    access_token: str = ""
    token_type: str = ""
    expires: int = 0
    refresh_token: str = ""
    created: int = 0