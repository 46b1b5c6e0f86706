"""The data behind the credentials prompt."""

from dataclasses import dataclass

INFO_FORMAT = "Credentials for {}"
DEFAULT_INFO = "Provide credentials:"


@dataclass
class CredentialsForm:
    """Asks for the password of a user on a server; the user is read-only."""

    info: str = DEFAULT_INFO
    user: str = ""
    password: str = ""
    save: bool = False

    def set_data(self, server, user, pswd, need_save):
        """Fill the form for the given server and user."""
        self.info = INFO_FORMAT.format(server)
        self.user = user
        self.password = pswd
        self.save = need_save

    def get_data(self):
        """Return (password, whether to save the credentials)."""
        return self.password, self.save