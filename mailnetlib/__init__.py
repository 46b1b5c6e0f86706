"""Network client and server helpers, resource cache, viewer and account-editing logic for mail."""

__version__ = "0.1.0"