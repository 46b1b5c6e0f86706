"""Application configuration read from a file next to the executable."""

import configparser
import os
import sys
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_EXTENSION = ".cfg"

SECTION_GENERAL = "General"
KEY_APP_DATA_DIR = "ApplicationDataDirectory"
KEY_TMP_DATA_DIR = "TemporaryDataDirectory"
KEY_DEFAULT_LOG_LEVEL = "DefaultLogLevel"
KEY_MAIL_MSG_CONTENT_VIEWER = "MailMessageContentViewer"
KEY_NET_USER_AGENT = "NetworkUserAgent"


@dataclass(frozen=True)
class AppConfig:
    """Settings of the application.

    A negative `default_log_level` means the built-in default is used.
    """

    app_data_dir: str
    tmp_data_dir: str
    default_log_level: int = -1
    mail_message_content_viewer: int = 0
    net_user_agent: str = ""


def default_config_path(executable):
    """The configuration file: the executable's path with a .cfg extension."""
    return Path(executable).with_suffix(CONFIG_FILE_EXTENSION)


def _read_long(section, key, default):
    value = section.get(key)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def load_config(path=None, app_data_dir="", tmp_data_dir="", user_agent=""):
    """Read the configuration, falling back to the given defaults.

    Environment variables in the default directories are expanded. A
    missing file yields the defaults throughout.
    """
    if path is None:
        path = default_config_path(sys.argv[0] or "mailnetlib")
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.read(path, encoding="utf-8")
    section = parser[SECTION_GENERAL] if parser.has_section(SECTION_GENERAL) else {}

    def text(key, default):
        value = section.get(key)
        return value if value is not None else default

    return AppConfig(
        app_data_dir=text(KEY_APP_DATA_DIR, os.path.expandvars(app_data_dir)),
        tmp_data_dir=text(KEY_TMP_DATA_DIR, os.path.expandvars(tmp_data_dir)),
        default_log_level=_read_long(section, KEY_DEFAULT_LOG_LEVEL, -1),
        mail_message_content_viewer=_read_long(section, KEY_MAIL_MSG_CONTENT_VIEWER, 0),
        net_user_agent=text(KEY_NET_USER_AGENT, user_agent),
    )