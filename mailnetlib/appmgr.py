"""Start-up and shutdown of the application's resources."""

import logging
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path

LOG_FILE_DIRECTORY = "logs"
LOG_FILE_NAME_PREFIX = "dsp"

ERROR_CREATE_TMP_DATA_DIR = -1
ERROR_CREATE_APP_DATA_DIR = -2
ERROR_SHIFT_LOG_STATUS = -10

MSG_ERROR_CREATE_TMP_DATA_DIR = "Failed creating temporary data directory"
MSG_ERROR_CREATE_APP_DATA_DIR = "Failed creating application data directory"

_PACKAGE_LOGGER = "mailnetlib"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class InitError(Exception):
    """The application could not prepare its resources."""

    def __init__(self, code, message=""):
        super().__init__(message)
        self.code = code
        self.message = message


class ApplicationManager:
    """Creates the data directories and the log, and removes them on cleanup."""

    remove_tmp_on_cleanup = os.name == "nt"

    def __init__(self, config, debug=False):
        self.config = config
        self.debug = debug
        self.log_file = None
        self._handlers = []

    def init_resources(self):
        """Create the temporary and application directories, then the log.

        Returns the path of the log file.
        """
        try:
            Path(self.config.tmp_data_dir).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InitError(ERROR_CREATE_TMP_DATA_DIR, MSG_ERROR_CREATE_TMP_DATA_DIR) from exc
        try:
            Path(self.config.app_data_dir).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InitError(ERROR_CREATE_APP_DATA_DIR, MSG_ERROR_CREATE_APP_DATA_DIR) from exc
        return self.init_logger(self.config.default_log_level)

    def init_logger(self, default_log_level=-1):
        """Log to a dated file in the application directory.

        A negative level selects INFO, or DEBUG in debug mode, which also
        logs everything to standard error. Returns the log file path.
        """
        if default_log_level < 0:
            default_log_level = logging.DEBUG if self.debug else logging.INFO

        log_dir = Path(self.config.app_data_dir) / LOG_FILE_DIRECTORY
        log_file = log_dir / f"{LOG_FILE_NAME_PREFIX}{datetime.now():%Y%m%d}.log"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            raise InitError(ERROR_SHIFT_LOG_STATUS - 1, f"cannot open log file {log_file}") from exc

        self._remove_handlers()
        file_handler.setLevel(default_log_level)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handlers = [file_handler]
        if self.debug:
            debug_handler = logging.StreamHandler(sys.stderr)
            debug_handler.setLevel(logging.DEBUG)
            debug_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            handlers.append(debug_handler)

        logger = logging.getLogger(_PACKAGE_LOGGER)
        logger.setLevel(logging.DEBUG if self.debug else default_log_level)
        for handler in handlers:
            logger.addHandler(handler)
        self._handlers = handlers
        self.log_file = log_file
        return log_file

    def _remove_handlers(self):
        logger = logging.getLogger(_PACKAGE_LOGGER)
        for handler in self._handlers:
            logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def cleanup(self):
        """Detach the log and, where configured, remove the temporary directory."""
        self._remove_handlers()
        if self.remove_tmp_on_cleanup and self.config.tmp_data_dir:
            shutil.rmtree(self.config.tmp_data_dir, ignore_errors=True)