from __future__ import annotations

import logging
import os

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PACKAGE_LOGGER = "hrms_backend"


def setup_logging(app: Flask, *, level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure the package logger that app.logger and every module log into.

    Console output is always on; a file handler is added when log_file is set.
    Calling it again (one app per test) replaces the handlers instead of stacking them.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    # app.logger is "hrms_backend.main" and inherits the handlers above.
    app.logger.setLevel(log_level)
    logging.getLogger("werkzeug").setLevel(log_level)
    return app.logger
