# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import logging
import os
import sys

_ROOT_LOGGER_NAME = "matrixscan"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.getenv("APP_LOG_LEVEL", "INFO").upper())
        root.propagate = False
    return root


def Logger(name: str) -> logging.Logger:
    """Return the logger for a component of the bricks.

    All loggers live under the "matrixscan" hierarchy and share a single stdout handler.
    The level is taken from the APP_LOG_LEVEL environment variable (defaults to INFO).

    Args:
        name (str): The component name, e.g. "ScanSession".

    Returns:
        logging.Logger: The configured logger.
    """
    _configure_root()
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
