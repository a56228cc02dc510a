# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .app import App, AppController, brick
from .caches import LRUDict
from .logger import Logger

__all__ = ["App", "AppController", "brick", "LRUDict", "Logger"]
