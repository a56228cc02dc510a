# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from enum import Enum
from typing import Callable, Protocol

from .models import TrackedObject

BatchListener = Callable[[list[TrackedObject]], None]


class CameraState(Enum):
    ON = "on"
    OFF = "off"


class CameraSource(Protocol):
    """Frame source feeding the tracking engine.

    Switching is asynchronous and fire-and-forget: the camera may take some time to turn
    on or off and no completion is reported back.
    """

    def switch_to(self, state: CameraState) -> None: ...


class TrackingEngine(Protocol):
    """Engine that detects and tracks codes in the camera frames.

    While enabled, the engine delivers one batch of tracked objects per processed frame to
    every registered listener, usually from a worker thread. A batch may still be delivered
    shortly after disable() is called.
    """

    def enable(self) -> None: ...

    def disable(self) -> None: ...

    def add_listener(self, listener: BatchListener) -> None: ...

    def remove_listener(self, listener: BatchListener) -> None: ...
