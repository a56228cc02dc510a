# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import itertools
import threading
from typing import Callable

import cv2
import numpy as np
from PIL.Image import Image
from pyzbar.pyzbar import decode, ZBarSymbol, PyZbarError

from matrixscan.app_bricks.code_session.models import TrackedObject
from matrixscan.app_utils import Logger, LRUDict

logger = Logger("CodeTracking")

barcodes_only = [s for s in ZBarSymbol if s not in (ZBarSymbol.QRCODE, ZBarSymbol.SQCODE)]
qrcodes_only = [ZBarSymbol.QRCODE, ZBarSymbol.SQCODE]


class CodeTracking:
    """Tracking engine that finds QR codes and/or barcodes in camera frames.

    Frames are pushed with process_frame(). While the engine is enabled, every frame produces
    one batch of TrackedObject, holding the raw bytes of each code, for the registered
    listeners. The same code keeps the same identifier while it stays among the most
    recently seen codes.

    Args:
        detect_qr (bool): Whether to detect QR codes. Defaults to True.
        detect_barcode (bool): Whether to detect barcodes. Defaults to True.
        max_tracked (int): How many distinct codes keep a stable identifier. Defaults to 150.

    Raises:
        ValueError: If both detect_qr and detect_barcode are False.
    """

    def __init__(self, detect_qr: bool = True, detect_barcode: bool = True, max_tracked: int = 150):
        """Initialize the CodeTracking engine."""
        if detect_qr is False and detect_barcode is False:
            raise ValueError("At least one of 'detect_qr' or 'detect_barcode' must be True.")

        self._symbols = []
        if detect_qr:
            self._symbols += qrcodes_only
        if detect_barcode:
            self._symbols += barcodes_only

        self._enabled = False
        self._listeners = []
        self._listeners_lock = threading.Lock()
        self._on_error_cb = None

        self._ids = itertools.count(1)
        self._recent_codes = LRUDict(maxsize=max_tracked)  # (symbology, payload) -> identifier

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def enable(self):
        """Resume processing frames."""
        self._enabled = True

    def disable(self):
        """Stop processing frames. Frames pushed afterwards are ignored."""
        self._enabled = False

    def add_listener(self, listener: Callable[[list[TrackedObject]], None]):
        """Register a callable receiving the batch of tracked objects of every frame."""
        if not callable(listener):
            raise TypeError("Listener must be callable.")
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[list[TrackedObject]], None]):
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def on_error(self, callback: Callable[[Exception], None] | None):
        """Registers a callback function to be called when an error occurs in the engine.

        Args:
            callback (Callable): A callback that will be called with the exception raised in the engine.
            callback (None): Signals to remove the current callback, if any.
        """
        self._on_error_cb = callback

    def process_frame(self, frame: Image | np.ndarray) -> list[TrackedObject]:
        """Find the codes in a frame and deliver them to the listeners.

        Args:
            frame (Image | np.ndarray): An RGB PIL image, an RGB array or a grayscale array.

        Returns:
            list[TrackedObject]: The delivered batch. Empty if the engine is disabled.
        """
        if not self._enabled:
            return []

        batch = self._scan_frame(_to_grayscale(frame))

        # A disable() may have raced with the scan, drop the batch in that case
        if not self._enabled:
            return []

        self._deliver(batch)
        return batch

    def _scan_frame(self, frame: np.ndarray) -> list[TrackedObject]:
        batch = []
        try:
            codes = decode(frame, symbols=self._symbols)
            for d in codes:
                if not d.data:
                    continue
                key = (d.type, d.data)
                identifier = self._recent_codes.get_or_insert(key, lambda: next(self._ids))
                batch.append(TrackedObject(identifier=identifier, raw_payload=d.data, symbology=d.type))
        except PyZbarError as p:
            logger.error(f"Failed to detect or decode: {p}")
            self._on_error(p)
        except Exception as e:
            logger.error(f"Unknown error while detecting: {e}")
            self._on_error(e)

        return batch

    def _deliver(self, batch: list[TrackedObject]):
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(batch)
            except Exception as e:
                logger.error(f"Failed to run batch listener: {e}")
                self._on_error(e)

    def _on_error(self, exception: Exception):
        if self._on_error_cb:
            try:
                self._on_error_cb(exception)
            except Exception as e:
                logger.exception(f"Failed to run on_error callback: {e}")


def _to_grayscale(frame: Image | np.ndarray) -> np.ndarray:
    """Use grayscale for barcode/QR code detection."""
    array = np.asarray(frame)
    if array.ndim == 2:
        return array
    if array.shape[2] == 4:
        return cv2.cvtColor(array, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(array, cv2.COLOR_RGB2GRAY)
