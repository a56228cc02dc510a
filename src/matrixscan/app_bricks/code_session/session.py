# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import threading
from typing import Callable, Iterable

from matrixscan.app_utils import brick, Logger

from .decoding import DecodeFailure, TextDecoder
from .encoding import DetectionFailure, EncodingDetector
from .interfaces import CameraSource, CameraState, TrackingEngine
from .models import DecodedResult, TrackedObject
from .store import SessionStore

logger = Logger("ScanSession")

ENGINE_TEXT = "engine"


@brick
class ScanSession:
    """Collects the distinct texts of the codes tracked during a scan session.

    The session listens to the batches of tracked objects delivered by a tracking engine. The
    payload of every object is run through encoding detection and decoding, and each distinct
    decoded text is kept once, in the order it was first seen. Objects whose payload cannot be
    decoded are silently skipped.

    Starting the session clears the texts of the previous one, enables the engine and turns the
    camera on. Stopping it disables the engine and turns the camera off, but keeps the texts
    available through export_results() until the next start.

    Start, stop and batch processing are serialized. A batch that was delivered while the
    session was inactive, or before the session was restarted, is dropped.

    Args:
        engine (TrackingEngine, optional): The tracking engine delivering the batches. If None,
            a default CodeTracking engine is created.
        camera (CameraSource, optional): The camera feeding the engine. If None, no camera is
            switched on or off.
        detector (EncodingDetector, optional): Custom encoding detector.
        decoder (TextDecoder, optional): Custom text decoder.
        prefer_engine_text (bool): Use the text decoded by the engine, when it provides one,
            instead of decoding the raw payload. Only reliable for UTF-8 payloads.
            Defaults to False.
    """

    def __init__(
        self,
        engine: TrackingEngine = None,
        camera: CameraSource = None,
        detector: EncodingDetector = None,
        decoder: TextDecoder = None,
        prefer_engine_text: bool = False,
    ):
        """Initialize the ScanSession brick."""
        if engine is None:
            from matrixscan.app_bricks.code_tracking import CodeTracking

            engine = CodeTracking()

        self._engine = engine
        self._camera = camera
        self._detector = detector if detector is not None else EncodingDetector()
        self._decoder = decoder if decoder is not None else TextDecoder()
        self._prefer_engine_text = prefer_engine_text

        self._store = SessionStore()
        self._lock = threading.RLock()  # Serializes start, stop and batch processing
        self._active = False
        self._generation = 0

        self._on_result_cb = None
        self._on_error_cb = None

        self._engine.add_listener(self.on_batch)

    @property
    def is_active(self) -> bool:
        """Whether the session is currently collecting results."""
        return self._active

    def start(self):
        """Start a new scan session.

        Clears the results of the previous session, enables the tracking engine and switches
        the camera on. Does nothing if the session is already active.
        """
        with self._lock:
            if self._active:
                logger.debug("Session already active, ignoring start")
                return

            self._store.reset()
            self._generation += 1
            self._active = True

            try:
                self._engine.enable()
                if self._camera is not None:
                    # The camera turns on asynchronously
                    self._camera.switch_to(CameraState.ON)
            except Exception:
                # Stay inactive so that a later start() can retry
                self._active = False
                raise

        logger.info(f"Scan session {self._generation} started")

    def stop(self):
        """Stop the current scan session.

        Disables the tracking engine and switches the camera off. The collected results stay
        available until the next start. Does nothing if the session is not active.
        """
        with self._lock:
            if not self._active:
                logger.debug("Session not active, ignoring stop")
                return

            self._active = False

            self._engine.disable()
            if self._camera is not None:
                self._camera.switch_to(CameraState.OFF)

            collected = len(self._store)

        logger.info(f"Scan session {self._generation} stopped with {collected} distinct codes")

    def on_batch(self, objects: Iterable[TrackedObject]):
        """Process a batch of tracked objects delivered by the tracking engine.

        Each object is handled on its own: a payload that cannot be decoded is skipped without
        affecting the other objects of the batch. The batch is dropped if the session is not
        active.

        Args:
            objects (Iterable[TrackedObject]): The tracked objects updated in one frame.
        """
        generation = self._generation

        new_results = []
        with self._lock:
            if not self._active or generation != self._generation:
                logger.debug("Dropping batch delivered outside of an active session")
                return

            for obj in objects:
                try:
                    result = self._decode_object(obj)
                except Exception as e:
                    logger.error(f"Failed to process tracked object {getattr(obj, 'identifier', None)}: {e}")
                    self._on_error(e)
                    continue

                if result is not None and self._store.upsert(result.text, result):
                    new_results.append(result)

            callback = self._on_result_cb

        if callback is not None:
            for result in new_results:
                self._on_result(callback, result)

    def export_results(self) -> list[str]:
        """Return the distinct texts collected so far, in the order they were first seen.

        Can be called at any time, also after the session has been stopped.
        """
        with self._lock:
            return self._store.snapshot()

    def results(self) -> list[DecodedResult]:
        """Return the latest decoded result of every distinct text, in export order."""
        with self._lock:
            return self._store.results()

    def on_result(self, callback: Callable[[DecodedResult], None] | None):
        """Registers or removes a callback to be triggered when a new distinct text is decoded.

        The callback runs on the thread delivering the batch, once per text and session.

        Args:
            callback (Callable[[DecodedResult], None]): A callback receiving the new result.
            callback (None): To unregister the current callback, if any.

        Raises:
            TypeError: If callback is neither callable nor None.

        Example:
            def on_new_code(result: DecodedResult):
                print(f"New code '{result.text}' decoded as {result.encoding}")

            session.on_result(on_new_code)
        """
        if callback is not None and not callable(callback):
            raise TypeError("Callback must be callable or None.")
        self._on_result_cb = callback

    def on_error(self, callback: Callable[[Exception], None] | None):
        """Registers a callback function to be called when processing a tracked object fails.

        Args:
            callback (Callable[[Exception], None]): A callback receiving the exception.
            callback (None): Signals to remove the current callback, if any.

        Raises:
            TypeError: If callback is neither callable nor None.
        """
        if callback is not None and not callable(callback):
            raise TypeError("Callback must be callable or None.")
        self._on_error_cb = callback

    def _decode_object(self, obj: TrackedObject) -> DecodedResult | None:
        if self._prefer_engine_text and obj.text:
            return DecodedResult(obj.text, obj.raw_payload, obj, ENGINE_TEXT)

        hint = self._detector.detect(obj.raw_payload)
        if isinstance(hint, DetectionFailure):
            logger.debug(f"Skipping object {obj.identifier}: {hint.reason}")
            return None
        logger.debug(f"Detected encoding for object {obj.identifier}: {hint.name}")

        text = self._decoder.decode(obj.raw_payload, hint)
        if isinstance(text, DecodeFailure):
            logger.debug(f"Skipping object {obj.identifier}: {text.reason}")
            return None

        return DecodedResult(text, obj.raw_payload, obj, hint.name)

    def _on_result(self, callback: Callable[[DecodedResult], None], result: DecodedResult):
        try:
            callback(result)
        except Exception as e:
            logger.error(f"Failed to run on_result callback: {e}")
            self._on_error(e)

    def _on_error(self, exception: Exception):
        if self._on_error_cb:
            try:
                self._on_error_cb(exception)
            except Exception as e:
                logger.exception(f"Failed to run on_error callback: {e}")
