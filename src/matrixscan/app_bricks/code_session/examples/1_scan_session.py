# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

# EXAMPLE_NAME = "Scan session with a webcam"
# EXAMPLE_REQUIRES = "Requires an USB webcam."
import time

import cv2

from matrixscan.app_utils import App, brick
from matrixscan.app_bricks.code_session import CameraState, DecodedResult, ScanSession
from matrixscan.app_bricks.code_tracking import CodeTracking


@brick
class Webcam:
    """Minimal camera pushing its frames to the tracking engine while switched on."""

    def __init__(self, engine: CodeTracking, index: int = 0):
        self._engine = engine
        self._index = index
        self._capture = None

    def switch_to(self, state: CameraState):
        if state is CameraState.ON and self._capture is None:
            self._capture = cv2.VideoCapture(self._index)
        elif state is CameraState.OFF and self._capture is not None:
            self._capture.release()
            self._capture = None

    def loop(self):
        capture = self._capture
        if capture is None:
            time.sleep(0.05)
            return
        ok, frame = capture.read()
        if ok:
            self._engine.process_frame(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


def on_new_code(result: DecodedResult):
    """Callback function that handles a newly decoded code."""
    print(f"New code '{result.text}' (encoding: {result.encoding})")


engine = CodeTracking(detect_barcode=False)
camera = Webcam(engine)
session = ScanSession(engine=engine, camera=camera)
session.on_result(on_new_code)

App.run()  # This will block until the app is stopped

print(f"Scanned codes: {session.export_results()}")
