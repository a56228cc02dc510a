# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .decoding import DecodeFailure, TextDecoder
from .encoding import DetectionFailure, EncodingDetector, EncodingHint
from .interfaces import CameraSource, CameraState, TrackingEngine
from .models import DecodedResult, TrackedObject
from .session import ScanSession
from .store import SessionStore

__all__ = [
    "ScanSession",
    "SessionStore",
    "EncodingDetector",
    "EncodingHint",
    "DetectionFailure",
    "TextDecoder",
    "DecodeFailure",
    "TrackedObject",
    "DecodedResult",
    "CameraSource",
    "CameraState",
    "TrackingEngine",
]
