# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from dataclasses import dataclass
from typing import Hashable


@dataclass(frozen=True)
class TrackedObject:
    """A single code followed across frames by the tracking engine.

    Instances are created by the tracking engine for every update batch and are only
    read by the scan session while that batch is processed.

    Attributes:
        identifier (Hashable): Opaque identifier assigned by the tracking engine.
        raw_payload (bytes): The undecoded bytes carried by the code.
        text (str | None): The text already decoded by the engine, if any.
        symbology (str | None): The type of code, e.g. "QRCODE" or "EAN13".
    """

    identifier: Hashable
    raw_payload: bytes
    text: str | None = None
    symbology: str | None = None


@dataclass(frozen=True)
class DecodedResult:
    """A tracked object whose payload was successfully turned into text.

    Attributes:
        text (str): The decoded text, also used as the deduplication key.
        raw_payload (bytes): The bytes the text was decoded from.
        source (TrackedObject): The tracked object that produced the text.
        encoding (str): The codec used to decode the payload, or "engine" when the
            tracking engine's own text was used.
    """

    text: str
    raw_payload: bytes
    source: TrackedObject
    encoding: str
