# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from dataclasses import dataclass

from .encoding import EncodingHint


@dataclass(frozen=True)
class DecodeFailure:
    """A payload could not be turned into text with the hinted encoding."""

    reason: str

    def __bool__(self):
        return False


class TextDecoder:
    """Converts raw payloads to text using an encoding hint."""

    def decode(self, raw_payload: bytes, hint: EncodingHint) -> str | DecodeFailure:
        """Decode a payload strictly with the hinted encoding.

        Args:
            raw_payload (bytes): The raw bytes of a code.
            hint (EncodingHint): The encoding to apply, usually from EncodingDetector.detect().

        Returns:
            str | DecodeFailure: The decoded text, or a failure when the hint is malformed, the
                bytes are invalid under it or nothing but a byte-order mark was decoded.
        """
        if not isinstance(hint, EncodingHint) or not isinstance(hint.name, str):
            return DecodeFailure(f"malformed encoding hint: {hint!r}")

        try:
            text = raw_payload.decode(hint.name)
        except LookupError:
            return DecodeFailure(f"unknown encoding: '{hint.name}'")
        except UnicodeDecodeError as e:
            return DecodeFailure(f"invalid {hint.name} payload: {e.reason} at byte {e.start}")

        if text == "":
            return DecodeFailure("payload decodes to empty text")
        return text
