# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import codecs
import os
from dataclasses import dataclass


# UTF-8 first, then Japanese multi-byte encodings, then regional 8-bit code pages.
# Single-byte code pages accept almost any input, so they must come last.
DEFAULT_CANDIDATES = ("utf-8", "shift_jis", "euc_jp", "cp1252", "cp1254")

# Longest marks first: the UTF-32 LE mark starts with the UTF-16 LE one.
_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


@dataclass(frozen=True)
class EncodingHint:
    """The best guess of the text encoding of a payload.

    Attributes:
        name (str): Canonical Python codec name, usable with bytes.decode().
        bom (bool): True if the guess comes from a byte-order mark.
    """

    name: str
    bom: bool = False


@dataclass(frozen=True)
class DetectionFailure:
    """No encoding could be inferred for a payload. The payload must be skipped."""

    reason: str

    def __bool__(self):
        return False


class EncodingDetector:
    """Guesses the text encoding of raw code payloads.

    Detection is heuristic: the first candidate encoding under which the whole payload is
    valid wins. Two different payloads may therefore get different guesses, e.g. a Japanese
    glyph detected as Shift-JIS and a full-width digit detected as a Windows code page, each
    self-consistent even if not the one the code's author intended.

    Args:
        candidates (list[str], optional): Codec names to try, in order of preference.
            Defaults to the comma separated CODE_SESSION_ENCODINGS environment variable, or
            UTF-8, Shift-JIS, EUC-JP, Windows-1252 and Windows-1254 when it is not set.

    Raises:
        ValueError: If no candidate is given or a candidate is not a known codec.
    """

    def __init__(self, candidates: list[str] | None = None):
        if candidates is None:
            env_value = os.getenv("CODE_SESSION_ENCODINGS", "")
            candidates = [c.strip() for c in env_value.split(",") if c.strip()] or list(DEFAULT_CANDIDATES)

        if len(candidates) == 0:
            raise ValueError("At least one candidate encoding must be provided.")

        resolved = []
        for name in candidates:
            try:
                canonical = codecs.lookup(name).name
                # Rejects bytes-to-bytes codecs such as base64 or hex
                b"".decode(canonical)
            except LookupError:
                raise ValueError(f"Unknown text encoding: '{name}'") from None
            if canonical not in resolved:
                resolved.append(canonical)
        self._candidates = tuple(resolved)

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    def detect(self, raw_payload: bytes) -> EncodingHint | DetectionFailure:
        """Infer the most likely encoding of a payload.

        Args:
            raw_payload (bytes): The raw bytes of a code.

        Returns:
            EncodingHint | DetectionFailure: The best guess, or a failure when the payload is
                empty or invalid under every candidate.
        """
        if not raw_payload:
            return DetectionFailure("empty payload")

        for bom, name in _BOMS:
            if raw_payload.startswith(bom):
                return EncodingHint(name, bom=True)

        if raw_payload.isascii():
            return EncodingHint("ascii")

        for name in self._candidates:
            try:
                raw_payload.decode(name)
            except (UnicodeDecodeError, LookupError):
                continue
            return EncodingHint(name)

        return DetectionFailure(f"payload is not valid under any of {', '.join(self._candidates)}")
