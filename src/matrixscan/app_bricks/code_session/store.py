# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .models import DecodedResult


class SessionStore:
    """The distinct texts decoded during one scan session.

    Entries are keyed by decoded text, so a text is stored at most once. Storing a text again
    replaces its result but keeps the position it got when it was first stored.

    The store is not thread-safe on its own: ScanSession serializes every access.
    """

    def __init__(self):
        self._entries: dict[str, DecodedResult] = {}

    def reset(self):
        """Remove every entry."""
        self._entries.clear()

    def upsert(self, text: str, result: DecodedResult) -> bool:
        """Store the result for a text, replacing any previous one.

        Args:
            text (str): The deduplication key.
            result (DecodedResult): The most recent result for the text.

        Returns:
            bool: True if the text was not stored yet.
        """
        is_new = text not in self._entries
        # Assigning an existing key keeps its insertion position
        self._entries[text] = result
        return is_new

    def snapshot(self) -> list[str]:
        """Return the stored texts in the order they were first stored."""
        return list(self._entries)

    def results(self) -> list[DecodedResult]:
        """Return the stored results, in the same order as snapshot()."""
        return list(self._entries.values())

    def get(self, text: str) -> DecodedResult | None:
        return self._entries.get(text)

    def __len__(self):
        return len(self._entries)

    def __contains__(self, text):
        return text in self._entries
