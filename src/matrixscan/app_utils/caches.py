# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from collections import OrderedDict


class LRUDict(OrderedDict):
    """A bounded dictionary that forgets the least recently used keys first.

    Both reads and writes count as a use. Membership tests (``in``) do not.
    """

    def __init__(self, maxsize: int = 128, *args, **kwargs):
        if maxsize < 1:
            raise ValueError("'maxsize' must be at least 1.")
        self.maxsize = maxsize
        super().__init__(*args, **kwargs)

    def __getitem__(self, key):
        value = super().__getitem__(key)
        self.move_to_end(key)
        return value

    def __setitem__(self, key, value):
        if key in self:
            self.move_to_end(key)
        super().__setitem__(key, value)
        while len(self) > self.maxsize:
            self.popitem(last=False)

    def get_or_insert(self, key, factory):
        """Return the value for key, creating it with factory() when missing."""
        if key in self:
            return self[key]
        value = factory()
        self[key] = value
        return value
