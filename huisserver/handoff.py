"""Serialise work on one resource: one caller processes, the rest queue."""

from __future__ import annotations

import threading
from collections import deque


class Handoff:
    """Ordered queue where the first arrival drains items for everyone."""

    def __init__(self):
        self._lock = threading.Lock()
        self._queue = deque()
        self._idle = True
        self.current = None

    def begin(self, item):
        """Offer an item; True means the caller now processes ``current``."""
        with self._lock:
            if self._idle:
                self._idle = False
                self.current = item
                return True
            self._queue.append(item)
            return False

    def end(self):
        """Finish ``current``; False means another item is now ``current``."""
        with self._lock:
            if self._queue:
                self.current = self._queue.popleft()
                return False
            self._idle = True
            return True

    def process(self, item, handler):
        """Offer ``item`` and, if this caller won, handle until the queue is empty.

        Returns True when this call did the processing.
        """
        if not self.begin(item):
            return False
        while True:
            handler(self.current)
            if self.end():
                return True