"""Transport interfaces."""

from __future__ import annotations

import threading
from typing import Protocol


class Transport(Protocol):
    def send(self, frame: bytes) -> None:
        """Deliver a 32-byte frame to the keyboard lighting controller."""


class SerializedTransport:
    """Serialize sends so concurrent callers never interleave control transfers."""

    def __init__(self, inner: Transport) -> None:
        self.inner = inner
        self._lock = threading.Lock()

    def send(self, frame: bytes) -> None:
        with self._lock:
            self.inner.send(frame)
