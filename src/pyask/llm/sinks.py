"""Destinations for streamed text fragments.

A sink is write-only and append-ordered: fragments are accepted in the exact
order the backend emitted them and are never reordered or coalesced.
"""

import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class StreamSink(Protocol):
    """Anything that accepts text fragments as they arrive."""

    def write(self, fragment: str) -> None: ...


class BufferSink:
    """Accumulating sink used by the blocking REPL.

    Thread-safe: the network thread writes while the foreground may read a
    snapshot of the text so far.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fragments: list[str] = []

    def write(self, fragment: str) -> None:
        with self._lock:
            self._fragments.append(fragment)

    @property
    def fragments(self) -> list[str]:
        """Copy of the fragments received so far, in arrival order."""
        with self._lock:
            return list(self._fragments)

    def getvalue(self) -> str:
        with self._lock:
            return "".join(self._fragments)


class CallbackSink:
    """Forwards every fragment to a callback (live display)."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self._callback = callback

    def write(self, fragment: str) -> None:
        self._callback(fragment)
