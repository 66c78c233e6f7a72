"""Mutation-guarded conversation history.

Hides how the ordered message sequence is stored and shared between the
foreground (input, commands) and the background stream.
"""

import threading

from ..llm.models import Message


class Conversation:
    """Append-only message history guarded by one lock.

    ``append``, ``snapshot``, ``clear`` and ``remove_last`` are mutually
    exclusive. ``snapshot`` returns a copy, and ``clear`` replaces the list
    instead of emptying it, so a snapshot handed to an in-flight call is
    never affected by later mutations.
    """

    def __init__(self, messages: list[Message] | None = None):
        self._lock = threading.Lock()
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)

    def snapshot(self) -> list[Message]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages = []

    def remove_last(self, expected: Message) -> bool:
        """Roll back the pending user message of a failed turn.

        The last message is only removed if it is ``expected`` (by identity),
        so a rollback after an intervening clear is a no-op.

        Returns:
            True if a message was removed
        """
        with self._lock:
            if self._messages and self._messages[-1] is expected:
                self._messages.pop()
                return True
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)


class StreamAccumulator:
    """The in-progress streaming text shared with the display.

    Fragments are appended from the stream side and read from the
    display side; both go through the same lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._parts: list[str] = []

    def write(self, fragment: str) -> None:
        with self._lock:
            self._parts.append(fragment)

    def text(self) -> str:
        with self._lock:
            return "".join(self._parts)

    def reset(self) -> str:
        """Clear the accumulator and return what it held."""
        with self._lock:
            text = "".join(self._parts)
            self._parts = []
            return text

    def __bool__(self) -> bool:
        with self._lock:
            return bool(self._parts)
