"""Bridges from worker threads into the TUI.

Hides the details of how the TUI receives updates produced off the UI
thread: stream fragments from the network worker and log records from any
``pyask`` logger. Both arrive as messages. ``post_message`` only enqueues
on the app's loop, so a worker never waits for the UI thread (which may
itself be logging).
"""

import logging
from typing import TYPE_CHECKING

from textual.message import Message

from ..session.core import TurnResult
from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App


class StreamChunk(Message):
    """A fragment of the in-flight reply arrived."""

    def __init__(self, fragment: str) -> None:
        super().__init__()
        self.fragment = fragment


class StreamDone(Message):
    """The in-flight turn ended (successfully or not)."""

    def __init__(self, result: TurnResult) -> None:
        super().__init__()
        self.result = result


class LogRecordPosted(Message):
    """A ``pyask`` log record to show in the log panel."""

    def __init__(self, component: str, text: str, level: int) -> None:
        super().__init__()
        self.component = component
        self.text = text
        self.level = level


class DebugPanelHandler(logging.Handler):
    """Logging handler that forwards records to the app as messages.

    The panel does its own level filtering, so the handler itself accepts
    everything the logger passes on.
    """

    def __init__(self, app: "App") -> None:
        super().__init__(level=logging.DEBUG)
        self._app = app

    def emit(self, record: logging.LogRecord) -> None:
        if not self._app.is_running:
            return
        try:
            self._app.post_message(LogRecordPosted(
                component=record.name.rsplit(".", 1)[-1],
                text=record.getMessage(),
                level=min(max(record.levelno, LogLevel.DEBUG), LogLevel.ERROR),
            ))
        except Exception:
            self.handleError(record)
