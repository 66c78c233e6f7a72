"""Data models for the TUI.

Hides the internal representation of displayed chat entries. Notices and
errors are shown in the transcript but never sent to a backend.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChatMessage:
    """An entry in the displayed transcript."""

    role: str  # "user", "assistant", "system" or "error"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
