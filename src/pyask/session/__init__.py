"""Session layer: conversation state, commands and the shared session core.

The blocking console front end lives in ``pyask.session.repl``; the
event-loop front end in ``pyask.ui``.
"""

from .commands import HELP_TEXT, Command, CommandKind, is_command, parse_command
from .conversation import Conversation, StreamAccumulator
from .core import CommandResult, SessionCore, Turn, TurnResult, describe_error

__all__ = [
    "Command",
    "CommandKind",
    "CommandResult",
    "Conversation",
    "HELP_TEXT",
    "SessionCore",
    "StreamAccumulator",
    "Turn",
    "TurnResult",
    "describe_error",
    "is_command",
    "parse_command",
]
