"""Session command parsing.

The command set and its synonyms are a stable user-facing surface:

    /help  /h  /?        show help
    /clear /c            clear the conversation
    /exit  /quit /q      leave the session
    /model /m [spec]     show or switch the model
    /models              list the current provider's models
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

COMMAND_MARKER = "/"


class CommandKind(str, Enum):
    HELP = "help"
    CLEAR = "clear"
    EXIT = "exit"
    MODEL = "model"
    MODELS = "models"
    UNKNOWN = "unknown"


COMMAND_NAMES: dict[str, CommandKind] = {
    "/help": CommandKind.HELP,
    "/h": CommandKind.HELP,
    "/?": CommandKind.HELP,
    "/clear": CommandKind.CLEAR,
    "/c": CommandKind.CLEAR,
    "/exit": CommandKind.EXIT,
    "/quit": CommandKind.EXIT,
    "/q": CommandKind.EXIT,
    "/model": CommandKind.MODEL,
    "/m": CommandKind.MODEL,
    "/models": CommandKind.MODELS,
}

HELP_TEXT = """\
Commands:
  /help, /h, /?         Show this help
  /clear, /c            Clear the conversation history
  /model, /m [spec]     Show the current model, or switch to
                        'model', 'provider/model' or 'provider'
  /models               List models of the current provider
  /exit, /quit, /q      Exit the session

Anything else is sent to the model."""


class Command(BaseModel):
    """A parsed session command."""

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    name: str
    argument: str = ""


def is_command(text: str) -> bool:
    return text.strip().startswith(COMMAND_MARKER)


def parse_command(text: str) -> Command | None:
    """Parse a line of input as a command.

    Command names are case-insensitive; the argument keeps its case.

    Returns:
        The command, or None if the input is not a command
    """
    text = text.strip()
    if not text.startswith(COMMAND_MARKER):
        return None
    name, _, argument = text.partition(" ")
    name = name.lower()
    kind = COMMAND_NAMES.get(name, CommandKind.UNKNOWN)
    return Command(kind=kind, name=name, argument=argument.strip())
