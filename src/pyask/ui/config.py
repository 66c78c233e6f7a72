"""UI configuration constants.

Centralizes colors, spinner frames and other values shared by both front
ends. They live in an immutable StyleConfig handed to the renderers at
construction rather than in module-level mutable state.
"""

from dataclasses import dataclass


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


@dataclass(frozen=True)
class StyleConfig:
    """Colors and progress-indicator settings of the session display."""

    primary_color: str = "#00D7FF"  # user prompt, header
    secondary_color: str = "#00FF87"  # model prompt
    muted_color: str = "#666666"  # help, separators, notices
    error_color: str = "#FF5555"
    spinner_frames: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
    spinner_interval: float = 0.08  # seconds per frame
    working_text: str = "Thinking..."

    @property
    def user_style(self) -> str:
        return f"bold {self.primary_color}"

    @property
    def model_style(self) -> str:
        return f"bold {self.secondary_color}"

    @property
    def muted_style(self) -> str:
        return self.muted_color

    @property
    def error_style(self) -> str:
        return self.error_color


DEFAULT_STYLE = StyleConfig()

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages
