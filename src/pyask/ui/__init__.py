"""Terminal UI module for pyask.

Provides the Textual-based TUI and the rendering pieces (StyleConfig,
markdown) shared with the blocking console session.

Module structure (Parnas principle - each module hides a design decision):
- config.py: Style and layout constants (StyleConfig, LogLevel)
- formatting.py: Markdown rendering with plain-text fallback
- models.py: Data structures (displayed transcript entries)
- widgets.py: Custom widgets (input history, streaming reply, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- callbacks.py: Worker-thread integration (how TUI receives updates)
- app.py: Application orchestration (user interaction flow)
"""

from .app import SessionTextualApp, run_textual_tui
from .config import DEFAULT_STYLE, LogLevel, StyleConfig
from .formatting import render_markdown
from .models import ChatMessage
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "ChatMessage",
    "DEFAULT_STYLE",
    "DebugPanel",
    "LogLevel",
    "SessionTextualApp",
    "StyleConfig",
    "render_markdown",
    "run_textual_tui",
]
