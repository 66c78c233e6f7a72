"""Main Textual TUI application.

Event-loop front end of the session: keystrokes, resizes, stream
fragments and stream completion arrive as events; the network call runs in
a thread worker. Turn execution, rollback and command dispatch are shared
with the blocking front end through SessionCore.
"""

import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Resize
from textual.widgets import Footer, Header

from ..llm.errors import TurnInProgressError
from ..llm.sinks import CallbackSink
from ..session.commands import CommandKind, is_command, parse_command
from ..session.conversation import StreamAccumulator
from ..session.core import BUSY_NOTICE, CommandResult, SessionCore, Turn, TurnResult
from .callbacks import DebugPanelHandler, LogRecordPosted, StreamChunk, StreamDone
from .config import DEFAULT_STYLE, LogLevel, StyleConfig
from .styles import APP_CSS
from .themes import ASK_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel

logger = logging.getLogger(__name__)

LOGGER_NAMESPACE = "pyask"


class SessionTextualApp(App):
    """Textual TUI for a chat session."""

    CSS = APP_CSS
    TITLE = "ask"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("escape", "quit", "Quit", show=False),
        Binding("ctrl+k", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Debug", priority=True),
    ]

    def __init__(
        self,
        core: SessionCore,
        style: StyleConfig = DEFAULT_STYLE,
        log_level: str | None = None,
        user_label: str = "You",
    ) -> None:
        super().__init__()
        self._core = core
        self._style = style
        self._log_level = log_level
        self._user_label = user_label
        self._stream = StreamAccumulator()
        self._log_handler: logging.Handler | None = None

    @property
    def core(self) -> SessionCore:
        return self._core

    def compose(self) -> ComposeResult:
        yield Header()
        yield ChatHistoryWidget(id="chat-history", style=self._style, user_label=self._user_label)
        yield DebugPanel(id="debug-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.register_theme(ASK_DARK)
        self.theme = ASK_DARK.name
        self.sub_title = self._core.model_label

        log_panel = self.query_one("#debug-panel", DebugPanel)
        self._log_handler = DebugPanelHandler(self)
        logging.getLogger(LOGGER_NAMESPACE).addHandler(self._log_handler)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.add_message(
            "system",
            f"Session with {self._core.model_label}. Type /help for commands, Ctrl+C to exit.",
        )
        logger.info("TUI session started with %s", self._core.model_label)

    def on_unmount(self) -> None:
        if self._log_handler is not None:
            logging.getLogger(LOGGER_NAMESPACE).removeHandler(self._log_handler)
            self._log_handler = None

    def on_resize(self, event: Resize) -> None:
        """Re-layout only; an in-flight stream keeps running."""
        logger.debug("Resized to %dx%d", event.size.width, event.size.height)
        self.query_one("#chat-history", ChatHistoryWidget).update_stream(self._stream.text())

    # Input

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        text = event.value.strip()
        if not text:
            return
        if self._core.busy:
            self._show_notice(BUSY_NOTICE, error=True)
            return
        if is_command(text):
            self._handle_command(text)
        else:
            self._start_turn(text)

    def _handle_command(self, text: str) -> None:
        command = parse_command(text)
        if command.kind is CommandKind.MODELS:
            self._list_models()
            return
        try:
            result = self._core.execute_command(command)
        except TurnInProgressError as exc:
            self._show_notice(str(exc), error=True)
            return
        self._show_command_result(result)

    def _show_command_result(self, result: CommandResult) -> None:
        if result.exit:
            self.exit()
            return
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        if result.kind is CommandKind.CLEAR and not result.is_error:
            chat.clear_history()
        if result.kind is CommandKind.MODEL and not result.is_error:
            self.sub_title = self._core.model_label
        self._show_notice(result.message, error=result.is_error)

    @work(thread=True, exclusive=True, group="commands")
    def _list_models(self) -> None:
        """Model discovery may block on the network, so it runs off the UI thread."""
        try:
            result = self._core.list_models()
        except TurnInProgressError as exc:
            self.call_from_thread(self._show_notice, str(exc), True)
            return
        self.call_from_thread(self._show_command_result, result)

    def _show_notice(self, message: str, error: bool = False) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.add_message("error" if error else "system", message)

    # Turns

    def _start_turn(self, text: str) -> None:
        try:
            turn = self._core.begin_turn(text)
        except TurnInProgressError as exc:
            self._show_notice(str(exc), error=True)
            return
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.add_message("user", text, label=self._user_label)
        self._stream.reset()
        chat.start_stream(self._core.model)
        self._run_turn(turn)

    @work(thread=True, exclusive=True, group="turn")
    def _run_turn(self, turn: Turn) -> None:
        """Run the network call; results come back as messages."""
        sink = CallbackSink(self._receive_fragment)
        try:
            result = self._core.execute_turn(turn, sink)
        except Exception as exc:
            logger.exception("Turn failed unexpectedly")
            result = TurnResult.from_exception(exc)
        self.post_message(StreamDone(result))

    def _receive_fragment(self, fragment: str) -> None:
        # Worker thread: store first, then ask the UI to redraw
        self._stream.write(fragment)
        self.post_message(StreamChunk(fragment))

    def on_stream_chunk(self, event: StreamChunk) -> None:
        self.query_one("#chat-history", ChatHistoryWidget).update_stream(self._stream.text())

    def on_log_record_posted(self, event: LogRecordPosted) -> None:
        # Records can still arrive while the app is shutting down
        for panel in self.query("#debug-panel").results(DebugPanel):
            panel.add_entry(event.component, event.text, event.level)

    def on_stream_done(self, event: StreamDone) -> None:
        self._stream.reset()
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.finish_stream()
        result = event.result
        if result.ok:
            chat.add_message("assistant", result.text, label=self._core.model)
        else:
            chat.add_message("error", result.error_message)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    # Actions

    def action_clear_chat(self) -> None:
        """Same as /clear."""
        self._handle_command("/clear")

    def action_toggle_debug(self) -> None:
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


def run_textual_tui(
    core: SessionCore,
    style: StyleConfig = DEFAULT_STYLE,
    log_level: str | None = None,
    user_label: str = "You",
) -> None:
    """Run the Textual TUI until the user exits.

    Args:
        core: Session core bound to the resolved provider
        style: Colors and spinner settings
        log_level: Log level for panel (debug/info/warning/error), None to hide
        user_label: Label shown on the user's messages
    """
    app = SessionTextualApp(core, style=style, log_level=log_level, user_label=user_label)
    try:
        app.run()
    finally:
        core.close()
