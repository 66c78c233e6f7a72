"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering
- Incremental rendering of the streaming reply
- Log rendering and level filtering
"""

from collections import deque
from datetime import datetime

from rich.text import Text
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click, Paste
from textual.message import Message
from textual.widgets import Button, Input, Markdown, RichLog, Static

from .config import (
    DEFAULT_STYLE,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
    StyleConfig,
)
from .formatting import clean_latex, render_text_styled
from .models import ChatMessage


class ClickableMessage(Vertical):
    """A chat message container that copies its content when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self._content)
        self.app.notify("Copied to clipboard", timeout=2)


class HistoryInput(Input):
    """Single-line message input that recalls earlier entries.

    Up walks back through submitted entries and Down walks forward again,
    ending at whatever was being typed before recall started. Pasted text
    is flattened to one line because a message is always a single line.
    """

    BINDINGS = [
        Binding("up", "recall(-1)", "Previous entry", show=False),
        Binding("down", "recall(1)", "Next entry", show=False),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: deque[str] = deque(maxlen=INPUT_HISTORY_MAX_SIZE)
        self._recall_index: int | None = None
        self._draft = ""

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def add_to_history(self, entry: str) -> None:
        if entry and (not self._history or self._history[-1] != entry):
            self._history.append(entry)
        self._recall_index = None
        self._draft = ""

    def action_recall(self, step: int) -> None:
        if not self._history:
            return
        if self._recall_index is None:
            if step > 0:
                return
            self._draft = self.value
            index = len(self._history) - 1
        else:
            index = max(self._recall_index + step, 0)
        if index >= len(self._history):
            self._recall_index = None
            self._replace_value(self._draft)
        else:
            self._recall_index = index
            self._replace_value(self._history[index])

    def _replace_value(self, value: str) -> None:
        self.value = value
        self.cursor_position = len(value)

    def _on_paste(self, event: Paste) -> None:
        event.prevent_default()
        event.stop()
        if event.text:
            self.insert_text_at_cursor(" ".join(event.text.split()))


class ChatInputBar(Horizontal):
    """Chat input bar with a single-line input and Send button.

    Enter submits. Empty input is never submitted.
    """

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        yield HistoryInput(
            id="chat-input", placeholder="Type a message, or /help for commands"
        )
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Enter)"
        )

    def on_mount(self) -> None:
        self.focus_input()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def _submit(self) -> None:
        history_input = self.query_one("#chat-input", HistoryInput)
        value = history_input.value.strip()
        if value:
            history_input.add_to_history(value)
            history_input.value = ""
            self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()


class StreamingMessage(Static):
    """The reply currently being streamed.

    Shows a spinner until the first fragment arrives, then the raw text
    wrapped to the current width. Markdown is only rendered once the reply
    is complete.
    """

    def __init__(self, label: str, style: StyleConfig = DEFAULT_STYLE, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._label = label
        self._style = style
        self._text = ""
        self._frame = 0
        self._timer = None

    def on_mount(self) -> None:
        self._timer = self.set_interval(self._style.spinner_interval, self._tick)
        self._refresh_content()

    def _tick(self) -> None:
        self._frame = (self._frame + 1) % len(self._style.spinner_frames)
        self._refresh_content()

    def set_text(self, text: str) -> None:
        self._text = text
        self._refresh_content()

    @property
    def text(self) -> str:
        return self._text

    def _refresh_content(self) -> None:
        header = Text(f"{self._label} >", style=self._style.model_style)
        if self._text:
            body = render_text_styled(self._text)
        else:
            spinner = self._style.spinner_frames[self._frame]
            body = Text(
                f"{spinner} {self._style.working_text}",
                style=f"italic {self._style.muted_style}",
            )
        self.update(Text("\n").join([header, body]))

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()


class DebugPanel(RichLog):
    """Trace log of the ``pyask`` loggers, hidden until shown.

    Entries below ``log_level`` are dropped when they arrive, so raising the
    level later does not bring them back.
    """

    BORDER_TITLE = "Log"

    LEVEL_STYLES = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(*args, markup=False, highlight=False, wrap=False, **kwargs)
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._refresh_subtitle()

    def on_mount(self) -> None:
        self.display = False
        self._refresh_subtitle()

    def add_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> bool:
        """Append one entry; returns False if it is below the threshold."""
        if level < self._log_level:
            return False
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        self.write(Text.assemble(
            (datetime.now().strftime(LOG_TIMESTAMP_FORMAT), "dim"),
            " ",
            (f"{LogLevel.name(level):<7}", self.LEVEL_STYLES.get(level, "white")),
            (f"[{component}] ", "magenta"),
            message,
        ))
        return True

    def show(self) -> None:
        self.display = True
        self._refresh_subtitle()

    def toggle(self) -> bool:
        """Flip visibility and return the new state."""
        self.display = not self.display
        self._refresh_subtitle()
        return self.display

    def _refresh_subtitle(self) -> None:
        self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}" if self.display else "Hidden"


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript of the session."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, style: StyleConfig = DEFAULT_STYLE, user_label: str = "You", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._style = style
        self._user_label = user_label
        self._messages: list[ChatMessage] = []
        self._streaming: StreamingMessage | None = None

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def streaming(self) -> StreamingMessage | None:
        return self._streaming

    def add_message(self, role: str, content: str, label: str = "") -> None:
        """Add an entry: role is user, assistant, system or error."""
        msg = ChatMessage(role=role, content=content)
        self._messages.append(msg)
        self._render_message(msg, label)
        conversation_count = sum(1 for m in self._messages if m.role in ("user", "assistant"))
        self.border_subtitle = f"{conversation_count} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        for msg in reversed(self._messages):
            if msg.role == "assistant":
                return msg.content
        return None

    def clear_history(self) -> None:
        self._messages.clear()
        self._streaming = None
        self.remove_children()
        self.border_subtitle = "Conversation history"

    def start_stream(self, label: str) -> StreamingMessage:
        """Mount the placeholder that shows the reply while it streams."""
        self._streaming = StreamingMessage(label, self._style, classes="chat-message streaming-message")
        self.mount(self._streaming)
        self.scroll_end(animate=False)
        return self._streaming

    def update_stream(self, text: str) -> None:
        if self._streaming is not None:
            self._streaming.set_text(text)
            self.scroll_end(animate=False)

    def finish_stream(self) -> None:
        if self._streaming is not None:
            self._streaming.stop()
            self._streaming.remove()
            self._streaming = None

    def _render_message(self, msg: ChatMessage, label: str) -> None:
        if msg.role == "user":
            container = ClickableMessage(content=msg.content, classes="chat-message user-message")
            header = Text(f"{label or self._user_label} >", style=self._style.user_style)
            container.compose_add_child(Static(header, classes="message-header"))
            container.compose_add_child(Static(Text(msg.content, overflow="fold"), classes="message-content"))
        elif msg.role == "assistant":
            container = ClickableMessage(content=msg.content, classes="chat-message assistant-message")
            header = Text(f"{label or 'Assistant'} >", style=self._style.model_style)
            container.compose_add_child(Static(header, classes="message-header"))
            container.compose_add_child(self._render_markdown(msg.content))
        else:
            style = self._style.error_style if msg.role == "error" else self._style.muted_style
            container = Vertical(classes=f"chat-message {msg.role}-message")
            container.compose_add_child(
                Static(render_text_styled(msg.content, style), classes="message-content")
            )
        self.mount(container)

    @staticmethod
    def _render_markdown(content: str) -> Static | Markdown:
        try:
            return Markdown(clean_latex(content), classes="message-content")
        except Exception:  # markdown-it can choke on pathological input
            return Static(Text(content, overflow="fold"), classes="message-content")
