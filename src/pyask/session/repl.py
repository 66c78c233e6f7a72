"""Blocking console session.

Read a line, then either dispatch a command or run a turn. While a turn is
in flight two activities run side by side: the network call in a daemon
thread writing into a BufferSink, and rich's Live refresh thread repainting
the progress indicator. The engine waits on the shared ``done`` event, then
stops the Live display (which joins its refresh thread and erases the
indicator) before rendering the reply, so the indicator never overlaps it.

Ctrl+C at any point prints a farewell and ends the session without waiting
for the in-flight call.
"""

import logging
import threading
import time
from collections.abc import Callable

from rich.console import Console, RenderableType
from rich.live import Live
from rich.text import Text

from ..llm.sinks import BufferSink
from ..ui.config import DEFAULT_STYLE, StyleConfig
from ..ui.formatting import render_markdown
from .commands import is_command
from .core import CommandResult, SessionCore, TurnResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INTERRUPTED = 130

# Seconds between checks of the done signal; keeps Ctrl+C responsive
WAIT_POLL_INTERVAL = 0.1


class ProgressIndicator:
    """Frame-based "working" indicator, re-rendered on every Live refresh."""

    def __init__(self, style: StyleConfig = DEFAULT_STYLE):
        self._style = style
        self._started = time.monotonic()

    def frame(self) -> str:
        elapsed = time.monotonic() - self._started
        index = int(elapsed / self._style.spinner_interval) % len(self._style.spinner_frames)
        return self._style.spinner_frames[index]

    def __rich__(self) -> Text:
        return Text(
            f"{self.frame()} {self._style.working_text}",
            style=f"italic {self._style.muted_style}",
        )


class SessionREPL:
    """Read-eval loop over a SessionCore.

    Args:
        core: Session core bound to the resolved provider
        console: Rich console for all output
        style: Colors and spinner settings
        read_line: Replaces console input (prompt -> line); raises EOFError at end
        user_label: Label printed before user input
    """

    def __init__(
        self,
        core: SessionCore,
        console: Console | None = None,
        style: StyleConfig = DEFAULT_STYLE,
        read_line: Callable[[str], str] | None = None,
        user_label: str = "You",
    ):
        self._core = core
        self._console = console or Console()
        self._style = style
        self._read_line = read_line
        self._user_label = user_label

    def run(self) -> int:
        """Run until /exit, end of input or Ctrl+C.

        Returns:
            Process exit status
        """
        self._print_banner()
        try:
            while True:
                try:
                    line = self._prompt()
                except EOFError:
                    self._console.print()
                    break
                text = line.strip()
                if not text:
                    continue
                if is_command(text):
                    result = self._core.dispatch(text)
                    self._show_command_result(result)
                    if result.exit:
                        break
                    continue
                self.query(text)
        except KeyboardInterrupt:
            self._console.print()
            self._console.print(Text("Goodbye!", style=self._style.muted_style))
            return EXIT_INTERRUPTED
        return EXIT_OK

    def query(self, text: str) -> TurnResult:
        """Run one turn with the progress indicator, then render the outcome."""
        turn = self._core.begin_turn(text)
        sink = BufferSink()
        done = threading.Event()
        box: dict = {}

        def network_call() -> None:
            try:
                box["result"] = self._core.execute_turn(turn, sink)
            except Exception as exc:
                box["error"] = exc
            finally:
                done.set()

        worker = threading.Thread(target=network_call, name="pyask-stream", daemon=True)
        live = Live(
            ProgressIndicator(self._style),
            console=self._console,
            transient=True,
            refresh_per_second=1 / self._style.spinner_interval,
        )
        live.start()
        try:
            worker.start()
            while not done.wait(WAIT_POLL_INTERVAL):
                pass
        finally:
            live.stop()

        if "error" in box:
            logger.debug("Turn failed unexpectedly", exc_info=box["error"])
            result = TurnResult.from_exception(box["error"])
        else:
            result = box["result"]
        self._show_turn_result(result)
        return result

    def _prompt(self) -> str:
        prompt = f"{self._user_label} > "
        if self._read_line is not None:
            return self._read_line(prompt)
        return self._console.input(Text(prompt, style=self._style.user_style))

    def _print_banner(self) -> None:
        self._console.print(Text(self._core.model_label, style=self._style.user_style))
        self._console.print(
            Text("Session mode. Type /help for commands, Ctrl+C to exit.", style=self._style.muted_style)
        )

    def _show_command_result(self, result: CommandResult) -> None:
        style = self._style.error_style if result.is_error else self._style.muted_style
        self._console.print(Text(result.message, style=style))

    def _show_turn_result(self, result: TurnResult) -> None:
        if result.ok:
            self._console.print(Text(f"{self._core.model} >", style=self._style.model_style))
            self.render(render_markdown(result.text), fallback=result.text)
            self._console.print()
        else:
            self._console.print(Text(result.error_message, style=self._style.error_style))

    def render(self, renderable: RenderableType, fallback: str) -> None:
        """Print a renderable; on any rendering failure print the raw text."""
        try:
            self._console.print(renderable)
        except Exception as exc:
            logger.debug("Rendering failed, printing raw text: %s", exc)
            self._console.print(Text(fallback))
