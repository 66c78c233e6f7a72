"""Tests for the Textual TUI and the shared rendering helpers."""
import asyncio
import logging
import threading

from conftest import FakeProvider
from rich.markdown import Markdown
from rich.text import Text

from pyask.llm import AuthError
from pyask.session import SessionCore
from pyask.ui import ChatHistoryWidget, DebugPanel, LogLevel, SessionTextualApp
from pyask.ui.formatting import clean_latex, render_markdown, render_text_styled
from pyask.ui.widgets import HistoryInput


async def submit(app, pilot, text: str) -> None:
    app.query_one("#chat-input", HistoryInput).value = text
    await pilot.press("enter")
    await pilot.pause()


async def settle(app, pilot) -> None:
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestSessionTextualApp:
    """Tests for SessionTextualApp, driven through Textual's pilot."""

    async def test_turn_streams_into_transcript(self):
        core = SessionCore(FakeProvider(script=[["He", "llo"]]))
        app = SessionTextualApp(core)

        async with app.run_test() as pilot:
            await submit(app, pilot, "hi")
            await settle(app, pilot)

            chat = app.query_one(ChatHistoryWidget)
            assert [m.role for m in chat.messages] == ["system", "user", "assistant"]
            assert chat.messages[-1].content == "Hello"
            assert chat.streaming is None
            assert chat.get_last_response() == "Hello"
            assert app.sub_title == "fake/fake-model"

        assert len(core.conversation) == 2

    async def test_failed_turn_shows_error(self):
        provider = FakeProvider(script=[([], AuthError("Fake", 401, "invalid key"))])
        core = SessionCore(provider)
        app = SessionTextualApp(core)

        async with app.run_test() as pilot:
            await submit(app, pilot, "hi")
            await settle(app, pilot)

            chat = app.query_one(ChatHistoryWidget)
            assert chat.messages[-1].role == "error"
            assert "Authentication failed" in chat.messages[-1].content

        assert len(core.conversation) == 0

    async def test_clear_command(self):
        core = SessionCore(FakeProvider(script=[["answer"]]))
        app = SessionTextualApp(core)

        async with app.run_test() as pilot:
            await submit(app, pilot, "hi")
            await settle(app, pilot)
            await submit(app, pilot, "/clear")

            chat = app.query_one(ChatHistoryWidget)
            assert [m.role for m in chat.messages] == ["system"]

        assert len(core.conversation) == 0

    async def test_models_command_runs_in_worker(self):
        app = SessionTextualApp(SessionCore(FakeProvider()))

        async with app.run_test() as pilot:
            await submit(app, pilot, "/models")
            await settle(app, pilot)

            last = app.query_one(ChatHistoryWidget).messages[-1]
            assert "* fake-model" in last.content

    async def test_model_switch_updates_subtitle(self):
        other = FakeProvider(name="other", model="other-model")
        core = SessionCore(FakeProvider(), switcher=lambda spec, current: other)
        app = SessionTextualApp(core)

        async with app.run_test() as pilot:
            await submit(app, pilot, "/model other")

            assert app.sub_title == "other/other-model"

    async def test_input_rejected_while_streaming(self):
        gate = threading.Event()
        provider = FakeProvider(script=[["late"]], gate=gate)
        core = SessionCore(provider)
        app = SessionTextualApp(core)

        async with app.run_test() as pilot:
            await submit(app, pilot, "slow")
            assert await asyncio.to_thread(provider.started.wait, 5)

            await submit(app, pilot, "/clear")
            chat = app.query_one(ChatHistoryWidget)
            assert chat.messages[-1].role == "error"
            assert "still in progress" in chat.messages[-1].content
            assert chat.streaming is not None

            gate.set()
            await settle(app, pilot)
            assert chat.messages[-1].content == "late"

        assert [m.content for m in core.conversation.snapshot()] == ["slow", "late"]

    async def test_debug_panel_toggle(self):
        app = SessionTextualApp(SessionCore(FakeProvider()), log_level="info")

        async with app.run_test() as pilot:
            panel = app.query_one(DebugPanel)
            assert panel.display
            assert panel.log_level == LogLevel.INFO

            await pilot.press("ctrl+d")
            await pilot.pause()
            assert not panel.display

    async def test_worker_logging_never_waits_for_ui(self, caplog, monkeypatch):
        caplog.set_level(logging.DEBUG, logger="pyask")
        app = SessionTextualApp(SessionCore(FakeProvider()), log_level="debug")

        async with app.run_test() as pilot:
            panel = app.query_one(DebugPanel)
            received = []
            monkeypatch.setattr(panel, "add_entry", lambda component, text, level: received.append(text))

            worker = threading.Thread(target=logging.getLogger("pyask.llm.base").info, args=("from worker",))
            worker.start()
            # The UI loop is blocked by this join; the worker must still finish
            worker.join(5)
            assert not worker.is_alive()
            logging.getLogger("pyask.ui.app").info("from ui")
            await pilot.pause()

            assert {"from worker", "from ui"} <= set(received)

    async def test_input_history_recall(self):
        app = SessionTextualApp(SessionCore(FakeProvider()))

        async with app.run_test() as pilot:
            await submit(app, pilot, "/help")
            await submit(app, pilot, "/model")
            chat_input = app.query_one("#chat-input", HistoryInput)
            chat_input.value = "draft"

            values = []
            for key in ("up", "up", "up", "down", "down"):
                await pilot.press(key)
                values.append(chat_input.value)

            assert values == ["/model", "/help", "/help", "/model", "draft"]


class TestHistoryInput:
    """Tests for input history bookkeeping."""

    def test_consecutive_duplicates_collapsed(self):
        history_input = HistoryInput()

        for entry in ("a", "a", "b", "", "a"):
            history_input.add_to_history(entry)

        assert history_input.history == ["a", "b", "a"]


class TestFormatting:
    """Tests for the rendering helpers."""

    def test_render_markdown(self):
        assert isinstance(render_markdown("# Title\n\n- item"), Markdown)

    def test_clean_latex(self):
        assert clean_latex(r"\(\frac{a}{b} \times c\)") == "(a)/(b) x c"

    def test_styled_text_ignores_markup(self):
        text = render_text_styled("[red]not markup[/red]", "bold")

        assert isinstance(text, Text)
        assert text.plain == "[red]not markup[/red]"

    def test_log_level_from_string(self):
        assert LogLevel.from_string("DEBUG") == LogLevel.DEBUG
        assert LogLevel.from_string("verbose") == LogLevel.WARNING
