"""Tests for the blocking console session."""
from io import StringIO

import httpx
from conftest import FakeProvider, RecordingHandler, mock_client, sse
from rich.console import Console

from pyask.llm import AuthError
from pyask.llm.providers import GeminiProvider
from pyask.session import SessionCore
from pyask.session.repl import EXIT_INTERRUPTED, EXIT_OK, ProgressIndicator, SessionREPL
from pyask.ui.config import DEFAULT_STYLE


def scripted_input(*lines: str):
    """read_line replacement: returns the lines, then signals end of input."""
    pending = list(lines)
    prompts = []

    def read_line(prompt: str) -> str:
        prompts.append(prompt)
        if not pending:
            raise EOFError
        line = pending.pop(0)
        if isinstance(line, BaseException):
            raise line
        return line

    read_line.prompts = prompts
    return read_line


def make_repl(provider: FakeProvider, *lines, **kwargs):
    output = StringIO()
    console = Console(file=output, width=100, force_terminal=False, color_system=None)
    core = SessionCore(provider)
    repl = SessionREPL(core, console, read_line=scripted_input(*lines), **kwargs)
    return repl, core, output


class TestSessionREPL:
    """Tests for SessionREPL."""

    def test_conversation_round_trip(self):
        repl, core, output = make_repl(FakeProvider(script=[["Hel", "lo"]]), "Hi", "/exit")

        code = repl.run()

        text = output.getvalue()
        assert code == EXIT_OK
        assert "fake/fake-model" in text
        assert "fake-model >" in text
        assert "Hello" in text
        assert "Goodbye!" in text
        assert len(core.conversation) == 2

    def test_commands_do_not_reach_provider(self):
        provider = FakeProvider()
        repl, _, output = make_repl(provider, "/help", "/nope", "", "/q")

        repl.run()

        text = output.getvalue()
        assert "Commands:" in text
        assert "Unknown command: /nope" in text
        assert provider.histories == []

    def test_end_of_input_exits_cleanly(self):
        repl, _, _ = make_repl(FakeProvider())

        assert repl.run() == EXIT_OK

    def test_ctrl_c_exits_with_interrupt_status(self):
        repl, _, output = make_repl(FakeProvider(), KeyboardInterrupt())

        assert repl.run() == EXIT_INTERRUPTED
        assert "Goodbye!" in output.getvalue()

    def test_failed_turn_is_reported_and_rolled_back(self):
        provider = FakeProvider(script=[([], AuthError("Fake", 401, "invalid key")), ["fine"]])
        repl, core, output = make_repl(provider, "first", "first")

        repl.run()

        text = output.getvalue()
        assert "Authentication failed" in text
        assert "fine" in text
        assert [m.content for m in core.conversation.snapshot()] == ["first", "fine"]
        assert [len(h) for h in provider.histories] == [1, 1]

    def test_unexpected_failure_ends_only_the_turn(self):
        class FlakyProvider(FakeProvider):
            def stream_with_history(self, history, sink):
                if not self.histories:
                    self.histories.append(list(history))
                    raise AttributeError("'str' object has no attribute 'get'")
                return super().stream_with_history(history, sink)

        provider = FlakyProvider(script=[["recovered"]])
        repl, core, output = make_repl(provider, "first", "again", "/exit")

        assert repl.run() == EXIT_OK

        text = output.getvalue()
        assert "Error: AttributeError" in text
        assert "recovered" in text
        assert [m.content for m in core.conversation.snapshot()] == ["again", "recovered"]

    def test_oddly_shaped_backend_event_does_not_end_session(self):
        body = sse({"candidates": ["oops"]}, {"candidates": [{"content": {"parts": [{"text": "Hi there"}]}}]})
        client = mock_client(RecordingHandler(httpx.Response(200, content=body)))
        provider = GeminiProvider("k", http_client=client)
        repl, core, output = make_repl(provider, "hello", "/exit")

        assert repl.run() == EXIT_OK

        assert "Hi there" in output.getvalue()
        assert len(core.conversation) == 2

    def test_prompt_uses_user_label(self):
        reader = scripted_input()
        core = SessionCore(FakeProvider())
        repl = SessionREPL(core, Console(file=StringIO()), read_line=reader, user_label="ada")

        repl.run()

        assert reader.prompts == ["ada > "]

    def test_query_returns_result(self):
        repl, _, _ = make_repl(FakeProvider(script=[["**bold** answer"]]))

        result = repl.query("question")

        assert result.ok
        assert result.text == "**bold** answer"

    def test_render_falls_back_to_raw_text(self):
        class Broken:
            def __rich_console__(self, console, options):
                raise ValueError("cannot render")

        repl, _, output = make_repl(FakeProvider())

        repl.render(Broken(), fallback="raw reply")

        assert "raw reply" in output.getvalue()


class TestProgressIndicator:
    """Tests for ProgressIndicator."""

    def test_frame_is_a_spinner_frame(self):
        indicator = ProgressIndicator()

        assert indicator.frame() in DEFAULT_STYLE.spinner_frames
        assert DEFAULT_STYLE.working_text in indicator.__rich__().plain
