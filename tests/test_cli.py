"""Tests for the Typer CLI and its logging setup."""
import logging

import httpx
import pytest
from conftest import RecordingHandler, mock_client, openai_delta, sse
from rich.console import Console
from rich.logging import RichHandler
from typer.testing import CliRunner

import pyask.cli.app as cli_app
from pyask import __version__
from pyask.cli.logging_setup import resolve_level, setup_logging
from pyask.llm import create_llm_provider

runner = CliRunner()


@pytest.fixture
def wide_console(monkeypatch):
    monkeypatch.setattr(cli_app, "console", Console(width=200))


@pytest.fixture
def fake_backend(clean_env):
    """Route every provider the CLI builds to a mock transport."""
    handler = RecordingHandler(httpx.Response(200, content=sse(openai_delta("He"), openai_delta("llo"), done=True)))

    def factory(provider, api_key, model="", **config):
        return create_llm_provider(provider, api_key, model, http_client=mock_client(handler))

    clean_env.setattr("pyask.config.create_llm_provider", factory)
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    return handler


class TestCommands:
    """Tests for the CLI commands."""

    def test_version(self):
        result = runner.invoke(cli_app.app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_ask_streams_answer(self, fake_backend, wide_console):
        result = runner.invoke(cli_app.app, ["ask", "-p", "openai", "Say", "hello"])

        assert result.exit_code == 0, result.output
        assert "Hello" in result.output
        assert fake_backend.last_json["messages"] == [{"role": "user", "content": "Say hello"}]

    def test_ask_reports_failed_turn(self, clean_env, wide_console):
        handler = RecordingHandler(httpx.Response(401, text="invalid key"))
        clean_env.setattr(
            "pyask.config.create_llm_provider",
            lambda provider, api_key, model="", **config: create_llm_provider(
                provider, api_key, model, http_client=mock_client(handler)
            ),
        )
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant")

        result = runner.invoke(cli_app.app, ["ask", "--model", "claude-3-opus-20240229", "hi"])

        assert result.exit_code == 1
        assert "Authentication failed" in result.output

    def test_ask_without_key(self, clean_env):
        result = runner.invoke(cli_app.app, ["ask", "hello"])

        assert result.exit_code == 1
        assert "GEMINI_API_KEY" in result.output

    def test_ask_unknown_profile(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "g")

        result = runner.invoke(cli_app.app, ["ask", "-P", "fast", "hello"])

        assert result.exit_code == 1
        assert "profile 'fast'" in result.output

    def test_models_lists_fallbacks_without_keys(self, clean_env, wide_console):
        result = runner.invoke(cli_app.app, ["models"])

        assert result.exit_code == 0
        for model_id in ("gemini-2.5-flash", "claude-3-5-sonnet-20241022", "gpt-4o", "deepseek-chat",
                         "mistral-large-latest", "qwen-plus"):
            assert model_id in result.output
        assert "not configured" in result.output


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_level_applied_to_package_logger(self):
        setup_logging("debug")

        assert logging.getLogger("pyask").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "info")

        assert resolve_level(None) == "INFO"

    def test_unknown_level_warns(self):
        with pytest.warns(UserWarning, match="Unknown log level"):
            assert resolve_level("chatty") == "WARNING"

    def test_no_console_output_for_full_screen(self):
        setup_logging("DEBUG", console=False)

        assert not any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)
