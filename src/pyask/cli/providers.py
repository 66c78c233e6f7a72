"""Provider wiring for the CLI.

Centralizes creation of the session from the environment configuration.
Hides configuration details from command implementations.
"""

import getpass

import typer
from rich.console import Console

from ..config import AskConfig, MissingKeyError, PlaceholderKeyError, key_env_var
from ..llm import LLMProvider
from ..llm.errors import AskError
from ..session import SessionCore

# Default console for output
_console = Console(stderr=True)

API_KEY_URLS = {
    "gemini": "https://aistudio.google.com/app/apikey",
    "claude": "https://console.anthropic.com/",
    "chatgpt": "https://platform.openai.com/api-keys",
    "deepseek": "https://platform.deepseek.com/",
    "mistral": "https://console.mistral.ai/",
    "qwen": "https://dashscope.console.aliyun.com/",
}


def load_config(console: Console | None = None) -> AskConfig:
    """Read the configuration, exiting with a message if it is malformed."""
    con = console or _console
    try:
        return AskConfig.from_env()
    except AskError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def make_switcher(config: AskConfig):
    """Build the /model handler used by SessionCore."""
    def switch(spec: str, current_provider: str) -> LLMProvider:
        return config.resolve_switch(spec, current_provider).create()
    return switch


def print_key_help(provider: str, console: Console | None = None) -> None:
    """Explain how to configure the API key of ``provider``."""
    con = console or _console
    con.print(f"\n[yellow]API key not configured for '{provider}'.[/yellow]")
    url = API_KEY_URLS.get(provider)
    if url:
        con.print(f"  Get an API key: {url}")
    con.print(f"  Then set [bold]{key_env_var(provider)}[/bold] in your environment or .env file.\n")


def require_session(
    provider: str | None,
    model: str | None,
    profile: str | None,
    console: Console | None = None,
) -> tuple[AskConfig, SessionCore]:
    """Resolve the backend and build the session core.

    Raises:
        typer.Exit: If no usable backend can be resolved
    """
    con = console or _console
    config = load_config(con)
    try:
        resolved = config.resolve(provider=provider, model=model, profile=profile)
    except (MissingKeyError, PlaceholderKeyError) as e:
        con.print(f"[red]Error: {e}[/red]")
        print_key_help(e.provider, con)
        raise typer.Exit(code=1)
    except AskError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    return config, SessionCore(resolved.create(), switcher=make_switcher(config))


def user_label() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "You"
