"""Main CLI application using Typer."""

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config import is_placeholder_key
from ..llm import SUPPORTED_PROVIDERS, create_llm_provider
from ..llm.errors import AskError
from ..session.repl import EXIT_INTERRUPTED, SessionREPL
from .logging_setup import setup_logging
from .providers import load_config, require_session, user_label

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="pyask",
    help="Chat with Gemini, Claude, ChatGPT, DeepSeek, Mistral and Qwen from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

PROVIDER_HELP = "Provider: gemini, claude, chatgpt, deepseek, mistral or qwen"
MODEL_HELP = "Model name or provider/model"
PROFILE_HELP = "Named profile from ASK_PROFILES"
LOG_LEVEL_HELP = "Log level: debug, info, warning or error"


@app.command()
def ask(
    prompt: list[str] = typer.Argument(..., help="Question to send"),
    provider: str | None = typer.Option(None, "--provider", "-p", help=PROVIDER_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    profile: str | None = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help=LOG_LEVEL_HELP),
):
    """Ask a single question and print the answer."""
    setup_logging(log_level)
    text = " ".join(prompt).strip()
    if not text:
        console.print("[red]Error: empty prompt[/red]")
        raise typer.Exit(code=1)

    _, core = require_session(provider, model, profile)
    repl = SessionREPL(core, console)
    try:
        result = repl.query(text)
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")
        raise typer.Exit(code=EXIT_INTERRUPTED)
    finally:
        core.close()
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def chat(
    provider: str | None = typer.Option(None, "--provider", "-p", help=PROVIDER_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    profile: str | None = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help=LOG_LEVEL_HELP),
):
    """Start an interactive chat session in the terminal."""
    setup_logging(log_level)
    _, core = require_session(provider, model, profile)
    code = SessionREPL(core, console, user_label=user_label()).run()
    # After Ctrl+C the worker may still be streaming; leave its client alone
    if code != EXIT_INTERRUPTED:
        core.close()
    raise typer.Exit(code=code)


@app.command(name="tui")
def tui_command(
    provider: str | None = typer.Option(None, "--provider", "-p", help=PROVIDER_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    profile: str | None = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error",
    ),
):
    """Launch the full-screen chat interface."""
    from ..ui import run_textual_tui

    # Records reach the log panel, which applies the chosen level itself
    setup_logging("DEBUG", console=False)
    _, core = require_session(provider, model, profile)
    try:
        run_textual_tui(core, log_level=log_level, user_label=user_label())
    except KeyboardInterrupt:
        pass
    console.print("\n[dim]Goodbye![/dim]")


@app.command()
def models(
    log_level: str | None = typer.Option(None, "--log-level", "-l", help=LOG_LEVEL_HELP),
):
    """List the models offered by every provider."""
    setup_logging(log_level)
    config = load_config()

    for name in SUPPORTED_PROVIDERS:
        api_key = config.settings_for(name).api_key
        usable = bool(api_key) and not is_placeholder_key(api_key)
        try:
            with create_llm_provider(name, api_key=api_key if usable else "") as llm:
                available = llm.list_models()
                title = llm.display_name
        except AskError as e:
            console.print(f"[red]{name}: {e}[/red]")
            continue

        table = Table(title=f"{title}{'' if usable else ' (not configured, built-in list)'}")
        table.add_column("Model", style="cyan")
        table.add_column("Name", style="white")
        table.add_column("Description", style="dim")
        for descriptor in available:
            table.add_row(descriptor.id, descriptor.display_name, descriptor.description)
        console.print(table)
        console.print()


@app.command()
def version():
    """Show the installed version."""
    console.print(f"pyask {__version__}")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
