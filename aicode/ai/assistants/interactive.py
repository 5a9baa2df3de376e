import readline  # noqa: F401 - line editing and history for input()
from dataclasses import replace
from typing import Callable, Optional, Tuple

from loguru import logger
from rich.console import Console

from ...config import Configuration
from ...errors import HTTPError, TransportFailure
from ..prompts import Intent
from ..workspace import show_workspace
from .ask import ask

PROMPT = "ai-code> "
EXIT_WORDS = ("exit", "quit")
HELP_TEXT = (
    "Available commands: "
    + ", ".join(Intent.commands() + ["workspace", "clear", "help", "exit"])
)


def split_input(line: str) -> Tuple[Intent, str]:
    """
    Splits a line into an intent and its request.

    "edit add logging" -> (EDIT, "add logging"). A single word is an explain
    request. When the first word is not a known intent the line goes to the
    generic assistant as a whole: "what is foo" -> (OTHER, "what is foo").
    """
    parts = line.split(maxsplit=1)
    command = parts[0]
    request = parts[1] if len(parts) > 1 else line

    if request == command:
        return Intent.EXPLAIN, line

    intent = Intent.parse(command)
    if intent is Intent.OTHER:
        return intent, line
    return intent, request


def interactive(
    config: Configuration,
    read_line: Callable[[str], str] = input,
    console: Optional[Console] = None,
):
    """Reads requests line by line until the user exits."""
    console = console or Console()
    # Requests typed here are never dry runs and never touch files.
    session_config = replace(config, auto_confirm=True, dry_run=False, backup=False)

    console.print("[bold cyan]AI Code Assistant - Interactive Mode[/]")
    console.print("Type 'help' for commands, 'exit' to quit\n")

    while True:
        try:
            line = read_line(PROMPT).strip()
        except (KeyboardInterrupt, EOFError):
            console.print()
            logger.info("Exiting interactive mode")
            break

        if line in EXIT_WORDS:
            logger.info("Exiting interactive mode")
            break
        elif line == "help":
            console.print(HELP_TEXT)
        elif line == "workspace":
            show_workspace(config.directory, console)
        elif line == "clear":
            console.clear()
        elif not line:
            continue
        else:
            intent, request = split_input(line)
            try:
                ask(session_config, intent, request, console=console)
            except (TransportFailure, HTTPError) as e:
                logger.error("{}", e)
        console.print()
