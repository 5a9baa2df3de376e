import sys
from typing import Iterable, Optional

from loguru import logger
from rich.console import Console
from rich.markdown import Markdown

from ...config import Configuration
from ...errors import HTTPError
from ...session_log import action
from ..agent import Agent
from ..payload import completion_url
from ..prompts import FILE_OPERATION_INTENTS, Intent
from ..response import DecodedResponse

CODE_FENCE = "```"


def show_file_operations(text: str, config: Configuration, console: Console):
    """Points the user at code blocks to apply by hand. Files are never written."""
    if CODE_FENCE not in text:
        return

    action("Detected code blocks in response")
    console.print("[bold yellow]Detected code blocks in response.[/]")
    console.print("To implement the suggested code:")
    console.print("1. Copy the code from the response above")
    console.print("2. Create/edit the appropriate files manually")
    if config.backup:
        console.print("No backups were made because no files were modified.")


def render_response(
    intent: Intent, response: DecodedResponse, config: Configuration, console: Console
):
    if response.dry_run:
        console.print(
            f"[bold yellow]Dry run:[/] request to {completion_url(config)} was not sent. Payload:"
        )
        console.print(response.text, markup=False, highlight=False)
        return

    if not response.found:
        logger.warning("No answer field in API result")
        print(f"Raw response: {response.raw}", file=sys.stderr)

    console.print("[bold cyan]AI Response:[/]")
    console.print(Markdown(response.text))

    if Intent(intent) in FILE_OPERATION_INTENTS:
        console.print()
        show_file_operations(response.text, config, console)


def ask(
    config: Configuration,
    intent: Intent,
    request: str,
    files: Iterable[str] = (),
    language: Optional[str] = None,
    console: Optional[Console] = None,
) -> DecodedResponse:
    """
    Sends one request and prints the answer.

    Raises:
        TransportFailure: The endpoint could not be reached.
        HTTPError: The endpoint answered with a non-2xx status.
    """
    agent = Agent(config)
    response = agent.run(intent, request, files, language)

    if not response.ok:
        logger.error("HTTP {}: API request failed", response.status_code)
        logger.debug("Full response: {}", response.raw)
        raise HTTPError(response.status_code, response.text)

    render_response(intent, response, config, console or Console())
    return response
