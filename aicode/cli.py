#!/usr/bin/env python3

import argparse
import argcomplete
import shutil
import sys

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from .ai import Intent, ask, interactive, show_workspace
from .ai.prompts import parse_files
from .config import DEFAULT_CONFIG_PATH, API_VARIANTS, Configuration, resolve_config, run_setup
from .errors import MissingDependency
from .session_log import configure_logging, mask_secret, start_session

# External programs that must be on PATH. git is optional: the workspace
# snapshot reports its status as unavailable when git is missing.
REQUIRED_PROGRAMS: Tuple[str, ...] = ()

_available_commands: List["Command"] = []


class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class OptionalArg(Argument):
    def __init__(
        self,
        long_option: str,
        help: str,
        short_option: Optional[str] = None,
        kwargs: Optional[dict] = None,
    ):
        super().__init__(help=help, kwargs=kwargs)
        self.short_option = short_option
        self.long_option = long_option

    def add_to_parser(self, parser: argparse.ArgumentParser):
        flags = [self.short_option] if self.short_option else []
        parser.add_argument(*flags, self.long_option, help=self.help, **self.kwargs)


class PositionalArg(Argument):
    def __init__(self, name: str, help: str, kwargs: Optional[dict] = None):
        super().__init__(help=help, kwargs=kwargs)
        self.name = name

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(self.name, help=self.help, **self.kwargs)


@dataclass
class Command:
    name: str
    func: Callable
    help: str
    description: str


GLOBAL_ARGS: List[Argument] = [
    OptionalArg(
        short_option="-c",
        long_option="--config",
        help=f"Use a custom config file (default: {DEFAULT_CONFIG_PATH}).",
        kwargs={"metavar": "FILE"},
    ),
    OptionalArg(
        short_option="-e",
        long_option="--endpoint",
        help="API endpoint URL.",
        kwargs={"metavar": "URL"},
    ),
    OptionalArg(
        short_option="-k",
        long_option="--key",
        help="API key (prefer the COPILOT_KEY environment variable).",
        kwargs={"dest": "api_key", "metavar": "KEY"},
    ),
    OptionalArg(
        short_option="-a",
        long_option="--assistant-id",
        help="Assistant/deployment id, required by the assistant API variant.",
        kwargs={"metavar": "ID"},
    ),
    OptionalArg(
        long_option="--api-variant",
        help="Request shape: 'chat' (chat completions) or 'assistant' (assistant completions).",
        kwargs={"choices": API_VARIANTS},
    ),
    OptionalArg(
        short_option="-m",
        long_option="--model",
        help="Model to use (default: gpt-4).",
    ),
    OptionalArg(
        short_option="-t",
        long_option="--temperature",
        help="Temperature (0.0-2.0, default: 0.1).",
        kwargs={"type": float, "metavar": "NUM"},
    ),
    OptionalArg(
        short_option="-T",
        long_option="--max-tokens",
        help="Maximum tokens (default: 4000).",
        kwargs={"type": int, "metavar": "NUM"},
    ),
    OptionalArg(
        short_option="-f",
        long_option="--files",
        help="Specific files to work with (comma-separated).",
        kwargs={"metavar": "FILES"},
    ),
    OptionalArg(
        short_option="-d",
        long_option="--directory",
        help="Target directory (default: current).",
        kwargs={"default": ".", "metavar": "DIR"},
    ),
    OptionalArg(
        short_option="-w",
        long_option="--workspace",
        help="Show workspace overview and exit.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        short_option="-l",
        long_option="--language",
        help="Programming language hint.",
        kwargs={"metavar": "LANG"},
    ),
    OptionalArg(
        short_option="-v",
        long_option="--verbose",
        help="Verbose output.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        short_option="-y",
        long_option="--yes",
        help="Auto-confirm file operations.",
        kwargs={"action": "store_true", "dest": "auto_confirm"},
    ),
    OptionalArg(
        long_option="--dry-run",
        help="Show the request that would be sent without sending it.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        long_option="--backup",
        help="Create backups before editing.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        long_option="--setup",
        help="Interactive setup of the config file.",
        kwargs={"action": "store_true"},
    ),
    PositionalArg(
        name="words",
        help="An optional command followed by the description of what you want to do.",
        kwargs={"nargs": "*", "metavar": "TEXT"},
    ),
]

EXAMPLES = """
examples:
  aicode                                           # Start interactive mode
  aicode create "A Python web scraper for news articles"
  aicode edit -f main.py "Add error handling to the login function"
  aicode test "Generate unit tests for the user authentication"
  aicode "How does this authentication work?"      # Defaults to explain

configuration:
  Settings are read from ~/.ai-code-config (see --setup), then from the
  API_ENDPOINT, COPILOT_KEY, ASSISTANT_ID and API_VARIANT environment variables,
  then from the command line options, the latter taking precedence.
"""


def _cli_overrides(args) -> Dict:
    return {
        "endpoint": args.endpoint,
        "api_key": args.api_key,
        "assistant_id": args.assistant_id,
        "api_variant": args.api_variant,
        "model": args.model,
        "temperature": args.temperature,
        "max_tokens": args.max_tokens,
        "directory": args.directory,
        "verbose": args.verbose,
        "auto_confirm": args.auto_confirm,
        "dry_run": args.dry_run,
        "backup": args.backup,
    }


def _load_config(args) -> Configuration:
    config = resolve_config(_cli_overrides(args), config_path=args.config)
    logger.info("Final API key: {}", mask_secret(config.api_key))
    return config


def check_dependencies(programs=REQUIRED_PROGRAMS):
    missing = [program for program in programs if shutil.which(program) is None]
    if missing:
        raise MissingDependency(missing)


def command(func):
    if not func.__name__.startswith("handle_"):
        raise ValueError("Command handler must start with 'handle_'.")

    if not func.__doc__:
        raise ValueError(
            f"Command handler '{func.__name__}' must have a docstring for its help text."
        )

    @wraps(func)
    def wrapper(args):
        config = _load_config(args)
        start_session(config.directory)
        return func(config, args)

    command_name = func.__name__.split("_")[1]
    # Use the first line of the docstring as the help text and
    # the full docstring for the detailed description.
    help_text = func.__doc__.strip().split("\n")[0]
    _available_commands.append(Command(command_name, wrapper, help_text, func.__doc__))
    return wrapper


def _ask(config: Configuration, intent: Intent, args):
    if not args.request:
        logger.error("Request description is required for {} command.", intent.value)
        sys.exit(1)

    ask(config, intent, args.request, parse_files(args.files), args.language)


##############################################################################


@command
def handle_create(config, args):
    """Create new files or projects."""
    _ask(config, Intent.CREATE, args)


@command
def handle_edit(config, args):
    """Edit existing files."""
    _ask(config, Intent.EDIT, args)


@command
def handle_analyze(config, args):
    """Analyze code or project structure."""
    _ask(config, Intent.ANALYZE, args)


@command
def handle_refactor(config, args):
    """Refactor existing code."""
    _ask(config, Intent.REFACTOR, args)


@command
def handle_test(config, args):
    """Generate or run tests."""
    _ask(config, Intent.TEST, args)


@command
def handle_debug(config, args):
    """Help debug issues."""
    _ask(config, Intent.DEBUG, args)


@command
def handle_explain(config, args):
    """Explain code or concepts.
    This is the command used when the text does not start with a command name.
    """
    _ask(config, Intent.EXPLAIN, args)


@command
def handle_interactive(config, args):
    """Start interactive mode (default if no arguments are given)."""
    interactive(config)


##############################################################################


def _commands() -> Dict[str, Command]:
    return {cmd.name: cmd for cmd in _available_commands}


def split_command(words: List[str]) -> Tuple[str, str]:
    """
    Picks the command from the first positional word.

    The remaining words, space-joined, are the request. Without a command the
    request is explained, and without any words the interactive mode starts.
    """
    words = list(words)
    if words and words[0] in _commands():
        return words[0], " ".join(words[1:])
    if not words:
        return "interactive", ""
    return "explain", " ".join(words)


def build_parser() -> argparse.ArgumentParser:
    # Sort commands alphabetically for consistent --help output.
    _available_commands.sort(key=lambda cmd: cmd.name)
    commands_help = "\n".join(
        f"  {cmd.name:<12} {cmd.help}" for cmd in _available_commands
    )

    parser = argparse.ArgumentParser(
        prog="aicode",
        description="An AI-powered code assistant that works with the files in your workspace.\n"
        "If no command is specified, starts in interactive mode.",
        epilog=f"commands:\n{commands_help}\n{EXAMPLES}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    for arg in GLOBAL_ARGS:
        arg.add_to_parser(parser)
    return parser


def run_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments and executes the corresponding command.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used automatically by the parser.
    """
    parser = build_parser()

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    # Options may appear anywhere between the command and the request words.
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.verbose)

    try:
        if args.setup:
            run_setup(args.config)
            return
        if args.workspace:
            show_workspace(args.directory)
            return

        command_name, args.request = split_command(args.words)
        check_dependencies()
        _commands()[command_name].func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.bind(console=False).error("{}", e)
        sys.exit(1)


def main():
    """The main entry point for the command-line interface, called by the `aicode` script."""
    run_cli()


if __name__ == "__main__":
    main()
