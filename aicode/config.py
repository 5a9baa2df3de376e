"""
Configuration for the assistant.

Settings are merged once per invocation, lowest priority first:
built-in defaults, the config file (~/.ai-code-config), environment variables
and finally command-line flags. The result is an immutable `Configuration`
that is handed to every component that needs it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values
from loguru import logger
from rich.console import Console
from rich.prompt import Prompt

from .errors import InvalidSetting, MissingRequiredSetting

DEFAULT_CONFIG_PATH = Path.home() / ".ai-code-config"

API_VARIANTS = ("chat", "assistant")

DEFAULTS = {
    "endpoint": "",
    "api_key": "",
    "model": "gpt-4",
    "temperature": 0.1,
    "max_tokens": 4000,
    "api_variant": "chat",
}

# Config file keys, as written by the setup flow.
FILE_KEYS = {
    "API_ENDPOINT": "endpoint",
    "API_KEY": "api_key",
    "ASSISTANT_ID": "assistant_id",
    "API_VARIANT": "api_variant",
    "DEFAULT_MODEL": "model",
    "DEFAULT_TEMPERATURE": "temperature",
    "DEFAULT_MAX_TOKENS": "max_tokens",
}

ENV_KEYS = {
    "API_ENDPOINT": "endpoint",
    "COPILOT_KEY": "api_key",
    "ASSISTANT_ID": "assistant_id",
    "API_VARIANT": "api_variant",
}


@dataclass(frozen=True)
class Configuration:
    endpoint: str
    api_key: str
    model: str = DEFAULTS["model"]
    temperature: float = DEFAULTS["temperature"]
    max_tokens: int = DEFAULTS["max_tokens"]
    api_variant: str = DEFAULTS["api_variant"]
    assistant_id: Optional[str] = None
    directory: str = "."
    verbose: bool = False
    auto_confirm: bool = False
    dry_run: bool = False
    backup: bool = False


def load_config_file(path: Union[str, Path, None] = None) -> Dict[str, str]:
    """Reads a KEY="value" config file. A missing file yields an empty dict."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.is_file():
        return {}

    logger.info("Loading configuration from {}", config_path)
    values = {}
    for key, value in dotenv_values(config_path).items():
        setting = FILE_KEYS.get(key)
        if setting and value:
            values[setting] = value
    return values


def _from_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    values = {}
    for key, setting in ENV_KEYS.items():
        value = environ.get(key)
        if value:
            values[setting] = value
            if setting == "api_key":
                logger.info("Using API key from {} environment variable", key)
    return values


def _coerce_temperature(value) -> float:
    try:
        temperature = float(value)
    except (TypeError, ValueError):
        raise InvalidSetting("temperature", value, "expected a number")
    if not 0.0 <= temperature <= 2.0:
        raise InvalidSetting("temperature", value, "must be between 0.0 and 2.0")
    return temperature


def _coerce_max_tokens(value) -> int:
    try:
        max_tokens = int(value)
    except (TypeError, ValueError):
        raise InvalidSetting("max_tokens", value, "expected an integer")
    if max_tokens <= 0:
        raise InvalidSetting("max_tokens", value, "must be a positive integer")
    return max_tokens


def resolve_config(
    cli_overrides: Optional[Mapping] = None,
    config_path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """
    Builds the effective configuration.

    Args:
        cli_overrides: Values given on the command line. `None` entries are ignored.
        config_path: Config file to read. Defaults to ~/.ai-code-config.
        environ: Environment mapping. Defaults to `os.environ`.

    Raises:
        InvalidSetting: A numeric setting or the API variant is malformed.
        MissingRequiredSetting: The endpoint, the credential or (for the
            assistant API) the assistant id is absent.
    """
    environ = os.environ if environ is None else environ
    cli_overrides = cli_overrides or {}

    merged = dict(DEFAULTS)
    merged.update(load_config_file(config_path))
    merged.update(_from_environment(environ))
    merged.update({k: v for k, v in cli_overrides.items() if v is not None})

    api_variant = str(merged["api_variant"]).strip().lower()
    if api_variant not in API_VARIANTS:
        raise InvalidSetting(
            "api_variant", merged["api_variant"], f"expected one of {', '.join(API_VARIANTS)}"
        )

    config = Configuration(
        endpoint=str(merged["endpoint"]).strip(),
        api_key=str(merged["api_key"]).strip(),
        model=str(merged["model"]),
        temperature=_coerce_temperature(merged["temperature"]),
        max_tokens=_coerce_max_tokens(merged["max_tokens"]),
        api_variant=api_variant,
        assistant_id=(str(merged.get("assistant_id") or "").strip() or None),
        directory=str(merged.get("directory") or "."),
        verbose=bool(merged.get("verbose", False)),
        auto_confirm=bool(merged.get("auto_confirm", False)),
        dry_run=bool(merged.get("dry_run", False)),
        backup=bool(merged.get("backup", False)),
    )

    if not config.endpoint:
        raise MissingRequiredSetting("endpoint")
    if not config.api_key:
        raise MissingRequiredSetting("api_key")
    if config.api_variant == "assistant" and not config.assistant_id:
        raise MissingRequiredSetting("assistant_id")

    return config


def _render_config_file(values: Dict[str, str], key_from_env: bool) -> str:
    lines = ["# AI Code Assistant Configuration"]
    lines.append(f'API_ENDPOINT="{values["endpoint"]}"')
    if key_from_env:
        lines.append("# API_KEY is using COPILOT_KEY environment variable")
    else:
        lines.append(f'API_KEY="{values["api_key"]}"')
    if values.get("assistant_id"):
        lines.append(f'ASSISTANT_ID="{values["assistant_id"]}"')
    lines.append(f'API_VARIANT="{values["api_variant"]}"')
    lines.append(f'DEFAULT_MODEL="{values["model"]}"')
    lines.append(f'DEFAULT_TEMPERATURE="{values["temperature"]}"')
    lines.append(f'DEFAULT_MAX_TOKENS="{values["max_tokens"]}"')
    return "\n".join(lines) + "\n"


def run_setup(
    path: Union[str, Path, None] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """Asks for the connection settings and stores them with owner-only permissions."""
    environ = os.environ if environ is None else environ
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    console = Console()
    console.print("[bold]Setting up AI Code Assistant configuration...[/]\n")

    values = {"endpoint": Prompt.ask("API Endpoint URL")}

    env_key = environ.get("COPILOT_KEY")
    if env_key:
        console.print("Using existing COPILOT_KEY environment variable for API key.")
        values["api_key"] = env_key
    else:
        values["api_key"] = Prompt.ask(
            "API Key (or set the COPILOT_KEY environment variable)", password=True
        )

    values["api_variant"] = Prompt.ask(
        "API variant", choices=list(API_VARIANTS), default=DEFAULTS["api_variant"]
    )
    if values["api_variant"] == "assistant":
        values["assistant_id"] = Prompt.ask("Assistant ID")
    values["model"] = Prompt.ask("Default Model", default=DEFAULTS["model"])
    values["temperature"] = str(
        _coerce_temperature(
            Prompt.ask("Default Temperature", default=str(DEFAULTS["temperature"]))
        )
    )
    values["max_tokens"] = str(
        _coerce_max_tokens(
            Prompt.ask("Default Max Tokens", default=str(DEFAULTS["max_tokens"]))
        )
    )

    content = _render_config_file(values, key_from_env=bool(env_key))
    fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    # O_CREAT only applies the mode to new files.
    os.chmod(config_path, 0o600)

    logger.success("Configuration saved to {}", config_path)
    return config_path
