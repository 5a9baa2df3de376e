import sys
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

SESSION_LOG_NAME = ".ai-session.log"

_SINK_IDS: List[int] = []

_FILE_FMT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {message}"
_CONSOLE_FMT = "<level>[{level}]</level> {message}"

# (name, severity, colour). SUCCESS is built into loguru.
_CUSTOM_LEVELS = (
    ("ACTION", 25, "<magenta>"),
    ("SESSION", 20, "<cyan>"),
)


def _ensure_levels():
    for name, severity, color in _CUSTOM_LEVELS:
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=severity, color=color)


def _remove_existing_sinks():
    global _SINK_IDS
    for sink_id in _SINK_IDS:
        try:
            logger.remove(sink_id)
        except ValueError:
            pass
    _SINK_IDS = []


def _to_console(record) -> bool:
    # Records bound with console=False were already shown to the user.
    return record["extra"].get("console", True)


def default_log_path() -> Path:
    return Path.cwd() / SESSION_LOG_NAME


def configure_logging(
    verbose: bool = False, log_path: Optional[Union[str, Path]] = None
) -> None:
    """
    Route loguru to stderr and to the append-only session log.

    The console only shows INFO lines in verbose mode; warnings, errors and
    SUCCESS/ACTION lines are always shown. The session log receives everything
    from DEBUG up. Write failures on the log file are reported by loguru and
    never propagate to the caller.
    """
    _ensure_levels()
    _remove_existing_sinks()
    # Drop loguru's own default stderr handler so lines are not printed twice.
    try:
        logger.remove(0)
    except ValueError:
        pass

    _SINK_IDS.append(
        logger.add(
            sys.stderr,
            level="INFO" if verbose else "SUCCESS",
            format=_CONSOLE_FMT,
            filter=_to_console,
        )
    )

    path = Path(log_path) if log_path is not None else default_log_path()
    try:
        _SINK_IDS.append(
            logger.add(
                str(path),
                level="DEBUG",
                format=_FILE_FMT,
                mode="a",
                encoding="utf-8",
                delay=True,
                catch=True,
            )
        )
    except OSError as e:
        logger.warning("Session log disabled, cannot open '{}': {}", path, e)


def shutdown_logging() -> None:
    _remove_existing_sinks()


def start_session(directory: Union[str, Path]) -> None:
    _ensure_levels()
    logger.log("SESSION", "Started in {}", directory)


def action(message: str, *args) -> None:
    _ensure_levels()
    logger.log("ACTION", message, *args)


def mask_secret(secret: Optional[str]) -> str:
    """Shows just enough of a credential to tell keys apart in the log."""
    if not secret:
        return "<empty>"
    if len(secret) <= 16:
        return "*" * len(secret)
    return f"{secret[:8]}...{secret[-8:]}"
