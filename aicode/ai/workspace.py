import fnmatch
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger
from rich.console import Console

MAX_DEPTH = 2
MAX_ENTRIES = 200
GIT_TIMEOUT = 10

EXCLUDED_PATTERNS = (
    "node_modules",
    ".git",
    "__pycache__",
    "*.pyc",
    ".venv",
    "venv",
    ".mypy_cache",
    ".pytest_cache",
    ".ai-session.log",
)


def _is_excluded(name: str) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in EXCLUDED_PATTERNS)


def _walk(directory: Path, depth: int, prefix: str, lines: List[str]) -> bool:
    """Appends tree lines for `directory`. Returns False once MAX_ENTRIES is hit."""
    entries = sorted(
        (e for e in directory.iterdir() if not _is_excluded(e.name)),
        key=lambda e: e.name,
    )
    for index, entry in enumerate(entries):
        if len(lines) >= MAX_ENTRIES:
            return False

        last = index == len(entries) - 1
        connector = "└── " if last else "├── "
        is_dir = entry.is_dir() and not entry.is_symlink()
        lines.append(f"{prefix}{connector}{entry.name}{'/' if is_dir else ''}")

        if is_dir and depth < MAX_DEPTH:
            extension = "    " if last else "│   "
            try:
                complete = _walk(entry, depth + 1, prefix + extension, lines)
            except OSError as e:
                logger.warning("Could not list '{}': {}", entry, e)
                lines.append(f"{prefix}{extension}└── (unreadable)")
                continue
            if not complete:
                return False
    return True


def get_directory_tree(directory: Union[str, Path]) -> str:
    root = Path(directory)
    lines = [f"{root}/"]
    try:
        complete = _walk(root, 1, "", lines)
    except OSError as e:
        logger.warning("Could not list '{}': {}", root, e)
        return f"(unable to list directory: {e})"

    if not complete:
        lines.append("... (truncated)")
    return "\n".join(lines)


def get_git_status(directory: Union[str, Path]) -> Optional[str]:
    """
    Returns the porcelain status of a git work tree, or None when `directory`
    is not the root of one. Failures running git are reported as a placeholder.
    """
    if not os.path.isdir(os.path.join(directory, ".git")):
        return None

    try:
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=directory,
            capture_output=True,
            text=True,
            check=True,
            timeout=GIT_TIMEOUT,
        )
    except FileNotFoundError:
        logger.warning("git command not found, skipping git status")
        return "Git status unavailable"
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        logger.warning("git status failed in '{}': {}", directory, e)
        return "Git status unavailable"

    return result.stdout.rstrip() or "No git changes"


def get_workspace_context(directory: Union[str, Path] = ".") -> str:
    """Snapshot of the project layout and git state, computed fresh on every call."""
    context = f"Project Structure:\n{get_directory_tree(directory)}\n\n"

    status = get_git_status(directory)
    if status is not None:
        context += f"Git Status:\n{status}\n"

    return context


def show_workspace(directory: Union[str, Path] = ".", console: Optional[Console] = None):
    console = console or Console()
    console.print("[bold cyan]Workspace Overview:[/]")
    console.print(f"Working Directory: {os.path.abspath(directory)}\n", markup=False)
    console.print(get_workspace_context(directory), markup=False, highlight=False)
