from enum import Enum
from itertools import islice
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional

DEFAULT_MAX_LINES = 50


class Intent(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    ANALYZE = "analyze"
    REFACTOR = "refactor"
    TEST = "test"
    DEBUG = "debug"
    EXPLAIN = "explain"
    OTHER = "other"

    @classmethod
    def parse(cls, token: str) -> "Intent":
        """Maps a command word to an Intent. Unknown words map to OTHER."""
        try:
            intent = cls(token.strip().lower())
        except ValueError:
            return cls.OTHER
        return intent

    @classmethod
    def commands(cls) -> List[str]:
        return [intent.value for intent in cls if intent is not cls.OTHER]


# Intents whose answers usually carry file contents to apply by hand.
FILE_OPERATION_INTENTS = frozenset({Intent.CREATE, Intent.EDIT, Intent.REFACTOR})

SYSTEM_PROMPTS = {
    Intent.CREATE: (
        "You are an expert software developer. Create high-quality, functional code files "
        "based on requirements. Always specify the exact filename and provide complete file "
        "content with proper comments."
    ),
    Intent.EDIT: (
        "You are an expert code editor. Analyze existing code and make precise improvements. "
        "Provide the complete updated file content and explain changes."
    ),
    Intent.ANALYZE: (
        "You are a senior code reviewer. Analyze code structure, identify issues, and suggest "
        "improvements with focus on quality, security, and best practices."
    ),
    Intent.REFACTOR: (
        "You are a refactoring expert. Improve code structure and maintainability while "
        "preserving functionality. Explain the changes and benefits."
    ),
    Intent.TEST: (
        "You are a testing expert. Create comprehensive test suites with good coverage. "
        "Generate both unit and integration tests as appropriate."
    ),
    Intent.DEBUG: (
        "You are a debugging expert. Identify issues, trace problems, and provide solutions "
        "with clear explanations."
    ),
    Intent.EXPLAIN: (
        "You are a code educator. Explain code concepts, algorithms, and implementations "
        "clearly with examples."
    ),
    Intent.OTHER: (
        "You are an AI coding assistant. Provide clear, actionable solutions for programming tasks."
    ),
}

LEAD_INS = {
    Intent.CREATE: "Create files for: ",
    Intent.EDIT: "Edit the following files: ",
    Intent.ANALYZE: "Analyze the code/project: ",
    Intent.REFACTOR: "Refactor the code: ",
    Intent.TEST: "Generate tests for: ",
    Intent.DEBUG: "Help debug this issue: ",
    Intent.EXPLAIN: "Explain: ",
    Intent.OTHER: "",
}


class Prompt(NamedTuple):
    system: str
    user: str


def parse_files(files: Optional[str]) -> List[str]:
    """Splits the comma-separated --files value."""
    if not files:
        return []
    return [name.strip() for name in files.split(",") if name.strip()]


def read_file_contents(path: str, max_lines: int = DEFAULT_MAX_LINES) -> str:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        head = "".join(islice(f, max_lines))
    if head and not head.endswith("\n"):
        head += "\n"
    return f"Contents of {path}:\n{head}"


def _describe_file(path: str, max_lines: int) -> str:
    if not Path(path).is_file():
        return f"File {path} does not exist - will be created if needed."
    try:
        return read_file_contents(path, max_lines)
    except OSError as e:
        return f"File {path} could not be read: {e.strerror or e}"


def build_prompt(
    intent: Intent,
    request: str,
    files: Iterable[str] = (),
    language: Optional[str] = None,
    workspace_context: str = "",
    max_lines: int = DEFAULT_MAX_LINES,
) -> Prompt:
    """
    Assembles the (system, user) prompt pair for a request.

    The user text is, in order: the intent lead-in with the request, the
    workspace context, one section per named file (its first `max_lines`
    lines, or a note that it does not exist yet) and the language hint.
    """
    intent = Intent(intent)
    user = f"{LEAD_INS[intent]}{request}"

    if workspace_context:
        user += f"\n\nWorkspace Context:\n{workspace_context}"

    files = list(files)
    if files:
        user += "\n\nTarget Files:\n"
        for path in files:
            user += f"\n{_describe_file(path, max_lines)}"

    if language:
        user += f"\n\nProgramming language: {language}"

    return Prompt(SYSTEM_PROMPTS[intent], user)
