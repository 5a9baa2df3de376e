"""
The `ai` package turns a request into a completion call: it gathers workspace
context, builds the prompt, encodes the payload, talks to the endpoint and
decodes the answer.
"""

from .agent import Agent
from .assistants.ask import ask
from .assistants.interactive import interactive
from .prompts import Intent
from .workspace import get_workspace_context, show_workspace


__all__ = [
    "Agent",
    "Intent",
    "ask",
    "interactive",
    "get_workspace_context",
    "show_workspace",
]
