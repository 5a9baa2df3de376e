"""
Wire payloads for the completion endpoint.

Two request shapes are supported, selected by `Configuration.api_variant`:

* ``chat`` - generic chat-completions body posted to the endpoint as configured::

    {"messages": [{"role": "user", "content": ..., "id": ...}],
     "temperature": ..., "max_tokens": ...}

* ``assistant`` - assistant-completions body posted to
  ``<endpoint>/assistants/<assistant-id>/completions``::

    {"messages": [{"role": "user", "id": ..., "content": ...}],
     "conversationId": ..., "traceId": ..., "stream": false}

Neither API accepts a system role, so the system and user prompts travel as a
single user message.
"""

import json
import time
import uuid

from ..config import Configuration
from .prompts import Prompt


def new_id() -> str:
    """Millisecond timestamp plus a random suffix, unique per call."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}"


def combine_prompt(system: str, user: str) -> str:
    return f"{system}\n\n{user}"


def build_payload(prompt: Prompt, config: Configuration) -> dict:
    content = combine_prompt(prompt.system, prompt.user)

    if config.api_variant == "assistant":
        return {
            "messages": [{"role": "user", "id": new_id(), "content": content}],
            "conversationId": new_id(),
            "traceId": new_id(),
            "stream": False,
        }

    return {
        "messages": [{"role": "user", "content": content, "id": new_id()}],
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }


def encode_payload(prompt: Prompt, config: Configuration) -> str:
    """Serializes the request body. json.dumps escapes quotes, backslashes and control characters."""
    return json.dumps(build_payload(prompt, config))


def completion_url(config: Configuration) -> str:
    if config.api_variant == "assistant":
        return f"{config.endpoint.rstrip('/')}/assistants/{config.assistant_id}/completions"
    return config.endpoint
