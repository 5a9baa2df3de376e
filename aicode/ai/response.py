import json
from dataclasses import dataclass
from typing import Any, Optional

NO_RESPONSE_FOUND = "No response found in API result"
UNKNOWN_API_ERROR = "Unknown API error - check endpoint and API key"


@dataclass
class DecodedResponse:
    """Outcome of one completion request."""

    ok: bool
    text: str
    raw: str = ""
    status_code: int = 0
    # False when a 2xx body had no recognizable answer field.
    found: bool = True
    dry_run: bool = False


def _parse(body: str) -> Any:
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


def _first_string(node: Any, field: str) -> Optional[str]:
    """Depth-first search for the first non-empty string stored under `field`."""
    if isinstance(node, dict):
        value = node.get(field)
        if isinstance(value, str) and value:
            return value
        for child in node.values():
            found = _first_string(child, field)
            if found:
                return found
    elif isinstance(node, list):
        for child in node:
            found = _first_string(child, field)
            if found:
                return found
    return None


def _choice_content(document: Any) -> Optional[str]:
    try:
        content = document["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) and content else None


def extract_answer(document: Any) -> Optional[str]:
    return (
        _choice_content(document)
        or _first_string(document, "content")
        or _first_string(document, "response")
    )


def extract_error(document: Any) -> Optional[str]:
    if not isinstance(document, dict):
        return None

    error = document.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error

    message = document.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def decode_response(status_code: int, body: str) -> DecodedResponse:
    """
    Pulls the answer (or the error message) out of a response body.

    Backends differ in where they put the text, so both paths walk a ladder
    of candidate fields and stop at the first one that yields a value:

    * 2xx: ``choices[0].message.content``, any ``content`` field, any
      ``response`` field, else a "no response found" sentinel.
    * otherwise: ``error.message``, a top-level ``error`` string, a top-level
      ``message``, else a generic unknown-error message.
    """
    document = _parse(body)

    if 200 <= status_code < 300:
        answer = extract_answer(document)
        if answer is None:
            return DecodedResponse(
                ok=True, text=NO_RESPONSE_FOUND, raw=body, status_code=status_code, found=False
            )
        return DecodedResponse(ok=True, text=answer, raw=body, status_code=status_code)

    return DecodedResponse(
        ok=False,
        text=extract_error(document) or UNKNOWN_API_ERROR,
        raw=body,
        status_code=status_code,
    )
