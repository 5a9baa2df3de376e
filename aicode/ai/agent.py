from typing import Iterable, Optional

from loguru import logger

from ..config import Configuration
from .llm import LLMClient
from .payload import completion_url, encode_payload
from .prompts import Intent, build_prompt
from .response import DecodedResponse, decode_response
from .workspace import get_workspace_context


class Agent:
    """Runs one request through the prompt, payload, transport and decoder steps."""

    def __init__(self, config: Configuration, client: Optional[LLMClient] = None):
        self.config = config
        self.llm = client or LLMClient()

    def run(
        self,
        intent: Intent,
        request: str,
        files: Iterable[str] = (),
        language: Optional[str] = None,
    ) -> DecodedResponse:
        """
        Executes a request, returning the decoded response.

        In dry-run mode the payload is built but never sent; the returned
        response carries the payload as its text.
        """
        intent = Intent(intent)
        logger.info("Executing: {} - {}", intent.value, request)

        workspace_context = get_workspace_context(self.config.directory)
        prompt = build_prompt(intent, request, files, language, workspace_context)
        payload = encode_payload(prompt, self.config)
        url = completion_url(self.config)
        logger.info("Payload length: {}", len(payload))

        if self.config.dry_run:
            logger.info("Dry run, request to {} not sent", url)
            return DecodedResponse(ok=True, text=payload, dry_run=True)

        response = self.llm.send(url, self.config.api_key, payload)
        return decode_response(response.status_code, response.body)
