import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests
from loguru import logger

from ..errors import TransportFailure
from ..session_log import mask_secret


@dataclass
class LLMCompletionResponse:
    """Wraps the raw HTTP answer from the completion endpoint."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class LLMClient:
    """
    A thin wrapper around the HTTP client used to reach the completion endpoint.
    One POST per call; retries and redirects are left to the defaults of `requests`.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    @staticmethod
    def headers(api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def send(self, url: str, api_key: str, payload: str) -> LLMCompletionResponse:
        """
        Posts `payload` (an already encoded JSON document) to `url`.

        Raises:
            TransportFailure: No HTTP response was received.
        """
        logger.info("Making request to: {}", url)
        logger.debug("API key: {}", mask_secret(api_key))
        logger.debug("Payload: {}", payload)

        started = time.time()
        try:
            response = self.session.post(
                url, headers=self.headers(api_key), data=payload.encode("utf-8")
            )
        except requests.RequestException as e:
            logger.error("Request to {} failed: {}", url, e)
            raise TransportFailure(f"Could not reach {url}: {e}") from e

        elapsed_ms = (time.time() - started) * 1000.0
        logger.info("HTTP Status: {} ({:.0f} ms)", response.status_code, elapsed_ms)
        logger.debug("Response body: {}", response.text)
        return LLMCompletionResponse(status_code=response.status_code, body=response.text)
