"""
Client for the external chat completion endpoint.
"""
from typing import Optional
import logging

import httpx

from .errors import CompletionError, ConfigError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Sends one user message to an OpenAI-style chat completions API."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def complete(self, user_text: str) -> str:
        """
        Return the assistant reply for ``user_text``.

        Raises:
            ConfigError: if no API key is configured
            CompletionError: on transport failure, non-200 status,
                undecodable body or a response without choices
        """
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY is not set")

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": user_text}],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Completion request failed: %s", e)
            raise CompletionError(f"failed to send request: {e}") from e

        if resp.status_code != 200:
            logger.warning("Completion API returned status %s", resp.status_code)
            raise CompletionError(f"unexpected status code: {resp.status_code}")

        try:
            choices = resp.json().get("choices") or []
        except (ValueError, AttributeError) as e:
            raise CompletionError("failed to decode response") from e

        if not choices:
            raise CompletionError("no choices received from completion API")

        try:
            return choices[0]["message"]["content"]
        except (KeyError, TypeError) as e:
            raise CompletionError("failed to decode response") from e
