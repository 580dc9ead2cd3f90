"""
Claude API client used by the AI-assisted collectors.

Wraps the Anthropic Messages API and turns the model's answer into JSON.
Every failure surfaces as ServiceError; callers never see SDK exceptions.
"""
import json
import logging
import re
from typing import Any, Optional

from anthropic import Anthropic

from config.settings import AI_MAX_TOKENS, AI_TIMEOUT, ANTHROPIC_API_KEY, ANTHROPIC_MODEL
from src.exceptions import ServiceError

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_JSON_BLOCK = re.compile(r"[\[{].*[\]}]", re.DOTALL)


def parse_json_response(response_text: str) -> Any:
    """
    Parse a model answer as JSON.

    Accepts bare JSON, a ```json fenced block, or JSON surrounded by prose.

    Raises:
        ValueError: nothing in the text parses as JSON
    """
    text = (response_text or "").strip()
    candidates = [text]

    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))

    block = _JSON_BLOCK.search(text)
    if block:
        candidates.append(block.group(0))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise ValueError("Could not parse Claude response as JSON")


class ClaudeClient:
    """Thin wrapper around Anthropic().messages.create that returns parsed JSON."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = ANTHROPIC_MODEL,
        max_tokens: int = AI_MAX_TOKENS,
        timeout: int = AI_TIMEOUT,
    ):
        self.api_key = api_key if api_key is not None else ANTHROPIC_API_KEY
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: Optional[Anthropic] = None

    @property
    def client(self) -> Anthropic:
        if not self.api_key:
            raise ServiceError("Anthropic API key is not configured")
        if self._client is None:
            self._client = Anthropic(api_key=self.api_key)
        return self._client

    def call_json(self, prompt: str, system: Optional[str] = None) -> Any:
        """
        Send one prompt and return the parsed JSON answer.

        Raises:
            ServiceError: missing key, API failure, empty or non-JSON answer
        """
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "timeout": float(self.timeout),
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            logger.info("Calling Claude API (model=%s, max_tokens=%s)", self.model, self.max_tokens)
            message = self.client.messages.create(**kwargs)
        except ServiceError:
            raise
        except Exception as e:
            logger.error("Claude API call failed: %s", e, exc_info=True)
            raise ServiceError("AI service request failed") from e

        response_text = "".join(
            getattr(block, "text", "") for block in (message.content or [])
        )
        if not response_text.strip():
            raise ServiceError("Empty response from AI service")

        try:
            return parse_json_response(response_text)
        except ValueError as e:
            logger.warning("Unparsable Claude response: %.200s", response_text)
            raise ServiceError("Failed to parse AI response") from e
