from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from glossator.core.config import ProviderConfig
from glossator.core.errors import UpstreamMalformedError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


class SuggestionProvider(Protocol):
    def complete(self, system_prompt: str, user_prompt: str, timeout: float | None = None) -> str:
        """Return the provider's raw text reply.

        Raises UpstreamUnavailableError when the call fails or times out and
        UpstreamMalformedError when the reply carries no text.
        """
        ...


class ChatCompletionsClient:
    """Client for OpenAI-compatible ``/chat/completions`` endpoints."""

    def __init__(self, config: ProviderConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.transport = transport
        self.completions_url = f"{config.base_url}/chat/completions"

    def complete(self, system_prompt: str, user_prompt: str, timeout: float | None = None) -> str:
        timeout_seconds = timeout if timeout is not None and timeout > 0 else self.config.timeout_seconds
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.temperature,
            "stream": False,
        }
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        try:
            with httpx.Client(timeout=timeout_seconds, transport=self.transport) as client:
                response = client.post(self.completions_url, json=payload, headers=headers)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            logger.error("Suggestion provider timed out after %.1fs: %s", timeout_seconds, exc)
            raise UpstreamUnavailableError(
                f"Suggestion provider timed out after {timeout_seconds:g} seconds"
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.error("Suggestion provider returned HTTP %s", exc.response.status_code)
            raise UpstreamUnavailableError(
                f"Suggestion provider returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Suggestion provider request failed: %s", exc)
            raise UpstreamUnavailableError(f"Suggestion provider request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamMalformedError("Suggestion provider returned a non-JSON body") from exc

        text = extract_completion_text(body)
        if not text.strip():
            raise UpstreamMalformedError("Suggestion provider returned no text")

        logger.info("Suggestion provider replied with %d characters", len(text))
        return text


def extract_completion_text(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    # Legacy completions shape.
    if isinstance(first.get("text"), str):
        return first["text"]
    return ""
