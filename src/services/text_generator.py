# src/services/text_generator.py

"""Text-generation collaborator used for intent, summaries and extraction."""

import logging
from typing import Protocol

from openai import OpenAI, OpenAIError

from src.config.settings import Settings
from src.scrapers.errors import CollaboratorError

logger = logging.getLogger("merch_search.text_generator")


class TextGenerator(Protocol):
    """Anything that turns a prompt into text, raising CollaboratorError."""

    def request(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        ...


class OpenAITextGenerator:
    """Chat-completions backed collaborator with a hard request timeout."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or Settings.OPENAI_API_KEY
        self.model = model or Settings.OPENAI_MODEL
        self.timeout = timeout or Settings.OPENAI_TIMEOUT
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        """Create the client on first use so a missing key fails per call."""
        if self._client is None:
            if not self.api_key:
                msg = "OPENAI_API_KEY is not configured"
                raise CollaboratorError(msg)
            self._client = OpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=1,
            )
        return self._client

    def request(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send one chat completion and return its text content."""
        client = self._get_client()
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "developer", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                max_completion_tokens=max_tokens,
            )
        except OpenAIError as exc:
            logger.error(
                "Text generation request failed: %s", exc, exc_info=True
            )
            msg = f"Text generation failed: {exc}"
            raise CollaboratorError(msg) from exc

        content = (
            response.choices[0].message.content
            if response.choices
            else None
        )
        if not content:
            msg = "Empty response from text generation model"
            raise CollaboratorError(msg)

        if response.usage is not None:
            logger.debug(
                "Token usage: prompt=%d completion=%d",
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return content
