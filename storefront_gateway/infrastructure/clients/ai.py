"""OpenAI HTTP client for chat completions and embeddings"""

from typing import Any, Dict, List, Optional

import httpx

from storefront_gateway.config import settings
from storefront_gateway.domain.exceptions import AIServiceError, ConfigurationError
from storefront_gateway.infrastructure.observability.metrics import upstream_latency_histogram


class OpenAIClient:
    """Client for the OpenAI REST API"""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: float | None = None):
        self.api_key = api_key or settings.openai_api_key
        self.base_url = base_url or settings.openai_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload to OpenAI.

        Raises:
            ConfigurationError: When no API key is configured
            AIServiceError: On timeout, HTTP errors, or invalid response
        """
        if not self.configured:
            raise ConfigurationError("OpenAI API key is not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="openai").time():
                    response = await client.post(
                        f"{self.base_url}{path}",
                        json=payload,
                        headers={
                            "Authorization": f"Bearer {self.api_key}",
                            "Content-Type": "application/json",
                        },
                    )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise AIServiceError(f"OpenAI API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AIServiceError(f"OpenAI API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise AIServiceError(f"OpenAI API unreachable: {e}") from e
            except ValueError as e:
                raise AIServiceError(f"Invalid response from OpenAI: {e}") from e

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 250,
    ) -> Optional[str]:
        """Return the first choice's message content, or None if empty"""
        data = await self._post(
            "/chat/completions",
            {
                "model": model or settings.openai_chat_model,
                "messages": messages,
                "max_tokens": max_tokens,
            },
        )
        try:
            choices = data.get("choices") or []
            if not choices:
                return None
            return choices[0]["message"].get("content")
        except (KeyError, TypeError, AttributeError) as e:
            raise AIServiceError(f"Invalid completion from OpenAI: {e}") from e

    async def describe_image(self, image_url: str, prompt: str, max_tokens: int = 300) -> Optional[str]:
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]
        return await self.chat(messages, model=settings.openai_vision_model, max_tokens=max_tokens)

    async def embed(self, text: str, model: str | None = None) -> List[float]:
        data = await self._post(
            "/embeddings",
            {"model": model or settings.openai_embedding_model, "input": text},
        )
        try:
            return data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError(f"Invalid embedding from OpenAI: {e}") from e
