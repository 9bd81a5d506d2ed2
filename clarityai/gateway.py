from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import Settings
from .errors import ConfigurationError, TransportError


logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown chat role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionRequest:
    messages: Tuple[ChatMessage, ...]
    temperature: float = 0.7
    max_tokens: int = 2000
    model: str = "deepseek-chat"
    timeout_seconds: Optional[float] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError("temperature must be within [0, 1].")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive.")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }


class ChatCompletionClient:
    """Async client for an OpenAI-style chat-completion endpoint (DeepSeek by default)."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(transport=transport, timeout=settings.timeout_seconds)

    @property
    def model(self) -> str:
        return self._settings.model

    async def close(self) -> None:
        await self._http.aclose()

    async def complete(self, request: CompletionRequest) -> str:
        """Send ``request`` and return the first choice's text.

        Transport failures are retried ``max_retries`` times with a linear
        backoff of ``backoff_seconds * attempt``; the last failure is raised
        as-is once attempts run out.
        """
        if not self._settings.has_credentials:
            logger.error("DEEPSEEK_API_KEY or DEEPSEEK_API_URL is not set in environment variables.")
            raise ConfigurationError("Provider API key or URL not configured.")

        total_attempts = max(1, self._settings.max_retries + 1)
        attempt = 1
        while True:
            logger.info(f"Attempt {attempt} to call provider ({len(request.messages)} messages)")
            try:
                return await self._post(request, attempt)
            except TransportError as exc:
                logger.error(f"Provider error (attempt {attempt}): {exc}")
                if attempt >= total_attempts:
                    raise
            await asyncio.sleep(self._settings.backoff_seconds * attempt)
            attempt += 1

    async def _post(self, request: CompletionRequest, attempt: int) -> str:
        timeout = request.timeout_seconds or self._settings.timeout_seconds
        headers = {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Content-Type": "application/json",
        }
        # httpx applies ``timeout`` per phase; wait_for bounds the whole attempt.
        try:
            response = await asyncio.wait_for(
                self._http.post(
                    self._settings.api_url,
                    json=request.to_payload(),
                    headers=headers,
                    timeout=timeout,
                ),
                timeout,
            )
            response.raise_for_status()
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Provider did not answer within {timeout}s", attempt=attempt) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Provider returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
                attempt=attempt,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Provider request failed: {exc!r}", attempt=attempt) from exc

        return self._extract_content(response, attempt)

    @staticmethod
    def _extract_content(response: httpx.Response, attempt: int) -> str:
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise TransportError("Malformed provider response body", attempt=attempt) from exc
        return content or ""


def build_request(
    messages: List[ChatMessage],
    model: str,
    temperature: float = 0.7,
    max_tokens: int = 2000,
    timeout_seconds: Optional[float] = None,
) -> CompletionRequest:
    return CompletionRequest(
        messages=tuple(messages),
        temperature=temperature,
        max_tokens=max_tokens,
        model=model,
        timeout_seconds=timeout_seconds,
    )
