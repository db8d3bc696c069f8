"""Gemini model client - Layer 2. Remote model inference.

Sends one prompt to the generateContent endpoint and returns the raw
text of the first candidate.
"""

from __future__ import annotations

from typing import Any

import httpx

from .errors import AuthError, RateLimitedError, UpstreamError
from .logging import get_logger

DEFAULT_MODEL = "gemini-1.5-flash-latest"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GENERATE_TIMEOUT = 120

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

logger = get_logger(__name__)


class GeminiClient:
    """Client for the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = GENERATE_TIMEOUT,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout)

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _payload(self, prompt: str, temperature: float, max_tokens: int) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "topK": 1,
                "topP": 1,
                "maxOutputTokens": max_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": SAFETY_THRESHOLD}
                for category in SAFETY_CATEGORIES
            ],
        }

    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Generate text from prompt. Returns raw text response."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        logger.debug("POST %s (%d prompt chars)", url, len(prompt))
        try:
            resp = self._client.post(
                url,
                params={"key": self.api_key},
                json=self._payload(prompt, temperature, max_tokens),
            )
        except httpx.TimeoutException:
            raise UpstreamError("Gemini request timed out")
        except httpx.HTTPError as e:
            raise UpstreamError(f"Cannot reach Gemini API: {e}")

        if resp.status_code != 200:
            _raise_for_status(resp)

        try:
            data = resp.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise UpstreamError("Invalid response format from Gemini API")


def _raise_for_status(resp: httpx.Response) -> None:
    status = resp.status_code
    if status == 400:
        raise AuthError(
            "Invalid API key or request format. Please check your Gemini API key."
        )
    if status == 403:
        raise AuthError("API key does not have permission to access Gemini API.")
    if status == 429:
        raise RateLimitedError("Rate limit exceeded. Please try again later.")

    message = "Unknown error"
    try:
        error = resp.json().get("error") or {}
        message = error.get("message") or message
    except (ValueError, AttributeError):
        pass
    logger.debug("Gemini error body: %s", resp.text[:500])
    raise UpstreamError(f"Gemini API error ({status}): {message}")
