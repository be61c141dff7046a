from typing import Any, Dict, Optional

import httpx

from gradebook.core.config.settings import get_settings


class GeminiError(RuntimeError):
    """Raised when the Gemini API cannot produce a usable answer."""


class GeminiClient:
    def __init__(self, api_key: Optional[str] = None, *, base_url: Optional[str] = None, model: Optional[str] = None) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.GEMINI_API_KEY
        if not self.api_key:
            raise GeminiError("GEMINI_API_KEY is not configured")
        self.model = model or settings.GEMINI_MODEL
        root = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.url = f"{root}/{self.model}:generateContent"
        self._client = httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT_SECONDS)

    async def generate(self, prompt: str) -> str:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            r = await self._client.post(self.url, params={"key": self.api_key}, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as http_err:
            raise GeminiError(f"Gemini returned HTTP {http_err.response.status_code}") from http_err
        except httpx.RequestError as net_err:
            raise GeminiError(f"Gemini request failed: {net_err}") from net_err
        try:
            data = r.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise GeminiError(f"Unexpected Gemini response: {r.text[:200]}") from err

    async def aclose(self) -> None:
        await self._client.aclose()
