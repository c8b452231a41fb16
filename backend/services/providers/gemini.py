"""
Gemini adapter - Google Generative Language API over httpx.

Roles are remapped (assistant -> model) and the system message moves to
systemInstruction. Streaming uses streamGenerateContent with alt=sse so every
event is a complete JSON candidate.
"""

from typing import Any, Optional, Sequence

from .base import BufferedReply, ChatParams, Message, ProviderAdapter, ProviderReply


def _candidate_text(data: Any) -> Optional[str]:
    """Extract candidates[0].content.parts[0].text, tolerating missing levels."""
    try:
        return data["candidates"][0]["content"]["parts"][0].get("text")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


class GeminiAdapter(ProviderAdapter):
    name = "Gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    async def send(
        self,
        model: str,
        messages: Sequence[Message],
        params: ChatParams,
        stream: bool,
    ) -> ProviderReply:
        system = next((m for m in messages if m.role == "system"), None)
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != "system"
        ]

        payload = {
            "contents": contents,
            "generationConfig": {
                "temperature": params.temperature,
                "maxOutputTokens": params.max_tokens,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system.content}]}

        headers = {"x-goog-api-key": self.api_key}

        if stream:
            url = f"{self.base_url}/{model}:streamGenerateContent?alt=sse"
            return await self._stream_sse(url, headers, payload, _candidate_text)

        url = f"{self.base_url}/{model}:generateContent"
        data = await self._post_json(url, headers, payload)
        return BufferedReply(_candidate_text(data) or "")
