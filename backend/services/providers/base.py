"""
Provider adapter contract and shared HTTP plumbing.

Every upstream LLM API is wrapped in a ProviderAdapter whose send() returns a
tagged reply:

    BufferedReply(text)      - complete response text
    StreamedReply(chunks)    - async iterator of uniform SSE bytes

Streamed chunks always use the OpenAI delta shape so the browser only has to
understand one format:

    data: {"choices": [{"delta": {"content": "..."}}]}\\n\\n
    ...
    data: [DONE]\\n\\n

Upstream failures raise UpstreamError with the message
"<Name> API error: <status> - <body>".
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, Union

import httpx

from errors import UpstreamError

logger = logging.getLogger(__name__)

VALID_ROLES = ("system", "user", "assistant")

SSE_DONE = b"data: [DONE]\n\n"


@dataclass(frozen=True)
class Message:
    """One conversation turn. Immutable; rewrite by building a new list."""

    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatParams:
    """Generation options passed through unchanged to the provider."""

    temperature: float = 0.7
    max_tokens: int = 4096


@dataclass(frozen=True)
class BufferedReply:
    """Complete (non-streaming) provider reply."""

    text: Any  # str from well-behaved adapters; validated by the orchestrator


@dataclass(frozen=True)
class StreamedReply:
    """Incremental provider reply, already translated to uniform SSE bytes."""

    chunks: AsyncIterator[bytes]


ProviderReply = Union[BufferedReply, StreamedReply]


def sse_delta(text: str) -> bytes:
    """Encode one text delta as an OpenAI-style SSE event."""
    payload = {"choices": [{"delta": {"content": text}}]}
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")


def messages_to_dicts(messages: Sequence[Message]) -> List[Dict[str, str]]:
    return [m.to_dict() for m in messages]


class ProviderAdapter(ABC):
    """Uniform send() capability implemented once per upstream API."""

    name: str = "Provider"
    default_base_url: str = ""

    def __init__(
        self,
        api_key: str,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Upstream credential
            name: Display name used in error messages
            base_url: Override for the upstream base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.api_key = api_key
        if name:
            self.name = name
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @abstractmethod
    async def send(
        self,
        model: str,
        messages: Sequence[Message],
        params: ChatParams,
        stream: bool,
    ) -> ProviderReply:
        """Send a conversation upstream and return a buffered or streamed reply."""

    # ------------------------------------------------------------------
    # Error helpers
    # ------------------------------------------------------------------

    def _api_error(self, status: int, body: str) -> UpstreamError:
        return UpstreamError(
            f"{self.name} API error: {status} - {body}",
            service=self.name.lower(),
            upstream_status=status,
        )

    def _require_object(self, data: Any) -> Dict[str, Any]:
        """Reject JSON bodies that are not objects (lists, strings, null)."""
        if not isinstance(data, dict):
            raise UpstreamError(
                f"{self.name} API error: unexpected response body ({type(data).__name__})",
                service=self.name.lower(),
                error_type="payload",
            )
        return data

    def _network_error(self, err: Exception) -> UpstreamError:
        return UpstreamError(
            f"{self.name} API error: request failed - {err}",
            service=self.name.lower(),
            error_type="network",
        )

    # ------------------------------------------------------------------
    # httpx plumbing shared by the REST adapters
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _post_json(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Any:
        """POST and decode JSON, raising UpstreamError on non-OK or transport failure."""
        async with self._client() as client:
            try:
                response = await client.post(url, headers=headers, json=payload)
            except httpx.HTTPError as e:
                raise self._network_error(e) from e

        if not response.is_success:
            raise self._api_error(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{self.name} API error: {response.status_code} - invalid JSON body",
                service=self.name.lower(),
                upstream_status=response.status_code,
                error_type="payload",
            ) from e

    async def _stream_sse(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        extract_text: Callable[[Any], Optional[str]],
    ) -> StreamedReply:
        """Open an upstream SSE stream and relay it as uniform delta events.

        The status is checked before returning, so a non-OK upstream raises
        here rather than mid-stream. The HTTP response and client are closed
        when the returned iterator finishes or is closed early.
        """
        client = self._client()
        try:
            request = client.build_request("POST", url, headers=headers, json=payload)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise self._network_error(e) from e

        if not response.is_success:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            await client.aclose()
            raise self._api_error(response.status_code, body)

        async def relay() -> AsyncIterator[bytes]:
            try:
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[5:].strip()
                    if not data or data == "[DONE]":
                        continue
                    try:
                        parsed = json.loads(data)
                    except json.JSONDecodeError:
                        logger.debug(f"{self.name}: skipping unparseable stream line")
                        continue
                    text = extract_text(parsed)
                    if text:
                        yield sse_delta(text)
                yield SSE_DONE
            finally:
                await response.aclose()
                await client.aclose()

        return StreamedReply(relay())
