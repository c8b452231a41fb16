"""
Image generation client - second step of composite requests.

Calls the Bytez model endpoint with {"text": ...} and normalizes the output to
something an <img> tag can use: an http(s) URL passes through, raw base64 is
padded and wrapped as a PNG data URL.
"""

import logging
import time
from typing import Any, Optional

import httpx

from config import runtime_config
from errors import ConfigurationError, UpstreamError
from logging_config import log_image

from .providers.bytez import model_url

logger = logging.getLogger(__name__)

IMAGE_CREDENTIAL_ENV = "BYTEZ_API_KEY"


def to_image_url(output: Any) -> str:
    """Normalize an image API output value into a displayable URL.

    Raises:
        UpstreamError: Output is neither a string nor a list starting with one
    """
    if isinstance(output, list):
        output = output[0] if output else None

    if not isinstance(output, str):
        raise UpstreamError(
            "Unsupported image output format",
            service="bytez",
            error_type="image",
        )

    if output.startswith(("http://", "https://")):
        return output

    padded = output + "=" * ((4 - len(output) % 4) % 4)
    return f"data:image/png;base64,{padded}"


class ImageClient:
    """Thin httpx client for the text-to-image endpoint."""

    def __init__(
        self,
        base_url: str,
        default_model: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ImageClient":
        return cls(
            runtime_config.image_api_url,
            runtime_config.image_model,
            timeout=runtime_config.image_timeout,
            transport=transport,
        )

    async def generate(self, text: str, model_id: Optional[str] = None) -> str:
        """Generate an image for text and return its URL or data URL.

        Args:
            text: Prompt for the image model (the composite step's text output)
            model_id: Image model override, else the configured default

        Raises:
            ConfigurationError: BYTEZ_API_KEY is not set
            UpstreamError: Non-OK response, error payload or unusable output
        """
        api_key = runtime_config.get_credential(IMAGE_CREDENTIAL_ENV)
        if not api_key:
            raise ConfigurationError(
                f"{IMAGE_CREDENTIAL_ENV} not configured",
                details="Set it in the server environment to enable image generation",
                env_var=IMAGE_CREDENTIAL_ENV,
            )

        model = model_id or self.default_model
        log_image(logger, "start", model=model)
        start = time.perf_counter()

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    model_url(self.base_url, model),
                    headers={"Authorization": api_key},
                    json={"text": text},
                )
            except httpx.HTTPError as e:
                raise UpstreamError(
                    f"Bytez API error: request failed - {e}",
                    service="bytez",
                    error_type="network",
                ) from e

        if not response.is_success:
            raise UpstreamError(
                f"Bytez API error: {response.status_code} - {response.text}",
                service="bytez",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Bytez API error: invalid JSON body",
                service="bytez",
                upstream_status=response.status_code,
                error_type="payload",
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                f"Bytez API error: unexpected response body ({type(data).__name__})",
                service="bytez",
                error_type="payload",
            )

        if data.get("error"):
            raise UpstreamError(
                f"Bytez error: {data['error']}",
                service="bytez",
                error_type="image",
            )

        url = to_image_url(data.get("output"))
        log_image(logger, "end", model=model, duration_ms=int((time.perf_counter() - start) * 1000))
        return url
