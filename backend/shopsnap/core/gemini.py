import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from shopsnap.core.encoding import b64encode_chunked
from shopsnap.core.errors import EmptyModelResponse, ServiceMisconfigured, UpstreamServiceError

logger = logging.getLogger(__name__)

# Service endpoint for Gemini API (v1beta)
API_BASE = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_MODEL = "gemini-2.5-flash"

# Upstream bodies relayed to clients / logs are cut to this many chars
MAX_ERROR_BODY = 2000


@dataclass(frozen=True)
class UploadedImage:
    data: bytes
    mime_type: str


def _redact_key(s: str) -> str:
    """
    Redact 'key=...' in URLs or text so we never leak API keys in logs/responses.
    """
    if not s:
        return s
    # Replace key=XXXXX (until & or whitespace)
    return re.sub(r"(key=)([^&\s]+)", r"\1REDACTED", s)


def build_generate_payload(image: UploadedImage, prompt: str, use_search: bool = False) -> Dict[str, Any]:
    """
    One user turn with two ordered parts: the inline image, then the prompt.
    With use_search the Google Search grounding tool is enabled.
    """
    payload: Dict[str, Any] = {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": image.mime_type,
                            "data": b64encode_chunked(image.data),
                        }
                    },
                    {"text": prompt},
                ],
            }
        ],
    }
    if use_search:
        payload["tools"] = [{"google_search": {}}]
    return payload


def extract_text(data: Any) -> str:
    """
    Text of the first candidate's first part, trimmed.
    Raises EmptyModelResponse when the envelope has none.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise EmptyModelResponse()

    if not isinstance(text, str) or not text.strip():
        raise EmptyModelResponse()
    return text.strip()


class GeminiClient:
    """
    Thin async client for models/{model}:generateContent.

    No retries: every failure is terminal for the request and the caller of
    the API decides whether to try again.
    """

    def __init__(
        self,
        api_key: str,
        *,
        api_base: str = API_BASE,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def endpoint(self, model: str) -> str:
        name = model if model.startswith("models/") else f"models/{model}"
        return f"{self.api_base}/{name}:generateContent"

    async def generate(
        self,
        image: UploadedImage,
        prompt: str,
        *,
        model: str = DEFAULT_MODEL,
        use_search: bool = False,
    ) -> str:
        """
        Sends the image + prompt and returns the model's answer text.
        """
        if not self.api_key:
            raise ServiceMisconfigured("GEMINI_API_KEY is not set")

        url = self.endpoint(model)
        payload = build_generate_payload(image, prompt, use_search=use_search)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                r = await client.post(
                    url,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                message = _redact_key(f"Gemini API error: {type(e).__name__}: {e}")
                logger.error(message)
                raise UpstreamServiceError(message) from e

            if r.status_code >= 400:
                safe_body = _redact_key(r.text)[:MAX_ERROR_BODY]
                logger.error(
                    "Gemini request failed: %s %s\n%s",
                    r.status_code,
                    _redact_key(str(r.request.url)),
                    safe_body,
                )
                raise UpstreamServiceError(
                    f"Gemini API error: {safe_body}",
                    upstream_status=r.status_code,
                    body=safe_body,
                )

            try:
                data = r.json()
            except ValueError:
                logger.warning("Gemini returned a non-JSON envelope: %s", _redact_key(r.text)[:MAX_ERROR_BODY])
                raise EmptyModelResponse()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Gemini response:\n%s", json.dumps(data, indent=2)[:MAX_ERROR_BODY])

        return extract_text(data)
