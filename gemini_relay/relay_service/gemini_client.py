"""
Gemini generateContent client.
Validates an analysis request, forwards it upstream once, and shapes the reply.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from gemini_relay.config import RelayConfig
from gemini_relay.relay_service.errors import (
    InvalidRequest,
    PayloadTooLarge,
    MissingCredential,
    UpstreamTimeout,
    UpstreamError,
)

logger = logging.getLogger(__name__)

# 6MB of base64 text, roughly 4.5MB of binary
MAX_IMAGE_BASE64_LENGTH = 6 * 1024 * 1024
DEFAULT_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class AnalysisRequest:
    prompt: str
    image: str
    mime_type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "AnalysisRequest":
        """
        Validate a decoded JSON body.

        Checks run in order and the first failure wins: prompt, image, size.

        Raises:
            InvalidRequest: prompt or image missing or not a string.
            PayloadTooLarge: base64 image longer than MAX_IMAGE_BASE64_LENGTH.
        """
        if not isinstance(data, dict):
            data = {}

        prompt = data.get("prompt")
        image = data.get("image")
        mime_type = data.get("mimeType")

        if not prompt or not isinstance(prompt, str):
            raise InvalidRequest("Field 'prompt' is required")
        if not image or not isinstance(image, str):
            raise InvalidRequest("Field 'image' (base64) is required")
        if len(image) > MAX_IMAGE_BASE64_LENGTH:
            raise PayloadTooLarge()

        if not isinstance(mime_type, str) or not mime_type:
            mime_type = None

        return cls(prompt=prompt, image=image, mime_type=mime_type)


@dataclass(frozen=True)
class AnalysisResult:
    text: Optional[str]
    raw: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": True, "text": self.text, "raw": self.raw}


def build_payload(req: AnalysisRequest) -> Dict[str, Any]:
    """
    Build the generateContent body: the prompt as a text part followed by
    the image as an inline binary part.
    """
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": req.prompt},
                    {
                        "inlineData": {
                            "mimeType": req.mime_type or DEFAULT_MIME_TYPE,
                            "data": req.image,
                        }
                    },
                ],
            }
        ]
    }


def extract_text(body: Any) -> Optional[str]:
    """
    Return candidates[0].content.parts[0].text, or None if any link of
    that path is missing or empty.
    """
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


def generate_content_url(config: RelayConfig) -> str:
    return f"{config.gemini_api_base}/models/{config.gemini_model}:generateContent"


def analyze(config: RelayConfig, req: AnalysisRequest) -> AnalysisResult:
    """
    Forward one validated request to Gemini.

    Exactly one upstream attempt is made; nothing is retried.

    Args:
        config (RelayConfig): Process configuration (credential, model, timeout).
        req (AnalysisRequest): The validated request.

    Returns:
        AnalysisResult: Extracted text (possibly None) and the raw upstream body.

    Raises:
        MissingCredential: No API key configured. No network call is made.
        UpstreamTimeout: The upstream did not answer within config.upstream_timeout.
        UpstreamError: The upstream answered with a non-success status.
    """
    if not config.has_credential:
        raise MissingCredential()

    logger.info(
        "Calling Gemini model=%s mime_type=%s image_length=%d",
        config.gemini_model,
        req.mime_type or DEFAULT_MIME_TYPE,
        len(req.image),
    )

    try:
        body = _call_with_deadline(config, build_payload(req))
    except (FutureTimeout, requests.exceptions.Timeout):
        logger.warning("Gemini call timed out after %ss", config.upstream_timeout)
        raise UpstreamTimeout(config.upstream_timeout)

    return AnalysisResult(text=extract_text(body), raw=body)


def _post_generate_content(config: RelayConfig, payload: Dict[str, Any]) -> Any:
    resp = requests.post(
        generate_content_url(config),
        params={"key": config.gemini_api_key},
        json=payload,
        headers={"Content-Type": "application/json"},
        timeout=config.upstream_timeout,
    )

    if not resp.ok:
        logger.warning("Gemini returned %s", resp.status_code)
        raise UpstreamError(resp.status_code, resp.text)

    return resp.json()


def _call_with_deadline(config: RelayConfig, payload: Dict[str, Any]) -> Any:
    """
    Run the whole exchange (connect, headers, body, decode) under a single
    deadline of config.upstream_timeout seconds.

    The requests timeout alone only bounds each socket read. On expiry the
    worker thread is abandoned and the caller gets control back at once.

    Raises:
        concurrent.futures.TimeoutError: The deadline passed.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gemini-call")
    try:
        future = executor.submit(_post_generate_content, config, payload)
        return future.result(timeout=config.upstream_timeout)
    finally:
        executor.shutdown(wait=False)
