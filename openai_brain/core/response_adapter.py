"""Provider responses to host envelopes.

Chat and transcription responses become text results. Image generation
results become `image/png` attachments, passed through as URL or base64, or
fetched as raw bytes when the caller asked for binary.

Binary fetches for one call run on a module-level thread pool and are
reassembled in provider order. Any failure fails the whole call.
"""

import atexit
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import httpx
import structlog

from openai_brain.api.schemas import (
    BrainPromptResponse,
    ResponseFile,
    ResponseType,
    ValidationResult,
)

logger = structlog.get_logger(__name__)

IMAGE_MIME_TYPE = "image/png"  # DALL-E always returns PNG

_MAX_FETCH_WORKERS = int(os.environ.get("IMAGE_FETCH_MAX_WORKERS", "4"))
_pool = ThreadPoolExecutor(max_workers=_MAX_FETCH_WORKERS)
atexit.register(_pool.shutdown, wait=False)


class ProviderResponseError(Exception):
    """Provider answered, but without the content we asked for."""
    pass


def adapt_chat_completion(response: Any, validation_result: ValidationResult) -> BrainPromptResponse:
    """Take the first choice's message text, stripped.

    Raises:
        ProviderResponseError: If there are no choices or the content is empty.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        raise ProviderResponseError("Chat completion returned no choices")

    content = choices[0].message.content
    if content is None:
        raise ProviderResponseError("Chat completion returned no message content")

    return BrainPromptResponse(result=content.strip(), validation_result=validation_result)


def adapt_transcription(response: Any, validation_result: ValidationResult) -> BrainPromptResponse:
    """Return the transcribed text verbatim."""
    return BrainPromptResponse(result=response.text, validation_result=validation_result)


def _fetch_one(url: str) -> bytes:
    timeout = float(os.environ.get("IMAGE_FETCH_TIMEOUT", "30"))
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response.content


def fetch_image_bytes(urls: list[str]) -> list[bytes]:
    """Download every URL concurrently, preserving input order.

    Raises:
        httpx.HTTPError: On the first transport error or non-2xx response.
    """
    if not urls:
        return []
    logger.debug("image.fetch", count=len(urls))
    return list(_pool.map(_fetch_one, urls))


def adapt_image_generation(
    response: Any,
    response_type: ResponseType,
    validation_result: ValidationResult,
    fetch: Callable[[list[str]], list[bytes]] = fetch_image_bytes,
) -> BrainPromptResponse:
    """Turn an images.generate response into image attachments.

    Args:
        response: OpenAI ImagesResponse (items expose `url` / `b64_json`).
        response_type: Encoding the caller asked for.
        validation_result: Result to carry into the envelope.
        fetch: Downloader used for binary output.

    Returns:
        Envelope with an empty result and one attachment per returned image.

    Raises:
        ProviderResponseError: If no images came back or an item lacks the
            requested field.
    """
    field = "b64_json" if response_type is ResponseType.BASE64 else "url"
    if not response.data:
        raise ProviderResponseError("Image generation returned no images")

    values: list[str] = []
    for item in response.data:
        value = getattr(item, field, None)
        if not value:
            raise ProviderResponseError(f"Image generation item is missing '{field}'")
        values.append(value)

    data: list[bytes | str] = list(values)
    if response_type is ResponseType.BINARY:
        data = list(fetch(values))

    attachments = [
        ResponseFile(data=d, file_type="image", mime_type=IMAGE_MIME_TYPE)
        for d in data
    ]
    return BrainPromptResponse(result="", attachments=attachments,
                               validation_result=validation_result)
