"""FastAPI endpoints for the brain dev server.

GET  /                      - liveness text
POST /api/textPrompt        - chat completion over a conversation
POST /api/transcribeAudio   - transcribe a local audio file
POST /api/imageGeneration   - generate images from the latest prompt
GET  /stream                - chunked streaming smoke test
GET  /health                - service health
"""

import os
import time

import httpx
import openai
import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from openai_brain.api.schemas import (
    BrainPromptResponse,
    ImageGenerationRequest,
    LocalAudioPrompt,
    TextPromptRequest,
    TranscribeAudioRequest,
)
from openai_brain.core.response_adapter import ProviderResponseError

logger = structlog.get_logger(__name__)

router = APIRouter()

STREAM_TICKS = 10

_PROVIDER_ERRORS = (openai.OpenAIError, httpx.HTTPError, ProviderResponseError)


def _envelope(response: BrainPromptResponse) -> Response:
    # Bytes attachments are base64 encoded by the JSON serializer.
    return Response(
        content=response.model_dump_json(by_alias=True),
        media_type="application/json",
    )


def _provider_failure(operation: str, error: Exception) -> HTTPException:
    logger.error(f"{operation}.provider_failed", error=str(error),
                 error_type=type(error).__name__)
    return HTTPException(status_code=502, detail="Provider request failed. Please try again.")


@router.get("/", response_class=PlainTextResponse)
@router.head("/", response_class=PlainTextResponse)
def root():
    return "Brain dev server is running"


@router.post("/api/textPrompt")
def text_prompt(request: TextPromptRequest, req: Request):
    """Send the conversation to the brain and return its envelope."""
    logger.info("text_prompt.request", turns=len(request.prompts),
                sender=request.context.sender_id)
    brain = req.app.state.brain
    try:
        result = brain.send_text_prompt(request.prompts, request.context)
    except _PROVIDER_ERRORS as e:
        raise _provider_failure("text_prompt", e)
    return _envelope(result)


@router.post("/api/transcribeAudio")
def transcribe_audio(request: TranscribeAudioRequest, req: Request):
    """Transcribe the audio file at audioPath."""
    logger.info("transcribe_audio.request", language=request.language)
    brain = req.app.state.brain
    prompt = LocalAudioPrompt(audio_file_path=request.audio_path, language=request.language)
    try:
        result = brain.transcribe_audio(prompt, request.context)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Audio file not found.")
    except _PROVIDER_ERRORS as e:
        raise _provider_failure("transcribe_audio", e)
    return _envelope(result)


@router.post("/api/imageGeneration")
def image_generation(request: ImageGenerationRequest, req: Request):
    """Generate images for the last prompt in the list."""
    logger.info("image_generation.request", prompts=len(request.prompts),
                response_type=request.prompts[-1].expected_response_type.value)
    brain = req.app.state.brain
    try:
        result = brain.generate_image(request.prompts, request.context)
    except _PROVIDER_ERRORS as e:
        raise _provider_failure("image_generation", e)
    return _envelope(result)


@router.get("/stream")
def stream():
    """Chunked response that emits a counter once per STREAM_INTERVAL seconds."""
    interval = float(os.environ.get("STREAM_INTERVAL", "1"))

    def ticks():
        yield "Thinking..."
        for i in range(1, STREAM_TICKS + 1):
            yield f" ;i={i}"
            if i < STREAM_TICKS:
                time.sleep(interval)

    # text/plain is buffered by some browsers; html streams.
    return StreamingResponse(ticks(), media_type="text/html; charset=utf-8")


@router.get("/health")
def health():
    return {"status": "ok", "service": "openai-brain"}
