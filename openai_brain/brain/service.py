"""Brain entry point: text prompts, audio transcription, image generation.

Each operation validates settings first and returns the validation envelope
untouched when it fails. Otherwise exactly one OpenAI request is issued.
Provider and transport errors are not caught here.
"""

from typing import Callable

import structlog

from openai_brain.api.schemas import (
    BrainPromptContext,
    BrainPromptResponse,
    ImageGenerationBrainPrompt,
    LocalAudioPrompt,
    TextBrainPrompt,
    ValidationResult,
)
from openai_brain.core.client_cache import ClientCache
from openai_brain.core.content import compose_messages
from openai_brain.core.history import DEFAULT_MAX_CHARACTERS, window_history
from openai_brain.core.model_selector import (
    resolve_generation_params,
    select_image_model,
    select_text_model,
)
from openai_brain.core.response_adapter import (
    adapt_chat_completion,
    adapt_image_generation,
    adapt_transcription,
    fetch_image_bytes,
)
from openai_brain.core.settings_validator import validate_settings

logger = structlog.get_logger(__name__)

DEFAULT_AUDIO_LANGUAGE = "en"


def _rejected(validation_result: ValidationResult) -> BrainPromptResponse:
    return BrainPromptResponse(
        result=validation_result.get_message(),
        validation_result=validation_result,
    )


def _configuration_error(validation_result: ValidationResult, message: str) -> BrainPromptResponse:
    validation_result.add_error(message)
    logger.warning("brain.configuration_error", error=message)
    return _rejected(validation_result)


class BrainService:
    """OpenAI-backed brain. Holds no state besides the cached client."""

    def __init__(
        self,
        client_cache: ClientCache | None = None,
        image_fetcher: Callable[[list[str]], list[bytes]] | None = None,
    ):
        self.client_cache = client_cache or ClientCache()
        self.image_fetcher = image_fetcher or fetch_image_bytes

    def send_text_prompt(
        self,
        prompts: list[TextBrainPrompt],
        context: BrainPromptContext,
    ) -> BrainPromptResponse:
        """Answer the conversation with a chat completion.

        Args:
            prompts: Conversation turns, oldest first; the last one is the question.
            context: Host context carrying provider settings.

        Returns:
            Envelope with the stripped completion text as result.
        """
        settings = context.settings
        validation_result = validate_settings(settings)
        if not validation_result.success:
            return _rejected(validation_result)
        if not prompts:
            return _configuration_error(validation_result, "No prompt was provided.")

        max_characters = settings.max_characters_history_size or DEFAULT_MAX_CHARACTERS
        turns = window_history(prompts, max_characters)
        has_image = any(turn.has_image for turn in turns)

        choice = select_text_model(settings.text_model, has_image)
        if not choice.resolved:
            return _configuration_error(
                validation_result, f"Unknown text model '{settings.text_model}'.")

        messages = compose_messages(turns, settings.image_detail)

        logger.info("brain.text.request", turns=len(prompts), windowed=len(turns),
                    model=choice.model_id, images=has_image)

        response = self.client_cache.get_client(settings).chat.completions.create(
            model=choice.model_id,
            messages=messages,
            max_tokens=max_characters,
        )
        return adapt_chat_completion(response, validation_result)

    def transcribe_audio(
        self,
        prompt: LocalAudioPrompt,
        context: BrainPromptContext,
    ) -> BrainPromptResponse:
        """Transcribe a local audio file.

        Language falls back from the prompt to the configured default, then "en".
        """
        settings = context.settings
        validation_result = validate_settings(settings)
        if not validation_result.success:
            return _rejected(validation_result)

        language = (
            prompt.language
            or settings.audio_transcriber_default_language
            or DEFAULT_AUDIO_LANGUAGE
        )

        logger.info("brain.audio.request", model=settings.audio_transcriber_model,
                    language=language)

        client = self.client_cache.get_client(settings)
        with open(prompt.audio_file_path, "rb") as audio_file:
            response = client.audio.transcriptions.create(
                file=audio_file,
                language=language,
                model=settings.audio_transcriber_model,
            )
        return adapt_transcription(response, validation_result)

    def generate_image(
        self,
        prompts: list[ImageGenerationBrainPrompt],
        context: BrainPromptContext,
    ) -> BrainPromptResponse:
        """Generate images for the latest prompt.

        The images endpoint takes a single prompt, so earlier prompts are ignored.
        """
        settings = context.settings
        validation_result = validate_settings(settings)
        if not validation_result.success:
            return _rejected(validation_result)
        if not prompts:
            return _configuration_error(validation_result, "No prompt was provided.")

        prompt = prompts[-1]
        choice = select_image_model(settings.image_generation_model)
        if not choice.resolved:
            return _configuration_error(
                validation_result,
                f"Unknown image generation model '{settings.image_generation_model}'.")

        n, size = resolve_generation_params(
            choice, settings.image_generation_count, settings.image_generation_size)
        response_type = prompt.expected_response_type

        params = {
            "model": choice.model_id,
            "prompt": prompt.message.strip(),
            "n": n,
            "size": size,
            "response_format": response_type.provider_format,
        }
        if context.sender_id:
            params["user"] = context.sender_id

        logger.info("brain.image.request", model=choice.model_id, n=n, size=size,
                    response_type=response_type.value)

        response = self.client_cache.get_client(settings).images.generate(**params)
        return adapt_image_generation(response, response_type, validation_result,
                                      fetch=self.image_fetcher)
