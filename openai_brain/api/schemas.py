"""Pydantic models for the host brain protocol.

Host payloads are camelCase JSON; attributes are snake_case. Every model
accepts either spelling and serializes back by alias.
"""

import base64
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class _HostModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ResponseType(str, Enum):
    """Encoding the caller wants generated images returned in."""
    URL = "url"
    BASE64 = "base64"
    BINARY = "binary"

    @property
    def provider_format(self) -> str:
        """OpenAI `response_format` to request. Binary is fetched from the URL."""
        return "b64_json" if self is ResponseType.BASE64 else "url"


class ImageDetail(str, Enum):
    """Vision fidelity requested per image."""
    LOW = "low"
    HIGH = "high"


class FileAttachment(_HostModel):
    """A file handed over by the host for the duration of one call."""
    model_config = ConfigDict(frozen=True)

    path: str | None = None
    data: bytes | None = None
    mime_type: str

    @field_validator("data", mode="before")
    @classmethod
    def _decode_base64(cls, value):
        # Bytes travel over JSON as base64, same as ResponseFile output.
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        return value

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class TextBrainPrompt(_HostModel):
    """Single conversation turn."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "brain", "assistant", "system"]
    message: str
    attachments: tuple[FileAttachment, ...] = ()

    @field_validator("attachments", mode="before")
    @classmethod
    def _none_means_no_attachments(cls, value):
        return () if value is None else value

    @property
    def has_image(self) -> bool:
        return any(a.is_image for a in self.attachments)


class ImageGenerationBrainPrompt(_HostModel):
    message: str
    expected_response_type: ResponseType = ResponseType.URL


class LocalAudioPrompt(_HostModel):
    audio_file_path: str
    language: str | None = None


class BrainSettings(_HostModel):
    """Per-call provider settings. Older hosts may omit any optional field."""
    api_key: str = ""
    text_model: str = "GPT 4o-mini"
    audio_transcriber_model: str = "whisper-1"
    audio_transcriber_default_language: str | None = None
    image_generation_model: str = "Dall-E 2"
    image_generation_count: int = Field(default=1, ge=1)
    image_generation_size: Literal["256x256", "512x512", "1024x1024"] = "1024x1024"
    image_detail: ImageDetail = ImageDetail.HIGH
    max_characters_history_size: int = Field(default=3000, ge=1)


class BrainPromptContext(_HostModel):
    settings: BrainSettings | None = None
    sender_id: str | None = None


class ValidationResult(_HostModel):
    """Outcome of settings validation. Fails as soon as one error is added."""
    errors: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def get_message(self) -> str:
        return "\n\n".join(self.errors)


class ResponseFile(_HostModel):
    model_config = ConfigDict(ser_json_bytes="base64")

    data: bytes | str
    file_type: str = "image"
    mime_type: str = "image/png"


class BrainPromptResponse(_HostModel):
    """Uniform envelope returned by every brain operation."""
    result: str
    attachments: list[ResponseFile] = Field(default_factory=list)
    validation_result: ValidationResult


# Dev server request bodies

class TextPromptRequest(_HostModel):
    prompts: list[TextBrainPrompt] = Field(..., min_length=1)
    context: BrainPromptContext


class ImageGenerationRequest(_HostModel):
    prompts: list[ImageGenerationBrainPrompt] = Field(..., min_length=1)
    context: BrainPromptContext


class TranscribeAudioRequest(_HostModel):
    audio_path: str = Field(..., min_length=1)
    language: str | None = None
    context: BrainPromptContext
