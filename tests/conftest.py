"""Shared fixtures for all tests."""

import base64

import pytest

from openai_brain.api.schemas import (
    BrainPromptContext,
    BrainSettings,
    FileAttachment,
    TextBrainPrompt,
)

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture
def settings() -> BrainSettings:
    return BrainSettings(
        api_key="sk-test-0123456789",
        text_model="GPT 4o",
        image_generation_model="Dall-E 2",
        image_generation_count=2,
        image_generation_size="512x512",
    )


@pytest.fixture
def context(settings) -> BrainPromptContext:
    return BrainPromptContext(settings=settings, sender_id="user-42")


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "pixel.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def image_attachment(png_path) -> FileAttachment:
    return FileAttachment(path=str(png_path), mime_type="image/png")


@pytest.fixture
def conversation() -> list[TextBrainPrompt]:
    """Five 1000-character turns, alternating user and brain."""
    roles = ["user", "brain", "user", "brain", "user"]
    return [
        TextBrainPrompt(role=role, message=str(i) * 1000)
        for i, role in enumerate(roles)
    ]
