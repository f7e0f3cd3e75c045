"""Model label resolution for chat and image generation.

Host settings carry human labels ("GPT 4o", "Dall-E 3"). They are resolved
through closed enumerations; unknown labels resolve to an unresolved
ModelChoice, which callers report as a configuration error.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class TextModel(str, Enum):
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"


class ImageModel(str, Enum):
    DALL_E_2 = "dall-e-2"
    DALL_E_3 = "dall-e-3"


TEXT_MODEL_LABELS: dict[str, TextModel] = {
    "GPT 4o": TextModel.GPT_4O,
    "GPT 4o-mini": TextModel.GPT_4O_MINI,
}

IMAGE_MODEL_LABELS: dict[str, ImageModel] = {
    "Dall-E 2": ImageModel.DALL_E_2,
    "Dall-E 3": ImageModel.DALL_E_3,
}

# Used whenever the windowed history carries an image.
VISION_MODEL = TextModel.GPT_4O_MINI

# dall-e-3 rejects n > 1 and only produces this size here.
ADVANCED_IMAGE_MODELS = frozenset({ImageModel.DALL_E_3})
ADVANCED_IMAGE_SIZE = "1024x1024"


@dataclass(frozen=True)
class ModelChoice:
    """Resolved model plus the request overrides it imposes.

    Attributes:
        label: Label the choice was made from.
        model_id: Provider model identifier, or None when the label is unknown.
        single_output: Whether the model only accepts one output per request.
        fixed_size: Output size the model forces, if any.
    """
    label: str | None
    model_id: str | None
    single_output: bool = False
    fixed_size: str | None = None

    @property
    def resolved(self) -> bool:
        return self.model_id is not None


def select_text_model(label: str | None, has_image_attachment: bool) -> ModelChoice:
    """Pick the chat model, forcing the vision model when images are present."""
    if has_image_attachment:
        return ModelChoice(label=label, model_id=VISION_MODEL.value)

    model = TEXT_MODEL_LABELS.get(label or "")
    if model is None:
        logger.warning("model.unresolved", kind="text", label=label)
        return ModelChoice(label=label, model_id=None)

    return ModelChoice(label=label, model_id=model.value)


def select_image_model(label: str | None) -> ModelChoice:
    """Pick the image-generation model and its parameter overrides."""
    model = IMAGE_MODEL_LABELS.get(label or "")
    if model is None:
        logger.warning("model.unresolved", kind="image", label=label)
        return ModelChoice(label=label, model_id=None)

    if model in ADVANCED_IMAGE_MODELS:
        return ModelChoice(
            label=label,
            model_id=model.value,
            single_output=True,
            fixed_size=ADVANCED_IMAGE_SIZE,
        )

    return ModelChoice(label=label, model_id=model.value)


def resolve_generation_params(choice: ModelChoice, count: int, size: str) -> tuple[int, str]:
    """Apply the model's overrides to the configured count and size.

    Configured values are silently replaced, never rejected.
    """
    n = 1 if choice.single_output else count
    resolved_size = choice.fixed_size or size
    if (n, resolved_size) != (count, size):
        logger.info("model.params_overridden", model=choice.model_id,
                    count=n, size=resolved_size)
    return n, resolved_size
