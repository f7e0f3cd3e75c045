"""Turn-to-provider message composition.

Text-only turns become plain strings. User/system turns carrying images become
a multi-part list: the message text first, then one inline data-URL image part
per image attachment so the provider never needs filesystem access.
"""

import base64
from pathlib import Path
from typing import Any

import structlog

from openai_brain.api.schemas import FileAttachment, ImageDetail, TextBrainPrompt

logger = structlog.get_logger(__name__)

_ROLE_MAP = {"brain": "assistant"}
_ASSISTANT_ROLES = frozenset({"brain", "assistant"})


def map_role(role: str) -> str:
    """Host role to OpenAI role. Only `brain` is renamed."""
    return _ROLE_MAP.get(role, role)


def encode_image_attachment(attachment: FileAttachment) -> str:
    """Build a `data:<mime>;base64,...` URL from the attachment bytes.

    In-memory data wins over the path. Read errors propagate.
    """
    if attachment.data is not None:
        raw = attachment.data
    elif attachment.path:
        raw = Path(attachment.path).read_bytes()
    else:
        raise ValueError("Attachment has neither data nor a path")

    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{attachment.mime_type};base64,{encoded}"


def compose_content(
    turn: TextBrainPrompt,
    is_last_turn: bool,
    default_detail: ImageDetail = ImageDetail.HIGH,
) -> str | list[dict[str, Any]]:
    """Convert one turn into OpenAI message content.

    Args:
        turn: The conversation turn.
        is_last_turn: Whether this is the newest turn of the windowed history.
            Only its images get default_detail; older images are sent low.
        default_detail: Configured fidelity for the newest images.

    Returns:
        The message string, or a list of text and image_url parts.
    """
    if not turn.has_image or turn.role in _ASSISTANT_ROLES:
        return turn.message

    detail = ImageDetail(default_detail) if is_last_turn else ImageDetail.LOW
    parts: list[dict[str, Any]] = [{"type": "text", "text": turn.message}]

    for attachment in turn.attachments:
        if not attachment.is_image:
            continue
        parts.append({
            "type": "image_url",
            "image_url": {
                "url": encode_image_attachment(attachment),
                "detail": detail.value,
            },
        })

    return parts


def compose_messages(
    turns: list[TextBrainPrompt],
    default_detail: ImageDetail = ImageDetail.HIGH,
) -> list[dict[str, Any]]:
    """Build the chat `messages` list for an already-windowed history."""
    last_index = len(turns) - 1
    messages = [
        {
            "role": map_role(turn.role),
            "content": compose_content(turn, index == last_index, default_detail),
        }
        for index, turn in enumerate(turns)
    ]

    image_parts = sum(
        1 for m in messages if isinstance(m["content"], list)
        for part in m["content"] if part["type"] == "image_url"
    )
    logger.debug("content.composed", messages=len(messages), images=image_parts)
    return messages
