"""Character-budget windowing of conversation history.

Drops the oldest turns until the summed message length fits the budget.
Attachments do not count toward the budget.
"""

import structlog

from openai_brain.api.schemas import TextBrainPrompt

logger = structlog.get_logger(__name__)

DEFAULT_MAX_CHARACTERS = 3000


def total_characters(turns: list[TextBrainPrompt]) -> int:
    """Sum of message lengths across turns."""
    return sum(len(turn.message) for turn in turns)


def window_history(
    turns: list[TextBrainPrompt],
    max_characters: int | None = DEFAULT_MAX_CHARACTERS,
) -> list[TextBrainPrompt]:
    """Return the newest suffix of turns that fits max_characters.

    Histories of two turns or fewer are never truncated, and at least one
    turn always survives even when it alone exceeds the budget.

    Args:
        turns: Conversation turns, oldest first. Not modified.
        max_characters: Character budget. None falls back to 3000.

    Returns:
        A new list holding a contiguous suffix of turns.
    """
    if len(turns) <= 2:
        return list(turns)

    budget = DEFAULT_MAX_CHARACTERS if max_characters is None else max_characters
    total = total_characters(turns)
    start = 0

    while total > budget and len(turns) - start > 1:
        total -= len(turns[start].message)
        start += 1

    if start:
        logger.debug("history.windowed", dropped=start, kept=len(turns) - start,
                     characters=total, budget=budget)

    return list(turns[start:])
