"""Credential gate run before any provider call.

A failed ValidationResult short-circuits every brain operation: the caller
returns the explanation to the host and never builds a client.
"""

import structlog

from openai_brain.api.schemas import BrainSettings, ValidationResult

logger = structlog.get_logger(__name__)

MIN_API_KEY_LENGTH = 10

MISSING_API_KEY_MESSAGE = """# OpenAI API Key is Missing
Oops! Looks like you didn't configure your OpenAI API Key yet. This is required to use this brain.

## How to get an OpenAI API Key

[Log in into your OpenAI account](https://platform.openai.com/login) or [create one](https://chat.openai.com/auth/login) if you don't have it.
After that, go to the [API Key section of the OpenAI dashboard](https://platform.openai.com/api-keys) and copy your API key (or generate one if you still don't have one).

## How to configure your OpenAI API Key

Go to the Brains page, select this brain and set the OpenAI API Key. After that just click on the **Save Settings** button and you're ready to go!

## How to use the premium models
In order to use all the features this brain has to offer (like gpt-4o and dall-e-3), we recommend buying at least $0.50 of credits on OpenAI. You can do that [on the billing page](https://platform.openai.com/account/billing/overview). You only have to do this once.
"""


def validate_settings(settings: BrainSettings | None) -> ValidationResult:
    """Check that an API key of plausible length is configured.

    Args:
        settings: Provider settings from the host context, possibly missing.

    Returns:
        ValidationResult; unsuccessful when the key is absent or shorter
        than MIN_API_KEY_LENGTH characters.
    """
    result = ValidationResult()

    if settings is None or len(settings.api_key or "") < MIN_API_KEY_LENGTH:
        result.add_error(MISSING_API_KEY_MESSAGE)
        logger.warning("settings.invalid", reason="api_key_missing")

    return result
