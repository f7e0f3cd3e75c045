"""Memoized OpenAI client keyed by API key.

The client is rebuilt only when the key changes by value. Comparison and
replacement happen under one lock so concurrent calls with different keys
never observe a half-swapped cache.
"""

import os
import threading
from typing import Callable

import structlog
from openai import OpenAI

from openai_brain.api.schemas import BrainSettings

logger = structlog.get_logger(__name__)


def _default_factory(api_key: str) -> OpenAI:
    # One request per invocation: the SDK must not retry on its own.
    return OpenAI(
        api_key=api_key,
        timeout=float(os.environ.get("OPENAI_TIMEOUT", "60")),
        max_retries=0,
    )


class ClientCache:
    """Holds the last OpenAI client and the key it was built with."""

    def __init__(self, factory: Callable[[str], OpenAI] | None = None):
        self._factory = factory or _default_factory
        self._lock = threading.Lock()
        self._client: OpenAI | None = None
        self._current_key: str | None = None

    def get_client(self, settings: BrainSettings) -> OpenAI:
        """Return a client for settings.api_key, building one if the key changed."""
        with self._lock:
            if self._client is None or self._current_key != settings.api_key:
                self._client = self._factory(settings.api_key)
                self._current_key = settings.api_key
                logger.info("client.created")
            return self._client
