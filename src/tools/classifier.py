"""
LLM intent classifier — optional last-resort fallback for menu input.

Only consulted when digits and keywords both miss. The interpreter owns
the timeout and treats any failure as "unknown", so the bot works the
same (with lower accuracy) when no API key is configured.
"""

import logging
from typing import Optional, Protocol

from openai import AsyncOpenAI

from src.config import ClassifierConfig
from src.conversation.intents import CLASSIFIER_LABELS

logger = logging.getLogger(__name__)

CLASSIFIER_INSTRUCTION = (
    "You are helping classify user intent for a voice bot. Return only one of: "
    + ", ".join(label.value for label in CLASSIFIER_LABELS)
    + ', or "unknown" if unclear.'
)


class IntentClassifier(Protocol):
    """Anything that maps a caller utterance to an intent label."""

    async def classify(self, text: str) -> str:
        ...


class OpenAIIntentClassifier:
    """Chat-completion backed classifier."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> Optional["OpenAIIntentClassifier"]:
        """Classifier for the configured key, or None when no key is set."""
        if not config.enabled:
            logger.info("OPENAI_API_KEY not set, menu classification uses keywords only")
            return None
        client = AsyncOpenAI(api_key=config.api_key, timeout=config.timeout_sec, max_retries=0)
        return cls(client, config.model)

    async def classify(self, text: str) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": CLASSIFIER_INSTRUCTION},
                {"role": "user", "content": f"User said: '{text}'"},
            ],
            max_tokens=10,
            temperature=0,
        )
        label = (response.choices[0].message.content or "").strip().strip('"').lower()
        logger.debug("Classifier label for %r: %s", text, label)
        return label
