"""
Input interpreter — turns a keypress or speech transcript into a menu Intent.

Passes run in strict order and the first match wins:
    1. single DTMF digit in the digit table
    2. keyword table against the lowercased, trimmed input
    3. external classifier (main-menu context only, if configured)
    4. Intent.UNKNOWN
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from src.config import settings
from src.conversation.contexts import DialogContext
from src.conversation.intents import CLASSIFIER_LABELS, DIGIT_INTENTS, Intent, match_keywords
from src.logging_context import get_call_logger

if TYPE_CHECKING:
    from src.tools.classifier import IntentClassifier

logger = get_call_logger(__name__)


class InputInterpreter:
    """Classifies raw caller input. Never raises."""

    def __init__(
        self,
        classifier: Optional["IntentClassifier"] = None,
        classifier_timeout_sec: Optional[float] = None,
    ) -> None:
        self._classifier = classifier
        self._timeout = classifier_timeout_sec or settings.classifier.timeout_sec

    async def classify(self, raw_input: Optional[str], context: DialogContext) -> Intent:
        if not raw_input or not raw_input.strip():
            return Intent.UNKNOWN

        normalized = raw_input.strip().lower()

        if len(normalized) == 1 and normalized.isdigit() and normalized in DIGIT_INTENTS:
            return DIGIT_INTENTS[normalized]

        intent = match_keywords(normalized)
        if intent is not Intent.UNKNOWN:
            return intent

        if self._classifier is not None and context is DialogContext.MENU_CHOICE:
            return await self._ask_classifier(raw_input)

        return Intent.UNKNOWN

    async def _ask_classifier(self, raw_input: str) -> Intent:
        try:
            label = await asyncio.wait_for(self._classifier.classify(raw_input), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Intent classifier timed out after %.1fs", self._timeout)
            return Intent.UNKNOWN
        except Exception:
            logger.exception("Intent classifier failed")
            return Intent.UNKNOWN

        for intent in CLASSIFIER_LABELS:
            if label == intent.value:
                return intent
        return Intent.UNKNOWN
