"""
TwiML rendering of prompt directives.

The dialog engine decides what to say and what input to collect; this
module turns that into the markup Twilio expects back from a voice
webhook. Nothing upstream inspects the returned string.
"""

from typing import Optional, Protocol

from twilio.twiml.voice_response import VoiceResponse

from src.config import TelephonyConfig, settings
from src.schemas.prompt_schema import ExpectedInput, PromptDirective

TWILIO_INPUT_MODES = {
    ExpectedInput.DIGITS: "dtmf",
    ExpectedInput.SPEECH: "speech",
    ExpectedInput.BOTH: "dtmf speech",
}


class PromptRenderer(Protocol):
    def render(self, directive: PromptDirective) -> str:
        ...


class TwiMLRenderer:
    """Renders a directive as ``<Say>`` optionally wrapped in ``<Gather>``, plus ``<Redirect>``."""

    def __init__(self, telephony: Optional[TelephonyConfig] = None) -> None:
        self._telephony = telephony or settings.telephony

    def render(self, directive: PromptDirective) -> str:
        response = VoiceResponse()
        say_options = {"voice": self._telephony.tts_voice, "language": self._telephony.tts_language}

        if directive.gather is not None:
            spec = directive.gather
            gather = response.gather(
                input=TWILIO_INPUT_MODES[spec.expected_input],
                timeout=spec.timeout_seconds,
                num_digits=spec.max_digits,
                action=spec.on_submit_path,
                method="POST",
                speech_timeout=spec.speech_timeout,
            )
            gather.say(directive.message, **say_options)
        else:
            response.say(directive.message, **say_options)

        if directive.redirect_path:
            response.redirect(directive.redirect_path, method="POST")

        return str(response)
