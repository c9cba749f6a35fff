"""What the dialog engine asks the telephony renderer to say and collect."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ExpectedInput(str, Enum):
    DIGITS = "digits"
    SPEECH = "speech"
    BOTH = "both"


class GatherSpec(BaseModel):
    """Input-gathering directive attached to a prompt."""
    on_submit_path: str
    expected_input: ExpectedInput = ExpectedInput.BOTH
    timeout_seconds: int = 10
    max_digits: int = 1
    speech_timeout: str = "auto"


class PromptDirective(BaseModel):
    """
    Next spoken prompt for a call.

    A directive with neither ``gather`` nor ``redirect_path`` ends the
    interaction; the telephony layer hangs up after speaking it.
    """
    message: str
    gather: Optional[GatherSpec] = None
    redirect_path: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.gather is None and self.redirect_path is None
