"""Per-call session state and its typed patch."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.utils import utcnow


class CallState(str, Enum):
    """Where the caller currently is in the IVR flow."""
    GREETING = "greeting"
    MAIN_MENU = "main_menu"
    BOOKING_DATE = "booking_date"
    BOOKING_TIME = "booking_time"
    BOOKING_CONFIRMATION = "booking_confirmation"
    CHECK_BOOKING = "check_booking"
    CUSTOMER_SUPPORT = "customer_support"
    WORKING_HOURS = "working_hours"
    PAYMENT = "payment"
    REMINDER = "reminder"
    COMPLETED = "completed"


class BookingDraft(BaseModel):
    """
    Booking details accumulated across the BOOKING_* states.

    Frozen: every step produces a new draft via ``model_copy``. Once ``id``
    is set the booking has been handed to the booking store.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


class Session(BaseModel):
    """One active call. Serialized as a flat JSON record under ``session:<call_id>``."""

    call_id: str
    state: CallState = CallState.GREETING
    retry_count: int = Field(default=0, ge=0)
    booking_draft: BookingDraft = Field(default_factory=BookingDraft)
    language: str
    language_selected: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def new(cls, call_id: str, language: str) -> "Session":
        """Default session for a call seen for the first time."""
        return cls(call_id=call_id, language=language)


class SessionPatch(BaseModel):
    """The mutable subset of Session. Only fields explicitly set are applied."""

    state: Optional[CallState] = None
    retry_count: Optional[int] = Field(default=None, ge=0)
    booking_draft: Optional[BookingDraft] = None
    language: Optional[str] = None
    language_selected: Optional[bool] = None


def apply_patch(session: Session, patch: SessionPatch) -> Session:
    """Return a copy of ``session`` with the patch's explicitly set fields merged in."""
    updates = {name: getattr(patch, name) for name in patch.model_fields_set}
    return session.model_copy(update=updates)
