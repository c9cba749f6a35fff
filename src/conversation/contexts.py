"""Dialog contexts — one per webhook entry point."""

from enum import Enum

from src.config import settings


class DialogContext(str, Enum):
    """Which prompt the caller is answering. The value is the webhook path segment."""
    GREETING = "webhook"
    MENU_CHOICE = "menu-choice"
    BOOKING_DATE = "booking-date"
    BOOKING_TIME = "booking-time"
    BOOKING_CONFIRMATION = "booking-confirmation"
    BOOKING_LOOKUP = "booking-lookup"
    POST_BOOKING = "post-booking"
    POST_ACTION = "post-action"
    SUPPORT_TRANSFER = "support-transfer"
    MAIN_MENU = "main-menu"

    @property
    def path(self) -> str:
        return f"{settings.telephony.base_path}/{self.value}"
