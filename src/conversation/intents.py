"""Menu intents and the static lookup tables used to recognise them."""

from enum import Enum


class Intent(str, Enum):
    """Caller goals recognised at the main menu."""
    BOOK_APPOINTMENT = "book_appointment"
    CHECK_BOOKING = "check_booking"
    CUSTOMER_SUPPORT = "customer_support"
    WORKING_HOURS = "working_hours"
    MAKE_PAYMENT = "make_payment"
    SET_REMINDER = "set_reminder"
    ENGLISH = "english"
    SPANISH = "spanish"
    UNKNOWN = "unknown"


DIGIT_INTENTS: dict[str, Intent] = {
    "1": Intent.BOOK_APPOINTMENT,
    "2": Intent.CHECK_BOOKING,
    "3": Intent.CUSTOMER_SUPPORT,
    "4": Intent.WORKING_HOURS,
    "5": Intent.MAKE_PAYMENT,
    "6": Intent.SET_REMINDER,
    "9": Intent.ENGLISH,
    "0": Intent.SPANISH,
}

# Checked in order, first hit wins. Narrow intents come before the broad
# booking ones so "pay for my appointment" and "check my booking" don't
# match on "appointment" / "book".
INTENT_KEYWORDS: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.SET_REMINDER, ("reminder", "remind", "alert", "notification")),
    (Intent.MAKE_PAYMENT, ("payment", "pay", "bill", "invoice", "charge")),
    (Intent.CHECK_BOOKING, ("check", "booking", "reservation", "my appointment", "find booking")),
    (Intent.BOOK_APPOINTMENT, ("book", "appointment", "schedule", "reserve", "make appointment")),
    (Intent.CUSTOMER_SUPPORT, ("support", "help", "agent", "human", "talk to someone", "representative")),
    (Intent.WORKING_HOURS, ("hours", "open", "closed", "time", "when open", "business hours")),
)

# Labels the external classifier may return.
CLASSIFIER_LABELS: tuple[Intent, ...] = (
    Intent.BOOK_APPOINTMENT,
    Intent.CHECK_BOOKING,
    Intent.CUSTOMER_SUPPORT,
    Intent.WORKING_HOURS,
    Intent.MAKE_PAYMENT,
    Intent.SET_REMINDER,
)

AFFIRMATIVE_WORDS = ("yes", "confirm", "correct")
# Any of these cancels an affirmative in the same answer ("no, that's not correct").
NEGATIVE_WORDS = ("no", "not", "don't", "wrong", "incorrect")
MENU_WORDS = ("main menu", "menu")
GOODBYE_WORDS = ("goodbye", "bye")
SUPPORT_WORDS = ("yes", "support")


def match_keywords(normalized: str) -> Intent:
    """First intent whose keyword list has a substring hit, else UNKNOWN."""
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return intent
    return Intent.UNKNOWN
