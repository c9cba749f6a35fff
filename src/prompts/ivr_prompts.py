"""Spoken prompt wording for every dialog step."""

from typing import Mapping

from src.schemas.booking_schema import Booking

MENU_OPTIONS = (
    'Press 1 or say "Book an appointment". '
    'Press 2 or say "Check my booking". '
    'Press 3 or say "Talk to customer support". '
    'Press 4 or say "Hear our working hours". '
    'Press 5 or say "Make a payment". '
    'Press 6 or say "Set a reminder". '
    "Press 9 for English or 0 for Spanish."
)

DATE_EXAMPLES = "say something like 'tomorrow', 'next Monday', or a specific date like 'December 15th'"
TIME_EXAMPLES = "say something like '2 PM', '10:30 AM', or 'morning'"

UNKNOWN_MENU_INPUT = (
    "Sorry, I didn't catch that. Could you please repeat your choice? "
    "You can press a number on your keypad or speak your selection."
)
ESCALATION_NOTICE = (
    "I'm having trouble understanding you. "
    "Let me connect you to one of our support agents for further assistance."
)
CUSTOMER_SUPPORT = (
    "I'm connecting you to one of our customer support representatives. "
    "Please hold while I transfer your call. "
    "I'm sorry, all our agents are currently busy. "
    "Please call back later or leave a message after the beep."
)
PAYMENT_UNAVAILABLE = (
    "For payment processing, I'll need to transfer you to our secure payment system. "
    "Payment system is currently unavailable. Please try again later or contact support."
)
REMINDER_UNAVAILABLE = (
    "I can help you set a reminder for your appointment. "
    "This feature is currently being set up. "
    "For now, please make a note of your appointment details. "
    "Would you like to return to the main menu?"
)
BOOK_APPOINTMENT = f"I'd be happy to help you book an appointment. Please tell me your preferred date. You can {DATE_EXAMPLES}."
DATE_REPROMPT = f"I'm sorry, I didn't understand that date. Could you please repeat it? For example, {DATE_EXAMPLES}."
TIME_REPROMPT = f"I'm sorry, I didn't understand that time. Could you please repeat it? For example, {TIME_EXAMPLES}."
BOOKING_RESTART = "No problem! Let's start over. What date would you prefer for your appointment?"
CHECK_BOOKING = (
    "I can help you check your booking. "
    "Please provide your booking ID, or say your full name if you don't have the ID."
)
LOOKUP_REPROMPT = "I didn't catch that. Please say your booking ID, your full name, or the phone number you booked with."
BOOKING_NOT_FOUND = (
    "I'm sorry, I couldn't find a booking with that information. "
    "Please double-check your booking ID or contact our support team. "
    "Would you like me to transfer you to customer support? Say 'yes' or 'no'."
)
GOODBYE = "Thank you for calling. Have a great day!"

LANGUAGE_NAMES = {"english": "English", "spanish": "Spanish"}


def build_menu_prompt(company_name: str) -> str:
    return (
        f"Hello! Welcome to {company_name}. I'm your virtual assistant. "
        f"Please choose from the following options: {MENU_OPTIONS}"
    )


def build_language_prompt(language: str, changed: bool) -> str:
    name = LANGUAGE_NAMES.get(language, language.title())
    if changed:
        lead = f"Okay, we'll continue in {name}."
    else:
        lead = f"Your language is already set to {name}."
    return f"{lead} {MENU_OPTIONS}"


def build_date_noted_prompt(date_str: str) -> str:
    return f"Great! I have {date_str} noted. What time would you prefer? You can {TIME_EXAMPLES}."


def build_booking_scheduled_prompt(date_str: str, time_str: str, booking_id: str) -> str:
    return (
        f"Perfect! I have scheduled your appointment for {date_str} at {time_str}. "
        f"Your booking ID is {booking_id}. "
        "Is this correct? Say 'yes' to confirm or 'no' to make changes."
    )


def build_booking_confirmed_prompt(booking_id: str) -> str:
    return (
        "Excellent! Your appointment has been confirmed. "
        f"Your booking ID is {booking_id}. "
        "You'll receive a confirmation. Is there anything else I can help you with today? "
        "Say 'main menu' to return to the main menu or 'goodbye' to end the call."
    )


def build_booking_found_prompt(booking: Booking) -> str:
    return (
        f"I found your booking! You have an appointment scheduled for {booking.date} at {booking.time}. "
        "Is there anything else I can help you with? Say 'main menu' to return to the main menu."
    )


def build_working_hours_prompt(working_hours: Mapping[str, str]) -> str:
    parts = ["Our working hours are:"]
    for day, hours in working_hours.items():
        if hours.strip().lower() == "closed":
            parts.append(f"{day.title()}: Closed.")
        else:
            open_at, close_at = (p.strip() for p in hours.split("-", 1))
            parts.append(f"{day.title()}: {open_at} to {close_at}.")
    parts.append("Would you like to return to the main menu? Say 'yes' or 'main menu'.")
    return " ".join(parts)
