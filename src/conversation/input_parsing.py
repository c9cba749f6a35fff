"""
Lenient date and time parsing for spoken booking input.

Recognised phrases are normalised to a display string; anything else that
is not empty is passed through verbatim so the caller's own wording ends
up on the booking. Only empty input is rejected (returns None).
"""

import re
from datetime import date, timedelta
from typing import Optional

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

TIME_OF_DAY = (
    ("morning", "10:00 AM"),
    ("afternoon", "2:00 PM"),
    ("evening", "5:00 PM"),
    ("noon", "12:00 PM"),
)

TIME_PATTERN = re.compile(r"(\d{1,2}):?(\d{0,2})\s*(am|pm|a\.m\.|p\.m\.)?", re.IGNORECASE)


def format_long_date(value: date) -> str:
    """``Month D, YYYY`` e.g. ``October 20, 2026``."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of ``weekday`` (Monday=0) strictly after ``today``."""
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


def parse_date_input(user_input: Optional[str], today: Optional[date] = None) -> Optional[str]:
    if not user_input or not user_input.strip():
        return None

    text = user_input.lower()
    today = today or date.today()

    if "tomorrow" in text:
        return format_long_date(today + timedelta(days=1))
    if "today" in text:
        return format_long_date(today)

    for index, name in enumerate(WEEKDAY_NAMES):
        if name in text:
            return format_long_date(next_weekday(today, index))

    return user_input.strip()


def parse_time_input(user_input: Optional[str]) -> Optional[str]:
    if not user_input or not user_input.strip():
        return None

    text = user_input.lower()

    for phrase, display in TIME_OF_DAY:
        if phrase in text:
            return display

    match = TIME_PATTERN.search(text)
    if match:
        hour = int(match.group(1))
        minute = match.group(2) or "00"
        period = match.group(3)

        if hour <= 23 and int(minute) <= 59:
            if period and "p" in period and hour < 12:
                hour += 12
            elif period and "a" in period and hour == 12:
                hour = 0

            display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
            display_period = "PM" if hour >= 12 else "AM"
            return f"{display_hour}:{minute.zfill(2)} {display_period}"

    return user_input.strip()
