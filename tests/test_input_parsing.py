"""Tests for spoken date and time parsing."""

from datetime import date

import pytest

from src.conversation.input_parsing import (
    format_long_date,
    next_weekday,
    parse_date_input,
    parse_time_input,
)
from tests.conftest import FIXED_TODAY

MONDAY = date(2026, 10, 19)


class TestDateParsing:
    def test_tomorrow(self):
        assert parse_date_input("tomorrow", today=FIXED_TODAY) == "October 22, 2026"

    def test_tomorrow_inside_sentence(self):
        assert parse_date_input("How about Tomorrow please", today=FIXED_TODAY) == "October 22, 2026"

    def test_today(self):
        assert parse_date_input("today", today=FIXED_TODAY) == "October 21, 2026"

    def test_next_monday_from_wednesday(self):
        assert parse_date_input("next Monday", today=FIXED_TODAY) == "October 26, 2026"

    def test_same_weekday_means_next_week(self):
        assert parse_date_input("monday", today=MONDAY) == "October 26, 2026"

    def test_friday_this_week(self):
        assert parse_date_input("friday", today=FIXED_TODAY) == "October 23, 2026"

    def test_crosses_month_boundary(self):
        assert parse_date_input("tomorrow", today=date(2026, 10, 31)) == "November 1, 2026"

    def test_unrecognised_text_passes_through(self):
        assert parse_date_input("  December 15th ", today=FIXED_TODAY) == "December 15th"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_rejected(self, value):
        assert parse_date_input(value, today=FIXED_TODAY) is None


class TestWeekdayHelpers:
    def test_next_weekday_strictly_after(self):
        assert next_weekday(MONDAY, 0) == date(2026, 10, 26)
        assert next_weekday(MONDAY, 1) == date(2026, 10, 20)

    def test_format_long_date_has_no_padding(self):
        assert format_long_date(date(2026, 3, 5)) == "March 5, 2026"


class TestTimeParsing:
    def test_hour_with_pm(self):
        assert parse_time_input("2 PM") == "2:00 PM"

    def test_hour_and_minutes_am(self):
        assert parse_time_input("10:30 AM") == "10:30 AM"

    def test_dotted_period(self):
        assert parse_time_input("3 p.m.") == "3:00 PM"

    def test_twenty_four_hour(self):
        assert parse_time_input("14:15") == "2:15 PM"

    def test_noon_and_midnight(self):
        assert parse_time_input("12 pm") == "12:00 PM"
        assert parse_time_input("12 am") == "12:00 AM"

    def test_morning(self):
        assert parse_time_input("in the morning") == "10:00 AM"

    def test_afternoon(self):
        assert parse_time_input("afternoon") == "2:00 PM"

    def test_evening(self):
        assert parse_time_input("evening") == "5:00 PM"

    def test_noon_word(self):
        assert parse_time_input("around noon") == "12:00 PM"

    def test_out_of_range_passes_through(self):
        assert parse_time_input("99:99") == "99:99"

    def test_unrecognised_text_passes_through(self):
        assert parse_time_input(" whenever works ") == "whenever works"

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_empty_rejected(self, value):
        assert parse_time_input(value) is None
