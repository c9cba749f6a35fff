"""Tests for InputInterpreter: digits, keywords and the optional classifier."""

import asyncio

import pytest

from src.conversation.contexts import DialogContext
from src.conversation.intents import Intent, match_keywords
from src.conversation.interpreter import InputInterpreter
from tests.conftest import FakeClassifier


class TestDigits:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "digit,expected",
        [
            ("1", Intent.BOOK_APPOINTMENT),
            ("2", Intent.CHECK_BOOKING),
            ("3", Intent.CUSTOMER_SUPPORT),
            ("4", Intent.WORKING_HOURS),
            ("5", Intent.MAKE_PAYMENT),
            ("6", Intent.SET_REMINDER),
            ("9", Intent.ENGLISH),
            ("0", Intent.SPANISH),
        ],
    )
    async def test_digit_table(self, interpreter, digit, expected):
        assert await interpreter.classify(digit, DialogContext.MENU_CHOICE) == expected

    @pytest.mark.asyncio
    async def test_digit_with_whitespace(self, interpreter):
        assert await interpreter.classify(" 1 ", DialogContext.MENU_CHOICE) == Intent.BOOK_APPOINTMENT

    @pytest.mark.asyncio
    async def test_unmapped_digit_is_unknown(self, interpreter):
        assert await interpreter.classify("7", DialogContext.MENU_CHOICE) == Intent.UNKNOWN

    @pytest.mark.asyncio
    async def test_multi_digit_is_not_a_menu_choice(self, interpreter):
        assert await interpreter.classify("12", DialogContext.MENU_CHOICE) == Intent.UNKNOWN

    @pytest.mark.asyncio
    @pytest.mark.parametrize("context", list(DialogContext))
    async def test_digit_ignores_context(self, interpreter, context):
        assert await interpreter.classify("1", context) == Intent.BOOK_APPOINTMENT

    @pytest.mark.asyncio
    async def test_digit_beats_classifier_outside_menu(self):
        classifier = FakeClassifier(label="make_payment")
        interpreter = InputInterpreter(classifier, classifier_timeout_sec=1.0)
        assert await interpreter.classify("2", DialogContext.BOOKING_LOOKUP) == Intent.CHECK_BOOKING
        assert classifier.calls == []


class TestKeywords:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I want to book an appointment", Intent.BOOK_APPOINTMENT),
            ("Check my booking", Intent.CHECK_BOOKING),
            ("where is my reservation", Intent.CHECK_BOOKING),
            ("I want to reserve a table", Intent.BOOK_APPOINTMENT),
            ("what are your business hours", Intent.WORKING_HOURS),
            ("I'd like to look up my appointment", Intent.CHECK_BOOKING),
            ("Talk to customer support", Intent.CUSTOMER_SUPPORT),
            ("I need a human", Intent.CUSTOMER_SUPPORT),
            ("When are you open", Intent.WORKING_HOURS),
            ("Hear our working hours", Intent.WORKING_HOURS),
            ("Make a payment", Intent.MAKE_PAYMENT),
            ("I want to pay for my appointment", Intent.MAKE_PAYMENT),
            ("Set a reminder", Intent.SET_REMINDER),
        ],
    )
    async def test_keyword_table(self, interpreter, text, expected):
        assert await interpreter.classify(text, DialogContext.MENU_CHOICE) == expected

    def test_first_match_wins(self):
        assert match_keywords("remind me to pay") == Intent.SET_REMINDER

    @pytest.mark.asyncio
    async def test_gibberish_is_unknown(self, interpreter):
        assert await interpreter.classify("purple monkey", DialogContext.MENU_CHOICE) == Intent.UNKNOWN

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "", "   "])
    async def test_empty_is_unknown(self, interpreter, value):
        assert await interpreter.classify(value, DialogContext.MENU_CHOICE) == Intent.UNKNOWN


class TestClassifierFallback:
    @pytest.mark.asyncio
    async def test_used_when_keywords_miss(self):
        classifier = FakeClassifier(label="book_appointment")
        interpreter = InputInterpreter(classifier, classifier_timeout_sec=1.0)
        intent = await interpreter.classify("I'd like to come in", DialogContext.MENU_CHOICE)
        assert intent == Intent.BOOK_APPOINTMENT
        assert classifier.calls == ["I'd like to come in"]

    @pytest.mark.asyncio
    async def test_not_called_when_keywords_hit(self):
        classifier = FakeClassifier(label="make_payment")
        interpreter = InputInterpreter(classifier, classifier_timeout_sec=1.0)
        intent = await interpreter.classify("check my booking", DialogContext.MENU_CHOICE)
        assert intent == Intent.CHECK_BOOKING
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_not_called_outside_menu(self):
        classifier = FakeClassifier(label="book_appointment")
        interpreter = InputInterpreter(classifier, classifier_timeout_sec=1.0)
        intent = await interpreter.classify("I'd like to come in", DialogContext.BOOKING_DATE)
        assert intent == Intent.UNKNOWN
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_label_outside_menu_set_is_unknown(self):
        interpreter = InputInterpreter(FakeClassifier(label="spanish"), classifier_timeout_sec=1.0)
        assert await interpreter.classify("hola amigo", DialogContext.MENU_CHOICE) == Intent.UNKNOWN

    @pytest.mark.asyncio
    async def test_error_is_unknown(self):
        interpreter = InputInterpreter(
            FakeClassifier(error=ConnectionError("api down")), classifier_timeout_sec=1.0
        )
        assert await interpreter.classify("I'd like to come in", DialogContext.MENU_CHOICE) == Intent.UNKNOWN

    @pytest.mark.asyncio
    async def test_timeout_is_unknown(self):
        class SlowClassifier:
            async def classify(self, text):
                await asyncio.sleep(5)
                return "book_appointment"

        interpreter = InputInterpreter(SlowClassifier(), classifier_timeout_sec=0.01)
        assert await interpreter.classify("I'd like to come in", DialogContext.MENU_CHOICE) == Intent.UNKNOWN
