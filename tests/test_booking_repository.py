"""Tests for the in-memory booking store."""

import asyncio

import pytest

from src.schemas.session_schema import BookingDraft


def _draft(booking_id="abc12345", **fields):
    return BookingDraft(id=booking_id, date="October 22, 2026", time="2:00 PM", **fields)


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_copies_draft(self, bookings):
        booking = await bookings.create(_draft(customer_name="Jane Doe"), "CA1")
        assert booking.id == "abc12345"
        assert booking.customer_name == "Jane Doe"
        assert booking.call_id == "CA1"
        assert booking.status == "confirmed"

    @pytest.mark.asyncio
    async def test_missing_fields_rejected(self, bookings):
        with pytest.raises(ValueError, match="time"):
            await bookings.create(BookingDraft(id="abc12345", date="October 22, 2026"), "CA1")

    @pytest.mark.asyncio
    async def test_missing_id_rejected(self, bookings):
        with pytest.raises(ValueError, match="id"):
            await bookings.create(BookingDraft(date="October 22, 2026", time="2:00 PM"), "CA1")


class TestLookup:
    @pytest.mark.asyncio
    async def test_find_by_id(self, bookings):
        await bookings.create(_draft(), "CA1")
        assert (await bookings.find_by_id(" abc12345 ")).id == "abc12345"
        assert await bookings.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_find_by_name_is_case_insensitive(self, bookings):
        await bookings.create(_draft(customer_name="Jane Doe"), "CA1")
        assert [b.id for b in await bookings.find_by_name("JANE DOE")] == ["abc12345"]

    @pytest.mark.asyncio
    async def test_find_by_phone_normalizes(self, bookings):
        await bookings.create(_draft(customer_phone="(555) 123-4567"), "CA1")
        assert [b.id for b in await bookings.find_by_phone("555 123 4567")] == ["abc12345"]

    @pytest.mark.asyncio
    async def test_find_by_phone_ignores_country_code(self, bookings):
        await bookings.create(_draft(customer_phone="+15551234567"), "CA1")
        assert [b.id for b in await bookings.find_by_phone("555 123 4567")] == ["abc12345"]

    @pytest.mark.asyncio
    async def test_short_phone_query_matches_nothing(self, bookings):
        await bookings.create(_draft(customer_phone="+15551234567"), "CA1")
        assert await bookings.find_by_phone("4567") == []

    @pytest.mark.asyncio
    async def test_newest_first(self, bookings):
        await bookings.create(_draft("older111", customer_name="Jane Doe"), "CA1")
        await asyncio.sleep(0.001)
        await bookings.create(_draft("newer222", customer_name="Jane Doe"), "CA2")
        assert [b.id for b in await bookings.find_by_name("jane doe")] == ["newer222", "older111"]

    @pytest.mark.asyncio
    async def test_blank_queries_match_nothing(self, bookings):
        await bookings.create(_draft(customer_name="Jane Doe"), "CA1")
        assert await bookings.find_by_name("  ") == []
        assert await bookings.find_by_phone("") == []
