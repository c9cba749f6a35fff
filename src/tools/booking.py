"""
Booking store used by the dialog engine.

The engine depends only on the ``BookingRepository`` protocol. The
in-memory implementation here backs the console demo and tests; in
production this would be a database-backed repository.
"""

import asyncio
import logging
from typing import Optional, Protocol

from src.schemas.booking_schema import Booking
from src.schemas.session_schema import BookingDraft
from src.utils import normalize_phone

logger = logging.getLogger(__name__)

MIN_PHONE_MATCH_DIGITS = 7


class BookingRepository(Protocol):
    """Create and look up bookings. Multi-result lookups are newest first."""

    async def create(self, draft: BookingDraft, call_id: str) -> Booking:
        ...

    async def find_by_id(self, booking_id: str) -> Optional[Booking]:
        ...

    async def find_by_phone(self, phone: str) -> list[Booking]:
        ...

    async def find_by_name(self, name: str) -> list[Booking]:
        ...


class InMemoryBookingRepository:
    """Process-local booking store."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._lock = asyncio.Lock()

    async def create(self, draft: BookingDraft, call_id: str) -> Booking:
        missing = [name for name in ("id", "date", "time") if not getattr(draft, name)]
        if missing:
            raise ValueError(f"Cannot create booking - missing required fields: {', '.join(missing)}")

        booking = Booking(
            id=draft.id,
            date=draft.date,
            time=draft.time,
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            call_id=call_id,
        )
        async with self._lock:
            self._bookings[booking.id] = booking
        logger.info("Booking created: %s on %s at %s", booking.id, booking.date, booking.time)
        return booking

    async def find_by_id(self, booking_id: str) -> Optional[Booking]:
        async with self._lock:
            return self._bookings.get(booking_id.strip())

    async def find_by_phone(self, phone: str) -> list[Booking]:
        """Bookings whose phone matches ``phone``, ignoring a country code on either side."""
        wanted = _digits(phone)
        if len(wanted) < MIN_PHONE_MATCH_DIGITS:
            return []
        return await self._matching(
            lambda b: b.customer_phone is not None and _same_number(_digits(b.customer_phone), wanted)
        )

    async def find_by_name(self, name: str) -> list[Booking]:
        wanted = name.strip().lower()
        if not wanted:
            return []
        return await self._matching(
            lambda b: b.customer_name is not None and b.customer_name.strip().lower() == wanted
        )

    async def _matching(self, predicate) -> list[Booking]:
        async with self._lock:
            found = [b for b in self._bookings.values() if predicate(b)]
        return sorted(found, key=lambda b: b.created_at, reverse=True)


def _digits(phone: str) -> str:
    return normalize_phone(phone).lstrip("+")


def _same_number(stored: str, wanted: str) -> bool:
    if len(stored) < MIN_PHONE_MATCH_DIGITS:
        return False
    return stored.endswith(wanted) or wanted.endswith(stored)
