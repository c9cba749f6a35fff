"""Booking records as held by the booking store."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.utils import utcnow


class Booking(BaseModel):
    """A persisted appointment booking."""
    id: str
    date: str
    time: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    call_id: str
    status: str = "confirmed"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
