"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import Dict, Iterable, List, Optional
from unittest.mock import MagicMock

import pytest

from models.barber import Barber
from models.booking import Booking, BookingCreate
from models.service import Service
from utils.exceptions import DuplicateBookingReferenceError


class InMemoryBookingStore:
    """
    Stand-in for SupabaseClient keeping bookings in memory.

    ``unique_references`` mimics a unique index on ``booking_id``. Every
    call yields to the event loop so concurrent callers interleave the way
    they do against the real database.
    """

    def __init__(self, references: Iterable[str] = (), unique_references: bool = False):
        self.references = set(references)
        self.unique_references = unique_references
        self.bookings: List[Booking] = []
        self.barbers: Dict[str, Barber] = {}
        self.services: Dict[str, Service] = {}
        self.exists_calls: List[str] = []

    async def booking_reference_exists(self, reference: str) -> bool:
        self.exists_calls.append(reference)
        await asyncio.sleep(0)
        return reference in self.references

    async def create_booking(self, booking_data: BookingCreate) -> Booking:
        await asyncio.sleep(0)
        if self.unique_references and booking_data.booking_id in self.references:
            raise DuplicateBookingReferenceError(booking_data.booking_id)
        self.references.add(booking_data.booking_id)
        booking = Booking(
            id=f"row-{len(self.bookings) + 1}", **booking_data.model_dump()
        )
        self.bookings.append(booking)
        return booking

    async def get_booking_by_reference(self, reference: str) -> Optional[Booking]:
        for booking in self.bookings:
            if booking.booking_id == reference:
                return booking
        return None

    async def get_barber_by_id(self, barber_id: str) -> Optional[Barber]:
        return self.barbers.get(barber_id)

    async def get_service_by_id(self, service_id: str) -> Optional[Service]:
        return self.services.get(service_id)


def sequence_source(*candidates: str):
    """Candidate source returning the given references in order."""
    iterator = iter(candidates)
    return lambda: next(iterator)


@pytest.fixture
def booking_store():
    """In-memory store with one active barber and one service."""
    store = InMemoryBookingStore()
    store.barbers["barber_1"] = Barber(id="barber_1", name="Anan", branch="siam")
    store.barbers["barber_2"] = Barber(id="barber_2", name="Chai", is_active=False)
    store.services["service_1"] = Service(id="service_1", title="Haircut", price=350)
    return store


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = MagicMock()
    mock_table = MagicMock()
    mock_client.table.return_value = mock_table
    return mock_client, mock_table
