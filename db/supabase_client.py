"""
Supabase database client with CRUD operations.
Handles all database interactions for barbers, services, bookings and
commission payments.

Tables:
==============================
- barbers: staff profiles shown on the booking page
- services: price list
- bookings: customer bookings, ``booking_id`` holds the customer-facing
  reference
- commission_rates: fixed commission per barber and service
- commission_payments: commission paid out to barbers

Booking references are only guaranteed unique when ``bookings.booking_id``
has a unique index:

    CREATE UNIQUE INDEX bookings_booking_id_key ON bookings (booking_id);

Without it, ``create_booking`` cannot detect a reference that was taken
between the availability check and the insert.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from postgrest.exceptions import APIError
from supabase import Client as SupabaseClientType
from supabase import create_client

from config import settings
from models.barber import Barber, BarberCreate
from models.booking import Booking, BookingCreate, BookingStatus
from models.finance import CommissionPayment, CommissionPaymentCreate, CommissionRate
from models.service import Service, ServiceCreate
from utils.constants import (
    BOOKINGS_DISPLAY_LIMIT,
    REPORT_PAGE_SIZE,
    UNIQUE_VIOLATION_CODE,
)
from utils.datetime_utils import to_iso_string, utc_now
from utils.exceptions import (
    BookingCreationError,
    DatabaseError,
    DuplicateBookingReferenceError,
)


class SupabaseClient:
    """
    Supabase database client wrapper.

    Barbers and services change rarely and are read on every booking page,
    so they go through a small in-memory cache. Bookings are never cached.
    """

    def __init__(self):
        self.client: SupabaseClientType = create_client(
            settings.supabase_url, settings.supabase_key
        )
        self.bookings_table = settings.bookings_table

        # Format: {cache_key: (data, expiry_time)}
        self._cache: Dict[str, Tuple[Any, Any]] = {}
        self._cache_ttl = timedelta(minutes=5)

    # ========== Cache Helpers ==========

    def _get_from_cache(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        if key not in self._cache:
            return None

        data, expiry = self._cache[key]
        if utc_now() > expiry:
            del self._cache[key]
            return None

        return data

    def _set_cache(self, key: str, value: Any) -> None:
        """Set value in cache with TTL."""
        self._cache[key] = (value, utc_now() + self._cache_ttl)

    def _clear_cache(self, pattern: Optional[str] = None) -> None:
        """Clear cache entries matching pattern, or all if pattern is None."""
        if pattern is None:
            self._cache.clear()
        else:
            for k in [k for k in self._cache if pattern in k]:
                del self._cache[k]

    # ========== Barber Operations ==========

    async def add_barber(self, barber_data: BarberCreate) -> Barber:
        """Create a new barber."""
        try:
            data = barber_data.model_dump(exclude_none=True)
            response = self.client.table("barbers").insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Failed to add barber: {e}") from e

        if not response.data:
            raise DatabaseError("Failed to add barber: no data returned")

        self._clear_cache("barbers")
        return Barber(**response.data[0])

    async def get_barbers(self, active_only: bool = False) -> List[Barber]:
        """Get all barbers, optionally only those taking bookings."""
        cache_key = f"barbers:active={active_only}"
        cached = self._get_from_cache(cache_key)
        if cached is not None:
            return cached

        try:
            query = self.client.table("barbers").select("*")
            if active_only:
                query = query.eq("is_active", True)
            response = query.order("name", desc=False).execute()
        except Exception as e:
            raise DatabaseError(f"Failed to get barbers: {e}") from e

        barbers = [Barber(**item) for item in response.data]
        self._set_cache(cache_key, barbers)
        return barbers

    async def get_barber_by_id(self, barber_id: str) -> Optional[Barber]:
        """Get barber by ID."""
        try:
            response = (
                self.client.table("barbers").select("*").eq("id", barber_id).execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get barber: {e}") from e

        if response.data:
            return Barber(**response.data[0])
        return None

    async def update_barber(
        self, barber_id: str, changes: Dict[str, Any]
    ) -> Optional[Barber]:
        """Update barber fields. Returns None if the barber does not exist."""
        try:
            response = (
                self.client.table("barbers")
                .update(changes)
                .eq("id", barber_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to update barber: {e}") from e

        self._clear_cache("barbers")
        if not response.data:
            return None
        return Barber(**response.data[0])

    async def delete_barber(self, barber_id: str) -> bool:
        """Delete a barber. Returns True if a row was removed."""
        try:
            response = (
                self.client.table("barbers").delete().eq("id", barber_id).execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to delete barber: {e}") from e

        self._clear_cache("barbers")
        return len(response.data) > 0

    # ========== Service Operations ==========

    async def add_service(self, service_data: ServiceCreate) -> Service:
        """Create a new service."""
        try:
            data = service_data.model_dump(exclude_none=True)
            response = self.client.table("services").insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Failed to add service: {e}") from e

        if not response.data:
            raise DatabaseError("Failed to add service: no data returned")

        self._clear_cache("services")
        return Service(**response.data[0])

    async def get_services(self) -> List[Service]:
        """Get the price list."""
        cached = self._get_from_cache("services:all")
        if cached is not None:
            return cached

        try:
            response = (
                self.client.table("services")
                .select("*")
                .order("price", desc=False)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get services: {e}") from e

        services = [Service(**item) for item in response.data]
        self._set_cache("services:all", services)
        return services

    async def get_service_by_id(self, service_id: str) -> Optional[Service]:
        """Get service by ID."""
        try:
            response = (
                self.client.table("services").select("*").eq("id", service_id).execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get service: {e}") from e

        if response.data:
            return Service(**response.data[0])
        return None

    async def update_service(
        self, service_id: str, changes: Dict[str, Any]
    ) -> Optional[Service]:
        """Update service fields. Returns None if the service does not exist."""
        try:
            response = (
                self.client.table("services")
                .update(changes)
                .eq("id", service_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to update service: {e}") from e

        self._clear_cache("services")
        if not response.data:
            return None
        return Service(**response.data[0])

    async def delete_service(self, service_id: str) -> bool:
        """Delete a service. Returns True if a row was removed."""
        try:
            response = (
                self.client.table("services").delete().eq("id", service_id).execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to delete service: {e}") from e

        self._clear_cache("services")
        return len(response.data) > 0

    # ========== Booking Operations ==========

    async def booking_reference_exists(self, reference: str) -> bool:
        """
        Check whether any booking already carries this reference.

        Not cached: the answer must reflect the table at the time of the call.
        """
        try:
            response = (
                self.client.table(self.bookings_table)
                .select("id")
                .eq("booking_id", reference)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to check booking reference: {e}") from e

        return bool(response.data)

    async def create_booking(self, booking_data: BookingCreate) -> Booking:
        """
        Create a new booking.

        Raises:
            DuplicateBookingReferenceError: If a unique index on booking_id
                rejected the insert
            BookingCreationError: For any other failure
        """
        data = booking_data.model_dump(exclude_none=True)
        data["created_at"] = to_iso_string(utc_now())

        try:
            response = self.client.table(self.bookings_table).insert(data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION_CODE:
                raise DuplicateBookingReferenceError(booking_data.booking_id) from e
            raise BookingCreationError(f"Failed to create booking: {e}") from e
        except Exception as e:
            raise BookingCreationError(f"Failed to create booking: {e}") from e

        if not response.data:
            raise BookingCreationError("Failed to create booking: no data returned")

        return Booking(**response.data[0])

    async def get_booking_by_reference(self, reference: str) -> Optional[Booking]:
        """Get booking by its customer-facing reference."""
        try:
            response = (
                self.client.table(self.bookings_table)
                .select("*")
                .eq("booking_id", reference)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get booking: {e}") from e

        if response.data:
            return Booking(**response.data[0])
        return None

    async def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        """Get booking by its row ID."""
        try:
            response = (
                self.client.table(self.bookings_table)
                .select("*")
                .eq("id", booking_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get booking: {e}") from e

        if response.data:
            return Booking(**response.data[0])
        return None

    async def get_all_bookings(
        self,
        status: Optional[BookingStatus] = None,
        branch: Optional[str] = None,
        date: Optional[str] = None,
        limit: int = BOOKINGS_DISPLAY_LIMIT,
    ) -> List[Booking]:
        """
        Get bookings, newest first (admin operation).

        Args:
            status: Filter by booking status
            branch: Filter by branch slug
            date: Filter by appointment date (DD/MM/YYYY)
            limit: Maximum number of bookings to return
        """
        try:
            query = self.client.table(self.bookings_table).select("*")

            if status:
                query = query.eq("status", BookingStatus(status).value)
            if branch:
                query = query.eq("branch", branch)
            if date:
                query = query.eq("date", date)

            response = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            raise DatabaseError(f"Failed to get bookings: {e}") from e

        return [Booking(**item) for item in response.data]

    async def get_bookings_for_report(
        self, page_size: int = REPORT_PAGE_SIZE
    ) -> List[Booking]:
        """
        Get every booking for finance reports.

        PostgREST caps each response at its max-rows setting, so rows are
        fetched in ``page_size`` ranges until a short page comes back.
        """
        bookings: List[Booking] = []
        start = 0
        while True:
            try:
                response = (
                    self.client.table(self.bookings_table)
                    .select("*")
                    .order("created_at", desc=True)
                    .order("id")
                    .range(start, start + page_size - 1)
                    .execute()
                )
            except Exception as e:
                raise DatabaseError(f"Failed to get bookings: {e}") from e

            bookings.extend(Booking(**item) for item in response.data)
            if len(response.data) < page_size:
                return bookings
            start += page_size

    async def _update_booking(
        self, booking_id: str, changes: Dict[str, Any], action: str
    ) -> Optional[Booking]:
        changes = {**changes, "updated_at": to_iso_string(utc_now())}
        try:
            response = (
                self.client.table(self.bookings_table)
                .update(changes)
                .eq("id", booking_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to {action}: {e}") from e

        if not response.data:
            return None
        return Booking(**response.data[0])

    async def update_booking_status(
        self, booking_id: str, status: BookingStatus
    ) -> Optional[Booking]:
        """Update booking status."""
        return await self._update_booking(
            booking_id,
            {"status": BookingStatus(status).value},
            "update booking status",
        )

    async def update_booking_extra_details(
        self, booking_id: str, extra_fee: float, extra_note: Optional[str]
    ) -> Optional[Booking]:
        """Record an extra fee charged at the chair and its note."""
        return await self._update_booking(
            booking_id,
            {"extra_fee": extra_fee, "extra_note": extra_note},
            "update booking extra details",
        )

    async def delete_booking(self, booking_id: str) -> bool:
        """Delete a booking, releasing its reference."""
        try:
            response = (
                self.client.table(self.bookings_table)
                .delete()
                .eq("id", booking_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to delete booking: {e}") from e

        return len(response.data) > 0

    # ========== Finance Operations ==========

    async def get_commission_rates(self) -> List[CommissionRate]:
        """Get configured commission per barber and service."""
        try:
            response = self.client.table("commission_rates").select("*").execute()
        except Exception as e:
            raise DatabaseError(f"Failed to get commission rates: {e}") from e

        return [CommissionRate(**item) for item in response.data]

    async def add_commission_payment(
        self, payment_data: CommissionPaymentCreate
    ) -> CommissionPayment:
        """Record a commission payout."""
        data = payment_data.model_dump(exclude_none=True)
        data["created_at"] = to_iso_string(utc_now())
        try:
            response = (
                self.client.table("commission_payments").insert(data).execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to add commission payment: {e}") from e

        if not response.data:
            raise DatabaseError("Failed to add commission payment: no data returned")

        return CommissionPayment(**response.data[0])

    async def get_commission_payments(
        self, month_key: Optional[str] = None
    ) -> List[CommissionPayment]:
        """Get commission payouts, optionally for one ``YYYY-MM`` month."""
        try:
            query = self.client.table("commission_payments").select("*")
            if month_key:
                query = query.eq("month_key", month_key)
            response = query.execute()
        except Exception as e:
            raise DatabaseError(f"Failed to get commission payments: {e}") from e

        return [CommissionPayment(**item) for item in response.data]


# Global database client instance
_db_client: Optional[SupabaseClient] = None


def get_db_client() -> SupabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = SupabaseClient()
    return _db_client
