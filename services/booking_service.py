"""
Booking creation and lookup flow.

Creating a booking is two separate calls against the database: allocate a
free reference, then insert the record. Nothing reserves the reference in
between, so see ``utils.booking_reference`` for the uniqueness caveat.
"""

import math
from typing import List, Optional

from config import settings
from db.supabase_client import SupabaseClient
from models.booking import Booking, BookingCreate, BookingRequest, BookingStatus
from utils.booking_reference import (
    BookingReferenceAllocator,
    is_valid_booking_reference,
    normalize_booking_reference,
)
from utils.constants import MAX_CUSTOMER_NAME_LENGTH, MAX_NOTES_LENGTH
from utils.date_utils import format_date_ddmmyyyy, is_ddmmyyyy
from utils.exceptions import (
    BarberNotFoundError,
    BookingNotFoundError,
    ServiceNotFoundError,
    ValidationError,
)
from utils.logging_config import setup_logging
from utils.validation import sanitize_text, validate_phone, validate_time

logger = setup_logging(__name__, log_file="bookings.log")


class BookingService:
    """Booking operations used by the customer pages and the admin dashboard."""

    def __init__(
        self,
        db: SupabaseClient,
        allocator: Optional[BookingReferenceAllocator] = None,
    ):
        self.db = db
        self.allocator = allocator or BookingReferenceAllocator(
            exists=db.booking_reference_exists,
            max_attempts=settings.booking_reference_max_attempts,
        )

    async def create_booking(self, request: BookingRequest) -> Booking:
        """
        Validate a booking form, allocate a reference and store the booking.

        Raises:
            ValidationError: Bad phone, date or time, or inactive barber
            BarberNotFoundError: Unknown barber
            ServiceNotFoundError: Unknown service
            BookingReferenceExhaustedError: No free reference found
            DuplicateBookingReferenceError: Reference taken before the insert
            DatabaseError: Any storage failure
        """
        customer_name = sanitize_text(request.customer_name, MAX_CUSTOMER_NAME_LENGTH)
        if not customer_name:
            raise ValidationError("Customer name is required")
        if not validate_phone(request.phone):
            raise ValidationError(f"Invalid phone number: {request.phone}")
        if not validate_time(request.time):
            raise ValidationError(f"Invalid time, expected HH:MM: {request.time}")

        booking_date = format_date_ddmmyyyy(request.date)
        if not is_ddmmyyyy(booking_date):
            raise ValidationError(f"Invalid date: {request.date}")

        barber = await self.db.get_barber_by_id(request.barber_id)
        if not barber:
            raise BarberNotFoundError(f"Barber {request.barber_id} not found")
        if not barber.is_active:
            raise ValidationError(f"Barber {barber.name} is not taking bookings")

        service = await self.db.get_service_by_id(request.service_id)
        if not service:
            raise ServiceNotFoundError(f"Service {request.service_id} not found")

        reference = await self.allocator.allocate()

        booking = await self.db.create_booking(
            BookingCreate(
                booking_id=reference,
                barber_id=request.barber_id,
                barber_name=barber.name,
                service_id=request.service_id,
                service_name=service.title,
                customer_name=customer_name,
                phone=request.phone,
                date=booking_date,
                time=request.time,
                price=service.price,
                deposit_amount=request.deposit_amount,
                slip_url=request.slip_url,
                branch=request.branch or barber.branch,
                status=BookingStatus.PENDING,
            )
        )

        logger.info(
            f"Booking created: reference={booking.booking_id}, "
            f"barber={barber.name}, date={booking_date} {request.time}"
        )
        return booking

    async def get_booking_status(self, reference: str) -> Booking:
        """
        Look up a booking by the reference a customer typed in.

        Raises:
            ValidationError: If the reference is malformed
            BookingNotFoundError: If no booking carries the reference
        """
        reference = normalize_booking_reference(reference or "")
        if not is_valid_booking_reference(reference):
            raise ValidationError(f"Invalid booking reference: {reference}")

        booking = await self.db.get_booking_by_reference(reference)
        if not booking:
            raise BookingNotFoundError(f"Booking {reference} not found")
        return booking

    async def list_bookings(
        self,
        status: Optional[BookingStatus] = None,
        branch: Optional[str] = None,
        date: Optional[str] = None,
    ) -> List[Booking]:
        """List bookings for the admin dashboard."""
        if date:
            normalized = format_date_ddmmyyyy(date)
            if not is_ddmmyyyy(normalized):
                raise ValidationError(f"Invalid date: {date}")
            date = normalized
        return await self.db.get_all_bookings(status=status, branch=branch, date=date)

    async def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """Change a booking's status."""
        booking = await self.db.update_booking_status(booking_id, status)
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        logger.info(f"Booking {booking.booking_id} status -> {booking.status}")
        return booking

    async def update_extra_details(
        self, booking_id: str, extra_fee: float, extra_note: Optional[str] = None
    ) -> Booking:
        """Record an extra fee and note added at the chair."""
        if not math.isfinite(extra_fee):
            raise ValidationError(f"Extra fee must be a finite number: {extra_fee}")
        if extra_fee < 0:
            raise ValidationError("Extra fee cannot be negative")

        booking = await self.db.update_booking_extra_details(
            booking_id,
            extra_fee,
            sanitize_text(extra_note or "", MAX_NOTES_LENGTH) or None,
        )
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking
