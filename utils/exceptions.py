"""
Custom exception classes for better error handling.
Provides specific error types instead of generic exceptions.
"""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class BarberNotFoundError(DatabaseError):
    """Raised when a barber is not found."""

    pass


class ServiceNotFoundError(DatabaseError):
    """Raised when a service is not found."""

    pass


class BookingNotFoundError(DatabaseError):
    """Raised when a booking is not found."""

    pass


class BookingCreationError(DatabaseError):
    """Raised when booking creation fails."""

    pass


class DuplicateBookingReferenceError(BookingCreationError):
    """Raised when storage rejects a booking whose reference is already taken."""

    def __init__(self, reference: str):
        super().__init__(f"Booking reference {reference} is already in use")
        self.reference = reference


class BookingReferenceExhaustedError(Exception):
    """Raised when no free booking reference was found within the attempt limit."""

    def __init__(self, attempts: int):
        super().__init__(
            f"No free booking reference found after {attempts} attempts"
        )
        self.attempts = attempts


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass
