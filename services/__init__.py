"""Booking flow and finance reporting built on the database client."""

from .booking_service import BookingService
from .finance import booking_revenue, summarize_commissions, summarize_revenue

__all__ = [
    "BookingService",
    "booking_revenue",
    "summarize_commissions",
    "summarize_revenue",
]
