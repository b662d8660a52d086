"""Pydantic models for data validation and serialization."""

from .barber import Barber, BarberCreate, BarberUpdate
from .booking import Booking, BookingCreate, BookingRequest, BookingStatus
from .finance import (
    BarberCommission,
    CommissionPayment,
    CommissionPaymentCreate,
    CommissionRate,
    RevenueSummary,
)
from .service import Service, ServiceCreate, ServiceUpdate

__all__ = [
    "Barber",
    "BarberCreate",
    "BarberUpdate",
    "BarberCommission",
    "Booking",
    "BookingCreate",
    "BookingRequest",
    "BookingStatus",
    "CommissionPayment",
    "CommissionPaymentCreate",
    "CommissionRate",
    "RevenueSummary",
    "Service",
    "ServiceCreate",
    "ServiceUpdate",
]
