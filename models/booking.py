"""Booking models for barbershop appointments."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    """Booking status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    REJECTED = "rejected"
    DONE = "done"
    CANCELLED = "cancelled"
    RESUBMIT = "resubmit"  # customer asked to upload a new payment slip


class Booking(BaseModel):
    """Booking record as stored in the bookings table."""

    id: Optional[str] = None
    booking_id: str = Field(..., description="Customer-facing booking reference")
    barber_id: str
    barber_name: Optional[str] = None
    service_id: str
    service_name: Optional[str] = None
    customer_name: str
    phone: str
    date: str = Field(..., description="Appointment date, DD/MM/YYYY")
    time: str = Field(..., description="Appointment time, HH:MM")
    price: float = Field(..., ge=0)
    deposit_amount: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)
    extra_fee: float = Field(default=0, ge=0)
    extra_note: Optional[str] = None
    slip_url: Optional[str] = None
    branch: Optional[str] = None
    commission_amount: Optional[float] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "booking_id": "K7Q2ZD",
                "barber_id": "uuid-here",
                "service_id": "uuid-here",
                "customer_name": "Somchai",
                "phone": "0812345678",
                "date": "15/01/2026",
                "time": "14:30",
                "price": 350,
                "status": "pending",
            }
        }


class BookingCreate(BaseModel):
    """Booking insert payload, reference already allocated."""

    booking_id: str
    barber_id: str
    barber_name: Optional[str] = None
    service_id: str
    service_name: Optional[str] = None
    customer_name: str
    phone: str
    date: str
    time: str
    price: float
    deposit_amount: float = 0
    slip_url: Optional[str] = None
    branch: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING

    class Config:
        use_enum_values = True


class BookingRequest(BaseModel):
    """Booking form submitted by a customer."""

    barber_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1, max_length=100)
    phone: str
    date: str
    time: str
    deposit_amount: float = Field(default=0, ge=0)
    slip_url: Optional[str] = None
    branch: Optional[str] = None
