"""Finance models: commission configuration, payouts and summaries."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CommissionRate(BaseModel):
    """Fixed commission a barber earns per completed service."""

    barber_id: str
    service_id: str
    commission_fixed: float = Field(default=0, ge=0)


class CommissionPayment(BaseModel):
    """Commission paid out to a barber."""

    id: Optional[str] = None
    barber_id: str
    amount: float = Field(..., gt=0)
    month_key: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class CommissionPaymentCreate(BaseModel):
    """Commission payment creation model."""

    barber_id: str
    amount: float = Field(..., gt=0)
    month_key: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    note: Optional[str] = None


class BarberCommission(BaseModel):
    """Commission totals for one barber."""

    barber_id: str
    barber_name: Optional[str] = None
    total_earning: float = 0
    total_commission: float = 0
    total_paid: float = 0
    remaining: float = 0
    status: str = "pending"
    jobs: int = 0


class RevenueSummary(BaseModel):
    """Booking revenue for a period."""

    month_key: Optional[str] = None
    revenue: float = 0
    bookings_counted: int = 0
