"""
Revenue and commission figures for the finance dashboard.

Revenue counts a confirmed booking by its deposit and a done booking by what
the customer actually paid (price plus extra fee, minus discount). Commission
accrues only on done bookings.
"""

import logging
from typing import Dict, Iterable, List, Optional

from models.booking import Booking, BookingStatus
from models.finance import (
    BarberCommission,
    CommissionPayment,
    CommissionRate,
    RevenueSummary,
)
from utils.date_utils import month_key as date_month_key

logger = logging.getLogger(__name__)


def _in_month(booking: Booking, month_key: Optional[str]) -> bool:
    if not month_key:
        return True
    try:
        return date_month_key(booking.date) == month_key
    except ValueError:
        logger.warning(
            f"Skipping booking {booking.booking_id} with unparseable date {booking.date!r}"
        )
        return False


def booking_revenue(booking: Booking) -> float:
    """Amount a booking contributes to revenue."""
    if booking.status == BookingStatus.CONFIRMED:
        return booking.deposit_amount
    if booking.status == BookingStatus.DONE:
        return booking.price + booking.extra_fee - booking.discount
    return 0.0


def summarize_revenue(
    bookings: Iterable[Booking], month_key: Optional[str] = None
) -> RevenueSummary:
    """Total booking revenue, for one month or for everything."""
    summary = RevenueSummary(month_key=month_key)
    for booking in bookings:
        if booking.status not in (BookingStatus.CONFIRMED, BookingStatus.DONE):
            continue
        if not _in_month(booking, month_key):
            continue
        summary.revenue += booking_revenue(booking)
        summary.bookings_counted += 1
    return summary


def summarize_commissions(
    bookings: Iterable[Booking],
    rates: Iterable[CommissionRate],
    payments: Iterable[CommissionPayment],
    month_key: Optional[str] = None,
) -> List[BarberCommission]:
    """
    Commission owed to each barber.

    A stored ``commission_amount`` on the booking wins over the configured
    rate for the barber and service.
    """
    rate_map = {(r.barber_id, r.service_id): r.commission_fixed for r in rates}
    stats: Dict[str, BarberCommission] = {}

    for booking in bookings:
        if booking.status != BookingStatus.DONE or not _in_month(booking, month_key):
            continue

        entry = stats.setdefault(
            booking.barber_id,
            BarberCommission(barber_id=booking.barber_id, barber_name=booking.barber_name),
        )
        if booking.commission_amount is not None:
            commission = booking.commission_amount
        else:
            commission = rate_map.get((booking.barber_id, booking.service_id), 0.0)

        entry.total_earning += booking.price
        entry.total_commission += commission
        entry.jobs += 1

    for payment in payments:
        if month_key and payment.month_key != month_key:
            continue
        entry = stats.setdefault(
            payment.barber_id, BarberCommission(barber_id=payment.barber_id)
        )
        entry.total_paid += payment.amount

    for entry in stats.values():
        entry.remaining = entry.total_commission - entry.total_paid
        if entry.remaining <= 0:
            entry.status = "paid"
        elif entry.total_paid > 0:
            entry.status = "partial"
        else:
            entry.status = "pending"

    return sorted(stats.values(), key=lambda e: e.barber_name or e.barber_id)
