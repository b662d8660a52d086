"""
HTTP API for the booking pages and the admin dashboard.

Customer endpoints:
- GET  /api/barbers
- GET  /api/services
- POST /api/bookings
- GET  /api/bookings/{reference}

Admin endpoints:
- GET    /api/admin/bookings
- GET    /api/admin/bookings/{booking_id}
- PATCH  /api/admin/bookings/{booking_id}/status
- PATCH  /api/admin/bookings/{booking_id}/extra
- DELETE /api/admin/bookings/{booking_id}
- GET    /api/admin/barbers, POST /api/admin/barbers
- PATCH  /api/admin/barbers/{barber_id}, DELETE /api/admin/barbers/{barber_id}
- POST   /api/admin/services
- PATCH  /api/admin/services/{service_id}, DELETE /api/admin/services/{service_id}
- GET    /api/admin/finance/summary
- POST   /api/admin/finance/commission-payments
"""

import json
import re
import sys
import time
from typing import Any, Dict, Optional, Type, TypeVar

from aiohttp import web
from aiohttp.web import Request, Response
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from config import settings
from db import SupabaseClient, get_db_client
from models.barber import BarberCreate, BarberUpdate
from models.booking import BookingRequest, BookingStatus
from models.finance import CommissionPaymentCreate
from models.service import ServiceCreate, ServiceUpdate
from services.booking_service import BookingService
from services.finance import summarize_commissions, summarize_revenue
from utils.exceptions import (
    BarberNotFoundError,
    BookingNotFoundError,
    BookingReferenceExhaustedError,
    DatabaseError,
    DuplicateBookingReferenceError,
    ServiceNotFoundError,
    ValidationError,
)
from utils.logging_config import setup_logging

logger = setup_logging(__name__, log_file="webapp.log")

MAX_REQUEST_BODY_SIZE = 64 * 1024  # Booking forms are small; slips go to image hosting
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")

_start_time = time.time()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _error(status: int, error: str, message: str) -> Response:
    return web.json_response(
        {"status": "error", "error": error, "message": message}, status=status
    )


async def _read_json(request: Request) -> dict:
    """Read a JSON object body, raising ValidationError on anything else."""
    raw_body = await request.read()
    if len(raw_body) > MAX_REQUEST_BODY_SIZE:
        raise ValidationError(
            f"Request body exceeds maximum size of {MAX_REQUEST_BODY_SIZE} bytes"
        )
    if not raw_body:
        raise ValidationError("Empty payload")
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _parse_model(model_cls: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
    """Build a request model, reporting field errors as ValidationError."""
    try:
        return model_cls(**payload)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


def _parse_changes(
    model_cls: Type[BaseModel], payload: Dict[str, Any]
) -> Dict[str, Any]:
    changes = _parse_model(model_cls, payload).model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")
    return changes


def _parse_status(value: Optional[str]) -> Optional[BookingStatus]:
    if not value or value == "all":
        return None
    try:
        return BookingStatus(value)
    except ValueError as e:
        raise ValidationError(f"Unknown booking status: {value}") from e


def _deleted(record_id: str) -> Response:
    return web.json_response({"status": "deleted", "id": record_id})


@web.middleware
async def error_middleware(request: Request, handler):
    """Map domain exceptions to JSON error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as e:
        logger.warning(f"Invalid request to {request.path}: {e}")
        return _error(400, "validation_failed", str(e))
    except (BarberNotFoundError, ServiceNotFoundError, BookingNotFoundError) as e:
        return _error(404, "not_found", str(e))
    except DuplicateBookingReferenceError as e:
        logger.warning(f"Duplicate booking reference at insert: {e.reference}")
        return _error(409, "duplicate_reference", "Please submit the booking again")
    except BookingReferenceExhaustedError as e:
        logger.error(f"Booking reference allocation failed: {e}")
        return _error(503, "reference_unavailable", "Please try again later")
    except DatabaseError as e:
        logger.error(f"Database error on {request.path}: {e}", exc_info=True)
        return _error(500, "database_error", "Internal server error")
    except Exception as e:
        logger.error(f"Unexpected error on {request.path}: {e}", exc_info=True)
        return _error(500, "internal_error", "Internal server error")


@web.middleware
async def security_headers_middleware(request: Request, handler):
    """Add security headers to all responses."""
    response = await handler(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "same-origin"
    if settings.environment == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )

    return response


async def health_check(request: Request) -> Response:
    """Health check endpoint."""
    return web.json_response(
        {
            "status": "ok",
            "service": "barbershop-booking",
            "environment": settings.environment,
            "uptime_hours": round((time.time() - _start_time) / 3600, 2),
        }
    )


# ========== Customer Endpoints ==========


async def list_barbers(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    barbers = await db.get_barbers(active_only=True)
    return web.json_response([b.model_dump(mode="json") for b in barbers])


async def list_services(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    services = await db.get_services()
    return web.json_response([s.model_dump(mode="json") for s in services])


async def create_booking(request: Request) -> Response:
    """Submit a booking; the response carries the allocated reference."""
    payload = await _read_json(request)
    booking_request = _parse_model(BookingRequest, payload)

    service: BookingService = request.app["booking_service"]
    booking = await service.create_booking(booking_request)

    return web.json_response(booking.model_dump(mode="json"), status=201)


async def get_booking_status(request: Request) -> Response:
    service: BookingService = request.app["booking_service"]
    booking = await service.get_booking_status(request.match_info["reference"])
    return web.json_response(booking.model_dump(mode="json"))


# ========== Admin Endpoints ==========


async def admin_list_bookings(request: Request) -> Response:
    service: BookingService = request.app["booking_service"]
    bookings = await service.list_bookings(
        status=_parse_status(request.query.get("status")),
        branch=request.query.get("branch") or None,
        date=request.query.get("date") or None,
    )
    return web.json_response([b.model_dump(mode="json") for b in bookings])


async def admin_get_booking(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    booking_id = request.match_info["booking_id"]
    booking = await db.get_booking_by_id(booking_id)
    if not booking:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return web.json_response(booking.model_dump(mode="json"))


async def admin_update_status(request: Request) -> Response:
    payload = await _read_json(request)
    status = _parse_status(payload.get("status"))
    if status is None:
        raise ValidationError("Field 'status' is required")

    service: BookingService = request.app["booking_service"]
    booking = await service.update_status(request.match_info["booking_id"], status)
    return web.json_response(booking.model_dump(mode="json"))


async def admin_update_extra(request: Request) -> Response:
    payload = await _read_json(request)
    try:
        extra_fee = float(payload.get("extra_fee", 0))
    except (TypeError, ValueError) as e:
        raise ValidationError("Field 'extra_fee' must be a number") from e

    service: BookingService = request.app["booking_service"]
    booking = await service.update_extra_details(
        request.match_info["booking_id"], extra_fee, payload.get("extra_note")
    )
    return web.json_response(booking.model_dump(mode="json"))


async def admin_delete_booking(request: Request) -> Response:
    """Delete a booking; its reference becomes free again."""
    db: SupabaseClient = request.app["db"]
    booking_id = request.match_info["booking_id"]
    if not await db.delete_booking(booking_id):
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    logger.info(f"Booking {booking_id} deleted")
    return _deleted(booking_id)


# ========== Admin Catalog Endpoints ==========


async def admin_list_barbers(request: Request) -> Response:
    """All barbers, including those not taking bookings."""
    db: SupabaseClient = request.app["db"]
    barbers = await db.get_barbers(active_only=False)
    return web.json_response([b.model_dump(mode="json") for b in barbers])


async def admin_add_barber(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    barber = await db.add_barber(_parse_model(BarberCreate, await _read_json(request)))
    return web.json_response(barber.model_dump(mode="json"), status=201)


async def admin_update_barber(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    barber_id = request.match_info["barber_id"]
    changes = _parse_changes(BarberUpdate, await _read_json(request))
    barber = await db.update_barber(barber_id, changes)
    if not barber:
        raise BarberNotFoundError(f"Barber {barber_id} not found")
    return web.json_response(barber.model_dump(mode="json"))


async def admin_delete_barber(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    barber_id = request.match_info["barber_id"]
    if not await db.delete_barber(barber_id):
        raise BarberNotFoundError(f"Barber {barber_id} not found")
    return _deleted(barber_id)


async def admin_add_service(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    service = await db.add_service(_parse_model(ServiceCreate, await _read_json(request)))
    return web.json_response(service.model_dump(mode="json"), status=201)


async def admin_update_service(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    service_id = request.match_info["service_id"]
    changes = _parse_changes(ServiceUpdate, await _read_json(request))
    service = await db.update_service(service_id, changes)
    if not service:
        raise ServiceNotFoundError(f"Service {service_id} not found")
    return web.json_response(service.model_dump(mode="json"))


async def admin_delete_service(request: Request) -> Response:
    db: SupabaseClient = request.app["db"]
    service_id = request.match_info["service_id"]
    if not await db.delete_service(service_id):
        raise ServiceNotFoundError(f"Service {service_id} not found")
    return _deleted(service_id)


# ========== Admin Finance Endpoints ==========


async def admin_finance_summary(request: Request) -> Response:
    month = request.query.get("month") or None
    if month and not _MONTH_KEY_RE.match(month):
        raise ValidationError("Query parameter 'month' must be YYYY-MM")

    db: SupabaseClient = request.app["db"]
    bookings = await db.get_bookings_for_report()
    rates = await db.get_commission_rates()
    payments = await db.get_commission_payments(month)

    revenue = summarize_revenue(bookings, month)
    commissions = summarize_commissions(bookings, rates, payments, month)

    return web.json_response(
        {
            "revenue": revenue.model_dump(mode="json"),
            "commissions": [c.model_dump(mode="json") for c in commissions],
            "unpaid_commission": max(
                0.0, sum(c.total_commission - c.total_paid for c in commissions)
            ),
        }
    )


async def admin_pay_commission(request: Request) -> Response:
    """Record a commission payout to a barber for one month."""
    payment_data = _parse_model(CommissionPaymentCreate, await _read_json(request))

    db: SupabaseClient = request.app["db"]
    if not await db.get_barber_by_id(payment_data.barber_id):
        raise BarberNotFoundError(f"Barber {payment_data.barber_id} not found")

    payment = await db.add_commission_payment(payment_data)
    logger.info(
        f"Commission paid: barber={payment.barber_id}, "
        f"month={payment.month_key}, amount={payment.amount}"
    )
    return web.json_response(payment.model_dump(mode="json"), status=201)


def create_app(db: Optional[SupabaseClient] = None) -> web.Application:
    """
    Create aiohttp application with middleware and routes.

    Args:
        db: Database client; the shared Supabase client when omitted
    """
    app = web.Application(
        middlewares=[security_headers_middleware, error_middleware],
        client_max_size=MAX_REQUEST_BODY_SIZE,
    )

    db = db or get_db_client()
    app["db"] = db
    app["booking_service"] = BookingService(db)

    app.router.add_get("/health", health_check)
    app.router.add_get("/api/barbers", list_barbers)
    app.router.add_get("/api/services", list_services)
    app.router.add_post("/api/bookings", create_booking)
    app.router.add_get("/api/bookings/{reference}", get_booking_status)

    app.router.add_get("/api/admin/bookings", admin_list_bookings)
    app.router.add_get("/api/admin/bookings/{booking_id}", admin_get_booking)
    app.router.add_patch("/api/admin/bookings/{booking_id}/status", admin_update_status)
    app.router.add_patch("/api/admin/bookings/{booking_id}/extra", admin_update_extra)
    app.router.add_delete("/api/admin/bookings/{booking_id}", admin_delete_booking)

    app.router.add_get("/api/admin/barbers", admin_list_barbers)
    app.router.add_post("/api/admin/barbers", admin_add_barber)
    app.router.add_patch("/api/admin/barbers/{barber_id}", admin_update_barber)
    app.router.add_delete("/api/admin/barbers/{barber_id}", admin_delete_barber)
    app.router.add_post("/api/admin/services", admin_add_service)
    app.router.add_patch("/api/admin/services/{service_id}", admin_update_service)
    app.router.add_delete("/api/admin/services/{service_id}", admin_delete_service)

    app.router.add_get("/api/admin/finance/summary", admin_finance_summary)
    app.router.add_post(
        "/api/admin/finance/commission-payments", admin_pay_commission
    )

    return app


if __name__ == "__main__":
    try:
        settings.validate_all_required()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info(f"Starting booking API on {settings.host}:{settings.port}")
    web.run_app(create_app(), host=settings.host, port=settings.port)
