"""
Unit tests for Supabase database client.
Tests with mocked Supabase API calls.
"""

from unittest.mock import MagicMock, patch

import pytest
from postgrest.exceptions import APIError

from db.supabase_client import SupabaseClient
from models.booking import BookingCreate, BookingStatus
from models.finance import CommissionPaymentCreate
from services.finance import summarize_revenue
from utils.exceptions import (
    BookingCreationError,
    DatabaseError,
    DuplicateBookingReferenceError,
)

BOOKING_ROW = {
    "id": "row_123",
    "booking_id": "K7Q2ZD",
    "barber_id": "barber_1",
    "barber_name": "Anan",
    "service_id": "service_1",
    "service_name": "Haircut",
    "customer_name": "Somchai",
    "phone": "0812345678",
    "date": "15/01/2026",
    "time": "14:30",
    "price": 350,
    "status": "pending",
}


@pytest.fixture
def supabase_client(mock_supabase_client):
    """Create SupabaseClient with mocked client."""
    mock_client, _ = mock_supabase_client
    with patch("db.supabase_client.create_client", return_value=mock_client):
        client = SupabaseClient()
        client.client = mock_client
        return client


def _booking_create(reference: str = "K7Q2ZD") -> BookingCreate:
    return BookingCreate(
        booking_id=reference,
        barber_id="barber_1",
        service_id="service_1",
        customer_name="Somchai",
        phone="0812345678",
        date="15/01/2026",
        time="14:30",
        price=350,
    )


class TestBookingReferenceExists:
    """Namespace collision check."""

    @pytest.mark.asyncio
    async def test_reference_taken(self, supabase_client, mock_supabase_client):
        mock_client, mock_table = mock_supabase_client
        query = mock_table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[{"id": "row_123"}])

        assert await supabase_client.booking_reference_exists("K7Q2ZD") is True
        mock_client.table.assert_called_with("bookings")
        mock_table.select.return_value.eq.assert_called_with("booking_id", "K7Q2ZD")

    @pytest.mark.asyncio
    async def test_reference_free(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        query = mock_table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[])

        assert await supabase_client.booking_reference_exists("K7Q2ZD") is False

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(
        self, supabase_client, mock_supabase_client
    ):
        _, mock_table = mock_supabase_client
        query = mock_table.select.return_value.eq.return_value.limit.return_value
        query.execute.side_effect = ConnectionError("timeout")

        with pytest.raises(DatabaseError, match="timeout"):
            await supabase_client.booking_reference_exists("K7Q2ZD")

    @pytest.mark.asyncio
    async def test_never_cached(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        query = mock_table.select.return_value.eq.return_value.limit.return_value
        query.execute.side_effect = [MagicMock(data=[]), MagicMock(data=[{"id": "x"}])]

        assert await supabase_client.booking_reference_exists("K7Q2ZD") is False
        assert await supabase_client.booking_reference_exists("K7Q2ZD") is True


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_success(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.insert.return_value.execute.return_value = MagicMock(
            data=[BOOKING_ROW]
        )

        result = await supabase_client.create_booking(_booking_create())

        assert result.id == "row_123"
        assert result.booking_id == "K7Q2ZD"
        assert result.status == BookingStatus.PENDING
        inserted = mock_table.insert.call_args[0][0]
        assert inserted["booking_id"] == "K7Q2ZD"
        assert "created_at" in inserted

    @pytest.mark.asyncio
    async def test_unique_violation(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.insert.return_value.execute.side_effect = APIError(
            {
                "code": "23505",
                "message": "duplicate key value violates unique constraint",
                "details": "Key (booking_id)=(K7Q2ZD) already exists.",
                "hint": None,
            }
        )

        with pytest.raises(DuplicateBookingReferenceError) as exc_info:
            await supabase_client.create_booking(_booking_create())

        assert exc_info.value.reference == "K7Q2ZD"

    @pytest.mark.asyncio
    async def test_other_api_error(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.insert.return_value.execute.side_effect = APIError(
            {"code": "42501", "message": "permission denied", "details": None, "hint": None}
        )

        with pytest.raises(BookingCreationError) as exc_info:
            await supabase_client.create_booking(_booking_create())

        assert not isinstance(exc_info.value, DuplicateBookingReferenceError)

    @pytest.mark.asyncio
    async def test_no_data_returned(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.insert.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(BookingCreationError, match="no data returned"):
            await supabase_client.create_booking(_booking_create())


class TestBookingQueries:
    @pytest.mark.asyncio
    async def test_get_booking_by_reference(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[BOOKING_ROW]
        )

        result = await supabase_client.get_booking_by_reference("K7Q2ZD")

        assert result is not None
        assert result.customer_name == "Somchai"

    @pytest.mark.asyncio
    async def test_get_booking_by_reference_missing(
        self, supabase_client, mock_supabase_client
    ):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[]
        )

        assert await supabase_client.get_booking_by_reference("K7Q2ZD") is None

    @pytest.mark.asyncio
    async def test_get_all_bookings(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.order.return_value.limit.return_value.execute.return_value = MagicMock(
            data=[BOOKING_ROW]
        )

        result = await supabase_client.get_all_bookings(limit=10)

        assert len(result) == 1
        mock_table.select.return_value.order.assert_called_with("created_at", desc=True)

    @pytest.mark.asyncio
    async def test_update_booking_status(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{**BOOKING_ROW, "status": "confirmed"}]
        )

        result = await supabase_client.update_booking_status(
            "row_123", BookingStatus.CONFIRMED
        )

        assert result is not None
        assert result.status == BookingStatus.CONFIRMED
        changes = mock_table.update.call_args[0][0]
        assert changes["status"] == "confirmed"
        assert "updated_at" in changes

    @pytest.mark.asyncio
    async def test_update_booking_status_missing(
        self, supabase_client, mock_supabase_client
    ):
        _, mock_table = mock_supabase_client
        mock_table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[]
        )

        assert await supabase_client.update_booking_status("nope", "done") is None

    @pytest.mark.asyncio
    async def test_update_extra_details(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{**BOOKING_ROW, "extra_fee": 100, "extra_note": "beard trim"}]
        )

        result = await supabase_client.update_booking_extra_details(
            "row_123", 100, "beard trim"
        )

        assert result.extra_fee == 100
        assert result.extra_note == "beard trim"


class TestBarbersAndServices:
    @pytest.mark.asyncio
    async def test_get_barbers_is_cached(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        execute = mock_table.select.return_value.order.return_value.execute
        execute.return_value = MagicMock(data=[{"id": "barber_1", "name": "Anan"}])

        first = await supabase_client.get_barbers()
        second = await supabase_client.get_barbers()

        assert first == second
        assert execute.call_count == 1

    @pytest.mark.asyncio
    async def test_get_barber_by_id_missing(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[]
        )

        assert await supabase_client.get_barber_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_get_service_by_id(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"id": "service_1", "title": "Haircut", "price": 350}]
        )

        result = await supabase_client.get_service_by_id("service_1")

        assert result.title == "Haircut"
        assert result.duration_minutes == 30

    @pytest.mark.asyncio
    async def test_delete_barber_clears_cache(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        supabase_client._set_cache("barbers:active=False", [])
        mock_table.delete.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"id": "barber_1"}]
        )

        assert await supabase_client.delete_barber("barber_1") is True
        assert supabase_client._get_from_cache("barbers:active=False") is None


class TestCommissionPayments:
    @pytest.mark.asyncio
    async def test_add_commission_payment(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.insert.return_value.execute.return_value = MagicMock(
            data=[
                {"id": "pay_1", "barber_id": "barber_1", "amount": 500, "month_key": "2026-01"}
            ]
        )

        result = await supabase_client.add_commission_payment(
            CommissionPaymentCreate(barber_id="barber_1", amount=500, month_key="2026-01")
        )

        assert result.id == "pay_1"
        assert result.amount == 500


class TestAdminMaintenance:
    @pytest.mark.asyncio
    async def test_get_booking_by_id(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[BOOKING_ROW]
        )

        result = await supabase_client.get_booking_by_id("row_123")

        assert result.booking_id == "K7Q2ZD"
        mock_table.select.return_value.eq.assert_called_with("id", "row_123")

    @pytest.mark.asyncio
    async def test_delete_booking(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.delete.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[]
        )

        assert await supabase_client.delete_booking("nope") is False

    @pytest.mark.asyncio
    async def test_update_service_clears_cache(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        supabase_client._set_cache("services:all", [])
        mock_table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"id": "service_1", "title": "Haircut", "price": 400}]
        )

        result = await supabase_client.update_service("service_1", {"price": 400})

        assert result.price == 400
        assert supabase_client._get_from_cache("services:all") is None

    @pytest.mark.asyncio
    async def test_update_barber_missing(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        mock_table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[]
        )

        assert await supabase_client.update_barber("nope", {"is_active": False}) is None


class TestBookingsForReport:
    @staticmethod
    def _range_query(mock_table):
        return mock_table.select.return_value.order.return_value.order.return_value.range

    @pytest.mark.asyncio
    async def test_reads_every_page(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        range_query = self._range_query(mock_table)
        range_query.return_value.execute.side_effect = [
            MagicMock(
                data=[
                    {**BOOKING_ROW, "id": "row_3", "booking_id": "CCCCCC", "date": "20/03/2026"},
                    {**BOOKING_ROW, "id": "row_2", "booking_id": "BBBBBB", "date": "10/02/2026"},
                ]
            ),
            MagicMock(
                data=[
                    {
                        **BOOKING_ROW,
                        "id": "row_1",
                        "booking_id": "AAAAAA",
                        "status": "done",
                        "date": "15/01/2026",
                    }
                ]
            ),
        ]

        bookings = await supabase_client.get_bookings_for_report(page_size=2)

        assert [b.booking_id for b in bookings] == ["CCCCCC", "BBBBBB", "AAAAAA"]
        assert [c.args for c in range_query.call_args_list] == [(0, 1), (2, 3)]

        january = summarize_revenue(bookings, "2026-01")
        assert january.revenue == 350
        assert january.bookings_counted == 1

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        range_query = self._range_query(mock_table)
        range_query.return_value.execute.side_effect = [
            MagicMock(data=[BOOKING_ROW, {**BOOKING_ROW, "id": "row_2"}]),
            MagicMock(data=[]),
        ]

        bookings = await supabase_client.get_bookings_for_report(page_size=2)

        assert len(bookings) == 2
        assert range_query.call_count == 2

    @pytest.mark.asyncio
    async def test_query_failure(self, supabase_client, mock_supabase_client):
        _, mock_table = mock_supabase_client
        self._range_query(mock_table).return_value.execute.side_effect = ConnectionError(
            "timeout"
        )

        with pytest.raises(DatabaseError):
            await supabase_client.get_bookings_for_report()
