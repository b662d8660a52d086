"""Database access for barbers, services, bookings and commissions."""

from .supabase_client import SupabaseClient, get_db_client

__all__ = ["SupabaseClient", "get_db_client"]
